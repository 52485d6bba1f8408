"""
Deployment Parameter Models

The immutable parameter record every stage receives, and the scoped
secret wrapper used for the repository access token.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from hostdeploy.constants import (
    DEFAULT_BRANCH,
    DEFAULT_LOCAL_DIR,
    DEFAULT_PUBLIC_PORT,
    SECRET_MASK,
)


class Secret:
    """
    A credential that is never rendered in logs, reprs or summaries.

    The raw value is only available through reveal(), which the single
    operation that needs it calls at the moment it builds its command.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str):
        self._value = value

    def reveal(self) -> str:
        return self._value

    def __bool__(self) -> bool:
        return bool(self._value)

    def __eq__(self, other) -> bool:
        return isinstance(other, Secret) and other._value == self._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        return SECRET_MASK

    def __repr__(self) -> str:
        return f"Secret('{SECRET_MASK}')"


@dataclass(frozen=True)
class DeploymentParameters:
    """Validated deployment parameters, built once before the pipeline starts."""

    repo_url: str
    remote_host: str
    remote_user: str
    ssh_key_path: str
    app_port: int
    branch: str = DEFAULT_BRANCH
    credential: Optional[Secret] = None
    local_dir: str = DEFAULT_LOCAL_DIR
    public_port: int = DEFAULT_PUBLIC_PORT

    @property
    def repo_name(self) -> str:
        """Stable local checkout name (last path segment, .git stripped)."""
        tail = self.repo_url.rstrip("/").replace(":", "/").rsplit("/", 1)[-1]
        if tail.endswith(".git"):
            tail = tail[: -len(".git")]
        return tail

    @property
    def uses_token_transport(self) -> bool:
        """Check if the repository is fetched over HTTPS (token-capable)."""
        return self.repo_url.startswith("https://")

    @property
    def remote_identity(self) -> str:
        """Get remote identity (user@host)."""
        return f"{self.remote_user}@{self.remote_host}"

    @property
    def key_path_expanded(self) -> Path:
        return Path(self.ssh_key_path).expanduser()

    @property
    def local_dir_expanded(self) -> Path:
        return Path(self.local_dir).expanduser()

    @property
    def working_copy(self) -> Path:
        """Local working copy path for this repository."""
        return self.local_dir_expanded / self.repo_name

    @property
    def public_url(self) -> str:
        if self.public_port == 80:
            return f"http://{self.remote_host}"
        return f"http://{self.remote_host}:{self.public_port}"

    def __repr__(self) -> str:
        return (
            f"DeploymentParameters(repo={self.repo_url}, branch={self.branch}, "
            f"remote={self.remote_identity}, port={self.app_port})"
        )
