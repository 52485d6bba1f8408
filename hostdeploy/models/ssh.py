"""
SSH Configuration Models

Dataclass models for SSH operations.
"""

from dataclasses import dataclass
from pathlib import Path

from hostdeploy.constants import SSH_CONNECT_TIMEOUT


@dataclass(frozen=True)
class SSHConfig:
    """SSH identity and target host for one run."""

    host: str
    user: str
    key_path: str
    connect_timeout: int = SSH_CONNECT_TIMEOUT

    @property
    def key_path_expanded(self) -> Path:
        """Get expanded key path (resolves ~)."""
        return Path(self.key_path).expanduser()

    @property
    def destination(self) -> str:
        """Get SSH destination (user@host)."""
        return f"{self.user}@{self.host}"

    @property
    def ssh_options(self) -> list[str]:
        """
        Options shared by ssh, scp and rsync's remote shell.

        Host keys are trusted on first use and verified afterwards; BatchMode
        keeps a rejected key from falling through to an interactive prompt.
        """
        return [
            "-i",
            str(self.key_path_expanded),
            "-o",
            "StrictHostKeyChecking=accept-new",
            "-o",
            "BatchMode=yes",
            "-o",
            f"ConnectTimeout={self.connect_timeout}",
            "-o",
            "LogLevel=ERROR",
        ]

    def build_command(self, remote_command: str) -> list[str]:
        """Build full SSH argv with remote command."""
        return ["ssh", *self.ssh_options, self.destination, remote_command]

    def __repr__(self) -> str:
        return f"SSHConfig(user={self.user}, host={self.host}, key={self.key_path})"
