"""
Source Acquisition Service

Obtains a local working copy of the requested branch: pulls an existing
checkout, or clones fresh, falling back to the default branch when the
requested one does not exist upstream.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit

from hostdeploy.constants import BUILD_DESCRIPTORS, SECRET_MASK
from hostdeploy.exceptions import SourceError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.params import DeploymentParameters, Secret
from hostdeploy.services.commands import GitCommands
from hostdeploy.services.local_service import LocalRunner


def authenticated_url(url: str, credential: Secret) -> str:
    """Embed the token as the userinfo of an https URL."""
    parts = urlsplit(url)
    host = parts.netloc.rsplit("@", 1)[-1]
    token = quote(credential.reveal(), safe="")
    return urlunsplit((parts.scheme, f"{token}@{host}", parts.path, parts.query, parts.fragment))


def masked_url(url: str) -> str:
    parts = urlsplit(url)
    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit((parts.scheme, f"{SECRET_MASK}@{host}", parts.path, parts.query, parts.fragment))


def is_missing_branch(stderr: str) -> bool:
    """Clone reports 'Remote branch X not found', fetch 'couldn't find remote ref X'."""
    text = stderr.lower()
    return ("remote branch" in text and "not found" in text) or "couldn't find remote ref" in text


class SourceService:
    """
    Source acquisition for one run.

    Idempotency: the checkout is reused when present (pull), so repeated
    runs converge on the tip of the requested branch.
    """

    def __init__(
        self,
        params: DeploymentParameters,
        logger: DeployLogger,
        runner: Optional[LocalRunner] = None,
    ):
        self.params = params
        self.logger = logger
        self.runner = runner or LocalRunner(logger)

    def _auth_url(self) -> Optional[str]:
        credential = self.params.credential
        if credential and self.params.uses_token_transport:
            url = authenticated_url(self.params.repo_url, credential)
            self.logger.register_secret(credential)
            self.logger.register_secret(quote(credential.reveal(), safe=""))
            return url
        return None

    def acquire(self) -> tuple[Path, str]:
        """
        Produce the working copy.

        Returns:
            Tuple of (working copy path, branch actually checked out)

        Raises:
            SourceError: If clone or pull fails, or no build descriptor exists
        """
        working_copy = self.params.working_copy

        if (working_copy / ".git").exists() and self._is_repository(working_copy):
            self.logger.info(f"Repository '{self.params.repo_name}' exists, pulling latest changes")
            branch = self._update(working_copy)
        elif working_copy.exists() and any(working_copy.iterdir()):
            raise SourceError(
                f"{working_copy} exists but is not a git repository",
                context="Remove it or choose another local directory",
            )
        else:
            branch = self._clone(working_copy)

        descriptor = self.find_build_descriptor(working_copy)
        if descriptor is None:
            raise SourceError(
                "No Dockerfile or compose file found in repository",
                context=f"Looked for: {', '.join(BUILD_DESCRIPTORS)}",
            )
        self.logger.success(f"{descriptor} found")

        return working_copy, branch

    def _is_repository(self, path: Path) -> bool:
        return self.runner.run(GitCommands.is_repository(), cwd=path).is_success

    def _current_branch(self, path: Path) -> str:
        result = self.runner.run(GitCommands.current_branch(), cwd=path)
        return result.stdout.strip() if result.is_success else ""

    def _update(self, path: Path) -> str:
        branch = self.params.branch
        auth_url = self._auth_url()
        shown_url = masked_url(self.params.repo_url) if auth_url else None
        current = self._current_branch(path)

        if current != branch:
            self.logger.info(f"Switching branch from {current or 'unknown'} to {branch}")
            fetched = self.runner.run(
                GitCommands.fetch(branch, auth_url),
                cwd=path,
                display=" ".join(GitCommands.fetch(branch, shown_url)),
            )
            if fetched.is_failure and current and is_missing_branch(fetched.stderr):
                self.logger.warning(
                    f"Branch '{branch}' not found upstream, updating '{current}' instead"
                )
                branch = current
            else:
                if fetched.is_failure:
                    self.logger.warning(f"Failed to fetch branch {branch}")
                checked_out = self.runner.run(GitCommands.checkout(branch), cwd=path)
                if checked_out.is_failure:
                    self.logger.warning(f"Failed to switch to branch {branch}")

        pulled = self.runner.run(
            GitCommands.pull(branch, auth_url),
            cwd=path,
            description=f"Pulling {branch}",
            display=" ".join(GitCommands.pull(branch, shown_url)),
        )
        if pulled.is_failure:
            raise SourceError(
                "Failed to pull latest changes. Check your access or network.",
                context=self.logger.redact(pulled.stderr.strip()),
            )

        effective = self._current_branch(path) or branch
        if effective != self.params.branch:
            self.logger.warning(
                f"Deploying branch '{effective}' instead of requested '{self.params.branch}'"
            )
        return effective

    def _clone(self, working_copy: Path) -> str:
        parent = working_copy.parent
        parent.mkdir(parents=True, exist_ok=True)
        dest = working_copy.name
        auth_url = self._auth_url()
        url = auth_url or self.params.repo_url
        shown_url = masked_url(self.params.repo_url) if auth_url else self.params.repo_url
        branch = self.params.branch

        self.logger.info(f"Cloning {self.params.repo_url} ({branch})")
        cloned = self.runner.run(
            GitCommands.clone(url, dest, branch),
            cwd=parent,
            description=f"Cloning {self.params.repo_name}",
            display=" ".join(GitCommands.clone(shown_url, dest, branch)),
        )

        if cloned.is_failure and is_missing_branch(cloned.stderr):
            self.logger.warning(
                f"Branch '{branch}' not found upstream, cloning the default branch instead"
            )
            cloned = self.runner.run(
                GitCommands.clone(url, dest),
                cwd=parent,
                description=f"Cloning {self.params.repo_name} (default branch)",
                display=" ".join(GitCommands.clone(shown_url, dest)),
            )

        if cloned.is_failure:
            raise SourceError(
                "Failed to clone repository",
                context=self.logger.redact(cloned.stderr.strip()) or "Check the URL and your access",
            )

        if auth_url:
            # Keep the token out of .git/config
            reset = self.runner.run(GitCommands.set_origin(self.params.repo_url), cwd=working_copy)
            if reset.is_failure:
                self.logger.warning("Could not reset origin URL after authenticated clone")

        effective = self._current_branch(working_copy) or branch
        if effective != branch:
            self.logger.warning(f"Deploying branch '{effective}' instead of requested '{branch}'")
        return effective

    @staticmethod
    def find_build_descriptor(working_copy: Path) -> Optional[str]:
        for name in BUILD_DESCRIPTORS:
            if (working_copy / name).is_file():
                return name
        return None
