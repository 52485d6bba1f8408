"""
Prerequisite Reconciler

Ensures the container engine and the reverse proxy are installed on the
remote host. A package that is already present is never reinstalled.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from hostdeploy.constants import DOCKER_APT_PREREQUISITES, DOCKER_GROUP, DOCKER_PACKAGES
from hostdeploy.exceptions import PrerequisiteError
from hostdeploy.logger import DeployLogger
from hostdeploy.services.commands import DockerInstallCommands, SystemCommands
from hostdeploy.services.ssh_service import SSHService


@dataclass(frozen=True)
class InstallStep:
    """One root command of an installation sequence."""

    description: str
    command: str
    best_effort: bool = False


@dataclass(frozen=True)
class RemotePackage:
    """A required remote package: presence probe, install sequence, service."""

    name: str
    binary: str
    service: str
    install_steps: list[InstallStep] = field(default_factory=list)


def docker_package() -> RemotePackage:
    return RemotePackage(
        name="Docker",
        binary="docker",
        service="docker",
        install_steps=[
            InstallStep("Remove stale Docker apt source", DockerInstallCommands.remove_source_list()),
            InstallStep("Refresh package index", SystemCommands.apt_update(), best_effort=True),
            InstallStep(
                "Install apt prerequisites", SystemCommands.apt_install(DOCKER_APT_PREREQUISITES)
            ),
            InstallStep("Create keyring directory", DockerInstallCommands.create_keyring_dir()),
            InstallStep("Import Docker repository key", DockerInstallCommands.import_key()),
            InstallStep("Register Docker apt repository", DockerInstallCommands.register_repository()),
            InstallStep("Refresh package index", SystemCommands.apt_update(), best_effort=True),
            InstallStep("Install Docker packages", SystemCommands.apt_install(DOCKER_PACKAGES)),
            InstallStep("Enable and start Docker", SystemCommands.enable_service("docker")),
        ],
    )


def nginx_package() -> RemotePackage:
    return RemotePackage(
        name="Nginx",
        binary="nginx",
        service="nginx",
        install_steps=[
            InstallStep("Refresh package index", SystemCommands.apt_update(), best_effort=True),
            InstallStep("Install Nginx", SystemCommands.apt_install(["nginx"])),
            InstallStep("Enable and start Nginx", SystemCommands.enable_service("nginx")),
        ],
    )


class PrerequisiteService:
    """Reconciles required remote software."""

    def __init__(
        self,
        ssh: SSHService,
        logger: DeployLogger,
        remote_user: str,
        packages: Optional[list[RemotePackage]] = None,
    ):
        self.ssh = ssh
        self.logger = logger
        self.remote_user = remote_user
        self.packages = packages if packages is not None else [docker_package(), nginx_package()]

    def reconcile(self) -> list[str]:
        """
        Install every absent package, then grant engine group membership
        and verify Compose.

        Returns:
            Names of the packages that were installed by this run

        Raises:
            PrerequisiteError: If a mandatory installation step fails
        """
        installed = []
        for package in self.packages:
            if self.is_present(package):
                self.logger.success(f"{package.name} already installed")
                self._ensure_service(package)
                continue
            self.logger.info(f"{package.name} not found, installing")
            self.install(package)
            installed.append(package.name)
            self.logger.success(f"{package.name} installed")

        self.ensure_group_membership()
        self.ensure_compose()
        return installed

    def is_present(self, package: RemotePackage) -> bool:
        return self.ssh.execute(SystemCommands.command_exists(package.binary)).is_success

    def install(self, package: RemotePackage) -> None:
        for step in package.install_steps:
            result = self.ssh.execute_as_root(step.command)
            if result.is_success:
                continue
            if step.best_effort:
                self.logger.warning(f"{step.description} failed (continuing)")
                continue
            raise PrerequisiteError(
                f"{package.name} installation failed at: {step.description}",
                context=result.output or f"Command: {step.command}",
            )

    def _ensure_service(self, package: RemotePackage) -> None:
        self._best_effort(
            SystemCommands.enable_service(package.service),
            f"Could not enable {package.service} service",
            self.ssh.execute_as_root,
        )

    def ensure_group_membership(self) -> None:
        """Let the login identity use the engine without sudo (takes effect next session)."""
        if self._best_effort(
            SystemCommands.add_user_to_group(self.remote_user, DOCKER_GROUP),
            f"Could not add {self.remote_user} to the {DOCKER_GROUP} group; sudo will be used",
            self.ssh.execute_as_root,
        ):
            self.logger.log(f"{self.remote_user} is a member of {DOCKER_GROUP}")

    def ensure_compose(self) -> None:
        if self.ssh.execute(DockerInstallCommands.compose_available()).is_success:
            self.logger.log("Docker Compose available")
            return
        self.logger.info("Docker Compose not found, installing standalone binary")
        self._best_effort(
            DockerInstallCommands.install_standalone_compose(),
            "Docker Compose installation failed",
            self.ssh.execute_as_root,
        )

    def _best_effort(self, command: str, warning: str, execute: Callable) -> bool:
        result = execute(command)
        if result.is_failure:
            self.logger.warning(warning)
            return False
        return True
