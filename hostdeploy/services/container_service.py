"""
Container Lifecycle Service

absent -> built -> running -> (replaced | stopped), keyed on the fixed
image and container names.
"""

from hostdeploy.constants import CONTAINER_LOG_TAIL
from hostdeploy.exceptions import BuildError, ContainerNotRunningError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.services.commands import DockerCommands
from hostdeploy.services.ssh_service import SSHService


def tail_lines(text: str, count: int = 20) -> str:
    return "\n".join(text.strip().splitlines()[-count:])


class ContainerService:
    """Builds the image and (re)starts the named container."""

    def __init__(self, ssh: SSHService, logger: DeployLogger, artifacts: NamedArtifacts):
        self.ssh = ssh
        self.logger = logger
        self.artifacts = artifacts

    def build(self) -> None:
        """
        Build the image from the transferred source.

        Raises:
            BuildError: If the build fails
        """
        result = self.ssh.execute_docker(
            DockerCommands.build(self.artifacts.image_name, self.artifacts.remote_dir)
        )
        if result.is_failure:
            raise BuildError(
                f"Image build failed for {self.artifacts.image_name}",
                context=tail_lines(result.output),
            )
        self.logger.success(f"Image built: {self.artifacts.image_name}")

    def remove(self) -> bool:
        """Force-remove the named container; absence is not an error."""
        result = self.ssh.execute_docker(DockerCommands.remove_container(self.artifacts.container_name))
        if result.is_success:
            self.logger.log(f"Removed container {self.artifacts.container_name}")
        return result.is_success

    def run(self, port: int) -> bool:
        """
        Replace the container and start it bound to port.

        Binds to loopback first so only the local proxy reaches it, then
        falls back to all interfaces.

        Returns:
            True if the loopback-only bind was used

        Raises:
            ContainerNotRunningError: If neither bind variant starts
        """
        self.remove()

        result = self.ssh.execute_docker(
            DockerCommands.run(
                self.artifacts.image_name, self.artifacts.container_name, port, loopback_only=True
            )
        )
        if result.is_success:
            self.logger.success(f"Container started on 127.0.0.1:{port}")
            return True

        self.logger.warning("Loopback-only bind failed, binding on all interfaces")
        self.remove()
        result = self.ssh.execute_docker(
            DockerCommands.run(
                self.artifacts.image_name, self.artifacts.container_name, port, loopback_only=False
            )
        )
        if result.is_success:
            self.logger.success(f"Container started on 0.0.0.0:{port}")
            return False

        logs = self.capture_logs()
        raise ContainerNotRunningError(
            f"Container {self.artifacts.container_name} could not be started",
            context="\n".join(filter(None, [result.stderr.strip(), logs])),
        )

    def capture_logs(self) -> str:
        result = self.ssh.execute_docker(
            DockerCommands.logs(self.artifacts.container_name, CONTAINER_LOG_TAIL)
        )
        return result.stdout.strip()
