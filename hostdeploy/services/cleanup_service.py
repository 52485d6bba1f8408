"""
Cleanup Reconciler

Tears down every named artifact a deploy creates. Each step is
independent and a failed step never stops the next one.
"""

from hostdeploy.logger import DeployLogger
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.services.commands import DockerCommands, SystemCommands
from hostdeploy.services.proxy_service import ProxyService
from hostdeploy.services.ssh_service import SSHService


class CleanupService:
    """Inverse of the deploy pipeline."""

    def __init__(self, ssh: SSHService, logger: DeployLogger, artifacts: NamedArtifacts):
        self.ssh = ssh
        self.logger = logger
        self.artifacts = artifacts
        self.proxy = ProxyService(ssh, logger, artifacts)

    def remove_container(self) -> bool:
        result = self.ssh.execute_docker(DockerCommands.remove_container(self.artifacts.container_name))
        return self._report(result.is_success, f"container {self.artifacts.container_name}")

    def remove_image(self) -> bool:
        result = self.ssh.execute_docker(DockerCommands.remove_image(self.artifacts.image_name))
        return self._report(result.is_success, f"image {self.artifacts.image_name}")

    def remove_proxy_site(self) -> bool:
        return self._report(self.proxy.remove_site(), f"proxy site {self.artifacts.proxy_site}")

    def reload_proxy(self) -> bool:
        ok = self.proxy.reload_if_valid()
        if ok:
            self.logger.success("Nginx reloaded")
        else:
            self.logger.warning("Nginx reload skipped or failed")
        return ok

    def remove_remote_dir(self) -> bool:
        result = self.ssh.execute(SystemCommands.remove_tree(self.artifacts.remote_dir))
        if result.is_failure:
            # Files written by containers may be root-owned
            result = self.ssh.execute_as_root(SystemCommands.remove_tree(self.artifacts.remote_dir))
        return self._report(result.is_success, f"directory ~/{self.artifacts.remote_dir}")

    def _report(self, ok: bool, what: str) -> bool:
        if ok:
            self.logger.success(f"Removed {what}")
        else:
            self.logger.warning(f"Could not remove {what}")
        return ok
