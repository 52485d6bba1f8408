"""
Reverse Proxy Service

Writes the fixed nginx site routing the public port to the container on
loopback. The running nginx is only reloaded after `nginx -t` passes.
"""

from pathlib import Path

from jinja2 import Template

from hostdeploy.constants import PROXY_CONNECT_TIMEOUT, PROXY_READ_TIMEOUT
from hostdeploy.exceptions import ProxyError, ProxySyntaxError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.services.commands import NginxCommands, SystemCommands
from hostdeploy.services.ssh_service import SSHService


class ProxyService:
    """Configures, validates and activates the proxy site."""

    STUB_PATH = Path(__file__).resolve().parent.parent / "stubs" / "nginx" / "site.conf.j2"

    def __init__(self, ssh: SSHService, logger: DeployLogger, artifacts: NamedArtifacts):
        self.ssh = ssh
        self.logger = logger
        self.artifacts = artifacts

    @classmethod
    def render_site(cls, server_name: str, app_port: int, public_port: int) -> str:
        """Render the site definition from the nginx stub."""
        if not cls.STUB_PATH.exists():
            raise FileNotFoundError(f"Template stub not found: {cls.STUB_PATH}")

        template = Template(cls.STUB_PATH.read_text(encoding="utf-8"))
        return (
            template.render(
                server_name=server_name,
                app_port=int(app_port),
                public_port=int(public_port),
                connect_timeout=PROXY_CONNECT_TIMEOUT,
                read_timeout=PROXY_READ_TIMEOUT,
            )
            + "\n"
        )

    def configure(self, server_name: str, app_port: int, public_port: int) -> None:
        """
        Overwrite, link, syntax-check, then reload.

        Raises:
            ProxySyntaxError: If nginx -t fails (nginx is not reloaded)
            ProxyError: If the site cannot be written, linked or reloaded
        """
        content = self.render_site(server_name, app_port, public_port)
        available = self.artifacts.proxy_available_path
        enabled = self.artifacts.proxy_enabled_path

        written = self.ssh.execute_as_root(SystemCommands.write_file(available), input_text=content)
        if written.is_failure:
            raise ProxyError(f"Could not write {available}", context=written.output)
        self.logger.log(f"Wrote proxy site {available}")

        linked = self.ssh.execute_as_root(SystemCommands.symlink(available, enabled))
        if linked.is_failure:
            raise ProxyError(f"Could not link {enabled}", context=linked.output)

        checked = self.ssh.execute_as_root(NginxCommands.test_config())
        if checked.is_failure:
            raise ProxySyntaxError(
                "Nginx configuration test failed; running configuration left untouched",
                context=checked.output,
            )
        self.logger.success("Nginx configuration test passed")

        self.reload()
        self.logger.success(f"Proxy routing :{public_port} -> 127.0.0.1:{app_port}")

    def reload(self) -> None:
        result = self.ssh.execute_as_root(NginxCommands.reload())
        if result.is_success:
            return
        # reload fails when nginx is stopped
        result = self.ssh.execute_as_root(NginxCommands.restart())
        if result.is_failure:
            raise ProxyError("Nginx reload failed", context=result.output)

    def remove_site(self) -> bool:
        result = self.ssh.execute_as_root(
            SystemCommands.remove_files(
                self.artifacts.proxy_enabled_path, self.artifacts.proxy_available_path
            )
        )
        return result.is_success

    def reload_if_valid(self) -> bool:
        if self.ssh.execute_as_root(NginxCommands.test_config()).is_failure:
            return False
        return self.ssh.execute_as_root(NginxCommands.reload()).is_success
