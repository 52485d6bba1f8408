"""Deployment validation service."""

from typing import Any, Optional

import requests

from hostdeploy.constants import CONTAINER_LOG_TAIL, PUBLIC_PROBE_TIMEOUT, REMOTE_PROBE_TIMEOUT
from hostdeploy.exceptions import (
    ContainerNotRunningError,
    EngineServiceDownError,
    ValidationError,
)
from hostdeploy.logger import DeployLogger
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.models.results import ValidationReport
from hostdeploy.services.commands import DockerCommands, SystemCommands
from hostdeploy.services.ssh_service import SSHService

ENGINE_ACTIVE = "engine-service"
CONTAINER_RUNNING = "container-running"
REMOTE_HTTP = "remote-http"
PUBLIC_HTTP = "public-http"


class DeploymentValidator:
    """
    Confirms the deployment is serving.

    Engine service and container checks are mandatory. Of the two HTTP
    probes, one succeeding is enough.
    """

    def __init__(
        self,
        ssh: SSHService,
        logger: DeployLogger,
        artifacts: NamedArtifacts,
        http_client: Optional[Any] = None,
    ):
        self.ssh = ssh
        self.logger = logger
        self.artifacts = artifacts
        self.http = http_client or requests

    def validate(self, app_port: int, public_url: str) -> ValidationReport:
        """
        Run all checks.

        Raises:
            EngineServiceDownError: If the docker service is not active
            ContainerNotRunningError: If the named container is not listed as running
            ValidationError: If neither HTTP probe gets a response
        """
        report = ValidationReport()

        if not self.check_engine(report):
            raise EngineServiceDownError(
                "Docker service is not active on the remote host",
                context=self._container_logs(),
            )

        if not self.check_container(report):
            raise ContainerNotRunningError(
                f"Container {self.artifacts.container_name} is not running",
                context=self._container_logs(),
            )

        remote_ok = self.probe_remote(report, app_port)
        public_ok = self.probe_public(report, public_url)

        if not (remote_ok or public_ok):
            raise ValidationError(
                "Application did not respond on the remote host or the public URL",
                context="\n".join(
                    f"{c.name}: {c.detail}" for c in report.checks if not c.passed
                ),
            )

        if not public_ok:
            self.logger.warning(
                f"{public_url} unreachable from here (firewall?); app responds locally on the host"
            )
        return report

    def check_engine(self, report: ValidationReport) -> bool:
        result = self.ssh.execute(SystemCommands.service_active("docker"))
        report.add(ENGINE_ACTIVE, result.is_success, result.output)
        if result.is_success:
            self.logger.success("Docker service active")
        return result.is_success

    def check_container(self, report: ValidationReport) -> bool:
        name = self.artifacts.container_name
        result = self.ssh.execute_docker(DockerCommands.list_running(name))
        running = result.is_success and name in result.stdout.split()
        report.add(CONTAINER_RUNNING, running, result.output)
        if running:
            self.logger.success(f"Container {name} running")
        return running

    def probe_remote(self, report: ValidationReport, app_port: int) -> bool:
        result = self.ssh.execute(
            SystemCommands.http_probe(app_port, REMOTE_PROBE_TIMEOUT),
            timeout=REMOTE_PROBE_TIMEOUT * 3,
        )
        report.add(REMOTE_HTTP, result.is_success, result.output)
        if result.is_success:
            self.logger.success(f"App responds on 127.0.0.1:{app_port} (remote)")
        else:
            self.logger.warning(f"No response on 127.0.0.1:{app_port} from the remote host")
        return result.is_success

    def probe_public(self, report: ValidationReport, public_url: str) -> bool:
        try:
            response = self.http.get(public_url, timeout=PUBLIC_PROBE_TIMEOUT)
        except requests.RequestException as e:
            report.add(PUBLIC_HTTP, False, str(e))
            return False

        report.add(PUBLIC_HTTP, True, f"HTTP {response.status_code}")
        self.logger.success(f"{public_url} responded with HTTP {response.status_code}")
        return True

    def _container_logs(self) -> str:
        result = self.ssh.execute_docker(
            DockerCommands.logs(self.artifacts.container_name, CONTAINER_LOG_TAIL)
        )
        logs = result.stdout.strip()
        return f"Container logs:\n{logs}" if logs else "No container logs available"
