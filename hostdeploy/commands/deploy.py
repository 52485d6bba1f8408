"""
Deploy Command

Reconciles the remote host with the requested branch: fetch source,
install prerequisites, transfer, build, run, route and validate.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from hostdeploy.base import BaseCommand
from hostdeploy.core.pipeline import DeploymentContext, Pipeline, Stage
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.models.results import DeploymentSummary
from hostdeploy.services.container_service import ContainerService
from hostdeploy.services.deployment_validator import DeploymentValidator
from hostdeploy.services.local_service import LocalRunner
from hostdeploy.services.prerequisite_service import PrerequisiteService
from hostdeploy.services.proxy_service import ProxyService
from hostdeploy.services.source_service import SourceService
from hostdeploy.services.ssh_service import SSHService
from hostdeploy.services.transfer_service import TransferService


def deploy_stages(
    ssh: SSHService,
    runner: Optional[LocalRunner] = None,
    http_client: Optional[Any] = None,
) -> list[Stage]:
    """
    Build the deploy pipeline.

    Every stage is fatal: a later stage is only meaningful once the
    earlier ones have converged.
    """

    def connect(ctx: DeploymentContext) -> None:
        ssh.check_connection()
        ctx.ssh = ssh
        ctx.logger.success(f"Connected to {ssh.config.destination}")

    def source(ctx: DeploymentContext) -> None:
        service = SourceService(ctx.params, ctx.logger, runner)
        ctx.working_copy, ctx.effective_branch = service.acquire()

    def prerequisites(ctx: DeploymentContext) -> None:
        PrerequisiteService(ctx.ssh, ctx.logger, ctx.params.remote_user).reconcile()

    def transfer(ctx: DeploymentContext) -> None:
        service = TransferService(ctx.ssh, ctx.logger, ctx.artifacts.remote_dir, runner)
        service.transfer(ctx.working_copy)

    def build(ctx: DeploymentContext) -> None:
        ContainerService(ctx.ssh, ctx.logger, ctx.artifacts).build()

    def run(ctx: DeploymentContext) -> None:
        ContainerService(ctx.ssh, ctx.logger, ctx.artifacts).run(ctx.params.app_port)

    def proxy(ctx: DeploymentContext) -> None:
        ProxyService(ctx.ssh, ctx.logger, ctx.artifacts).configure(
            server_name=ctx.params.remote_host,
            app_port=ctx.params.app_port,
            public_port=ctx.params.public_port,
        )

    def validate(ctx: DeploymentContext) -> None:
        validator = DeploymentValidator(ctx.ssh, ctx.logger, ctx.artifacts, http_client)
        ctx.validation = validator.validate(ctx.params.app_port, ctx.params.public_url)

    return [
        Stage("connect", "Connecting to remote host", connect,
              contract="remote session answers a no-op command"),
        Stage("source", "Fetching source", source,
              contract="working copy on the effective branch with a build descriptor"),
        Stage("prerequisites", "Checking prerequisites", prerequisites,
              contract="docker and nginx installed and enabled"),
        Stage("transfer", "Transferring files", transfer,
              contract="remote directory mirrors the working copy"),
        Stage("build", "Building image", build,
              contract="fixed image tag points at a fresh build"),
        Stage("run", "Starting container", run,
              contract="exactly one container with the fixed name is running"),
        Stage("proxy", "Configuring reverse proxy", proxy,
              contract="fixed site enabled and accepted by nginx -t"),
        Stage("validate", "Validating deployment", validate,
              contract="engine active, container running, app answers HTTP"),
    ]


class DeployCommand(BaseCommand):
    """
    Deploy (or redeploy) the repository to the remote host.

    Features:
    - Parameter collection with confirmation
    - Idempotent replace of every named artifact
    - Run log with a final summary
    """

    operation = "deploy"

    def __init__(
        self,
        options: Optional[Dict[str, Any]] = None,
        runner: Optional[LocalRunner] = None,
        http_client: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(options, **kwargs)
        self.runner = runner
        self.http_client = http_client

    def execute(self) -> None:
        """Execute deploy command."""
        self.show_header(
            title="Deploy",
            subtitle="Containerized app behind nginx on a remote host",
        )

        params = self.collect_parameters()
        self.logger.log(f"Parameters: {params!r}")

        ssh = self.open_session(self.target_of(params))
        context = DeploymentContext(logger=self.logger, params=params, artifacts=NamedArtifacts())

        Pipeline(deploy_stages(ssh, self.runner, self.http_client), self.logger).run(context)

        summary = DeploymentSummary(
            timestamp=datetime.now().isoformat(timespec="seconds"),
            repo_url=params.repo_url,
            branch=params.branch,
            effective_branch=context.effective_branch or params.branch,
            remote_identity=params.remote_identity,
            artifacts=context.artifacts,
            app_port=params.app_port,
            public_url=params.public_url,
        )
        self.logger.summary(summary)
        self._print_summary(params.public_url)

    def _print_summary(self, public_url: str) -> None:
        self.console.print("\n[color(248)]Deployment complete.[/color(248)]")
        self.console.print(f"[dim]Application:[/dim] [cyan]{public_url}[/cyan]")
