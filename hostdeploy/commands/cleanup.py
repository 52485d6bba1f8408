"""
Cleanup Command

Removes every named artifact a deploy leaves on the remote host.
"""

from hostdeploy.base import BaseCommand
from hostdeploy.core.pipeline import DeploymentContext, FailurePolicy, Pipeline, Stage
from hostdeploy.exceptions import HostDeployError
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.services.cleanup_service import CleanupService
from hostdeploy.services.ssh_service import SSHService


def _teardown(step):
    """Adapt a CleanupService step to a stage action; False becomes a stage failure."""

    def action(ctx: DeploymentContext) -> None:
        service = CleanupService(ctx.ssh, ctx.logger, ctx.artifacts)
        if not step(service):
            raise HostDeployError(f"{step.__name__.replace('_', ' ')} did not complete")

    return action


def cleanup_stages(ssh: SSHService) -> list[Stage]:
    """Connect (fatal), then independent best-effort teardown steps."""

    def connect(ctx: DeploymentContext) -> None:
        ssh.check_connection()
        ctx.ssh = ssh
        ctx.logger.success(f"Connected to {ssh.config.destination}")

    best_effort = FailurePolicy.BEST_EFFORT
    return [
        Stage("connect", "Connecting to remote host", connect),
        Stage("remove-container", "Removing container",
              _teardown(CleanupService.remove_container), best_effort),
        Stage("remove-image", "Removing image",
              _teardown(CleanupService.remove_image), best_effort),
        Stage("remove-proxy-site", "Removing proxy site",
              _teardown(CleanupService.remove_proxy_site), best_effort),
        Stage("reload-proxy", "Reloading nginx",
              _teardown(CleanupService.reload_proxy), best_effort),
        Stage("remove-remote-dir", "Removing remote directory",
              _teardown(CleanupService.remove_remote_dir), best_effort),
    ]


class CleanupCommand(BaseCommand):
    """
    Tear down the deployment.

    Only the remote identity is collected. Once connected, the command
    exits 0 whatever the individual steps report.
    """

    operation = "cleanup"

    def execute(self) -> None:
        """Execute cleanup command."""
        self.show_header(
            title="Cleanup",
            subtitle="Remove container, image, proxy site and remote files",
        )

        target = self.collect_target()
        ssh = self.open_session(target)
        context = DeploymentContext(logger=self.logger, artifacts=NamedArtifacts())

        report = Pipeline(cleanup_stages(ssh), self.logger, absorb_connectivity=True).run(context)

        self.logger.write_block(
            "Cleanup Summary",
            [f"{outcome.name}: {outcome.status.value}" for outcome in report.outcomes],
        )
        if report.failed:
            self.console.print(
                f"\n[yellow]Cleanup finished with warnings:[/yellow] {', '.join(report.failed)}"
            )
        else:
            self.console.print("\n[color(248)]Cleanup complete.[/color(248)]")
