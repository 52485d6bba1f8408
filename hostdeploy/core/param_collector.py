"""
Parameter Collector

Turns the merged parameter layers into validated run parameters,
prompting for anything missing or invalid when running interactively.
"""

from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from hostdeploy.core.config_loader import (
    PARAMETER_FIELDS,
    REMOTE_FIELDS,
    VALIDATORS,
    key_permissions,
)
from hostdeploy.exceptions import ConfigurationError, UserAbortError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.params import DeploymentParameters, Secret
from hostdeploy.models.ssh import SSHConfig

PROMPTS = {
    "repo_url": "Git repository URL (HTTPS or SSH)",
    "branch": "Branch name",
    "remote_user": "Remote SSH username (e.g. ubuntu)",
    "remote_host": "Remote server IP or hostname",
    "ssh_key_path": "Path to SSH private key (e.g. ~/.ssh/id_ed25519)",
    "app_port": "Application internal container port (e.g. 5000)",
    "local_dir": "Local directory to clone into (will create if missing)",
    "public_port": "Public port served by the proxy",
}


class ParameterCollector:
    """Interactive (or strict non-interactive) parameter collection."""

    def __init__(
        self,
        console: Console,
        interactive: bool = True,
        logger: Optional[DeployLogger] = None,
    ):
        self.console = console
        self.interactive = interactive
        self.logger = logger

    def resolve(self, values: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
        """
        Validate the named fields, prompting for bad or missing ones.

        Raises:
            ConfigurationError: If a value is missing or invalid and prompting is off
        """
        resolved = {}
        for name in fields:
            resolved[name] = self._resolve_one(name, values.get(name))
        if "ssh_key_path" in resolved and self.logger:
            path = resolved["ssh_key_path"]
            self.logger.log(f"Found SSH key at {path} (permissions: {key_permissions(path)})")
        return resolved

    def _resolve_one(self, name: str, value: Any) -> Any:
        validator = VALIDATORS[name]
        if not self.interactive:
            return validator(value)

        if value not in (None, ""):
            try:
                return validator(value)
            except ConfigurationError as e:
                self.console.print(f"[red]✗ {e.message}[/red]")

        while True:
            answer = Prompt.ask(PROMPTS[name], console=self.console)
            try:
                return validator(answer)
            except ConfigurationError as e:
                self.console.print(f"[red]✗ {e.message}[/red]")

    def collect(
        self, values: Dict[str, Any], credential: Optional[Secret] = None
    ) -> DeploymentParameters:
        """Build the full deploy parameter record."""
        resolved = self.resolve(values, PARAMETER_FIELDS)

        if (
            credential is None
            and self.interactive
            and str(resolved["repo_url"]).startswith("https://")
        ):
            token = Prompt.ask(
                "Personal Access Token for HTTPS repo (leave empty for public repos)",
                password=True,
                default="",
                show_default=False,
                console=self.console,
            )
            credential = Secret(token) if token else None

        return DeploymentParameters(credential=credential or None, **resolved)

    def collect_target(self, values: Dict[str, Any]) -> SSHConfig:
        """Build only the remote identity (cleanup mode)."""
        resolved = self.resolve(values, REMOTE_FIELDS)
        return SSHConfig(
            host=resolved["remote_host"],
            user=resolved["remote_user"],
            key_path=resolved["ssh_key_path"],
        )

    def confirm(self, lines: list[str], assume_yes: bool = False) -> None:
        """
        Show the parameter summary (token hidden) and ask to proceed.

        Raises:
            UserAbortError: If the operator declines
        """
        if self.logger:
            self.logger.write_block("Parameters (token hidden)", lines)

        if assume_yes:
            return

        for line in lines:
            self.console.print(f" [dim]›[/dim] {line}", highlight=False)
        if not Confirm.ask("Proceed with these values?", default=False, console=self.console):
            raise UserAbortError("User aborted.")

    @staticmethod
    def summary_lines(params: DeploymentParameters) -> list[str]:
        return [
            f"Repo URL:    {params.repo_url}",
            f"Branch:      {params.branch}",
            f"Token:       {'provided' if params.credential else 'none'}",
            f"Remote:      {params.remote_identity}",
            f"SSH key:     {params.ssh_key_path}",
            f"App port:    {params.app_port}",
            f"Public port: {params.public_port}",
            f"Clone dir:   {params.local_dir}",
        ]

    @staticmethod
    def target_lines(config: SSHConfig) -> list[str]:
        return [
            f"Remote:      {config.destination}",
            f"SSH key:     {config.key_path}",
        ]
