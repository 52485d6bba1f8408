"""
Base Command Class

Abstract base for hostdeploy commands.
Owns the run logger and the single terminal error path.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from hostdeploy.constants import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_SUCCESS
from hostdeploy.core.config_loader import load_credential, load_parameter_file, merge_layers
from hostdeploy.core.param_collector import ParameterCollector
from hostdeploy.exceptions import HostDeployError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.params import DeploymentParameters, Secret
from hostdeploy.models.ssh import SSHConfig
from hostdeploy.services.ssh_service import SSHService
from hostdeploy.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Run logger initialization
    - Parameter collection from file, .env, options and prompts
    - Header display
    - Exit-code mapping for every failure
    """

    operation = "run"

    def __init__(
        self,
        options: Optional[Dict[str, Any]] = None,
        config_file: Optional[Path] = None,
        log_dir: Optional[Path] = None,
        verbose: bool = False,
        assume_yes: bool = False,
        console: Optional[Console] = None,
    ):
        self.options = options or {}
        self.config_file = config_file
        self.log_dir = log_dir
        self.verbose = verbose
        self.assume_yes = assume_yes
        self.console = console or Console()
        self.logger: Optional[DeployLogger] = None

    def init_logger(self) -> DeployLogger:
        """Initialize the run logger for this invocation."""
        self.logger = DeployLogger(
            self.operation, log_dir=self.log_dir, verbose=self.verbose, console_=self.console
        )
        return self.logger

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in verbose mode)."""
        if not self.verbose:
            show_header(title=title, subtitle=subtitle, details=details, console=self.console)

    def merged_values(self) -> Dict[str, Any]:
        """defaults < --config file < command-line options"""
        file_values = load_parameter_file(self.config_file) if self.config_file else {}
        return merge_layers(file_values, self.options)

    def collector(self) -> ParameterCollector:
        return ParameterCollector(
            self.console, interactive=not self.assume_yes, logger=self.logger
        )

    def collect_parameters(self) -> DeploymentParameters:
        """
        Merge parameter sources and validate them.

        Precedence: defaults < --config file < command-line options < prompts.
        """
        values = self.merged_values()

        credential: Optional[Secret] = load_credential()
        if credential and self.logger:
            self.logger.register_secret(credential)

        collector = self.collector()
        params = collector.collect(values, credential)
        if params.credential and self.logger:
            self.logger.register_secret(params.credential)
        collector.confirm(collector.summary_lines(params), self.assume_yes)
        return params

    def collect_target(self) -> SSHConfig:
        """Collect only the remote identity."""
        collector = self.collector()
        config = collector.collect_target(self.merged_values())
        collector.confirm(collector.target_lines(config), self.assume_yes)
        return config

    def open_session(self, config: SSHConfig) -> SSHService:
        return SSHService(config, self.logger)

    @staticmethod
    def target_of(params: DeploymentParameters) -> SSHConfig:
        return SSHConfig(
            host=params.remote_host, user=params.remote_user, key_path=params.ssh_key_path
        )

    def print_log_path(self) -> None:
        if self.logger:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    @abstractmethod
    def execute(self) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self) -> None:
        """
        Run command with error handling.

        Raises:
            SystemExit: Always, with 0 on success or the failure's exit code
        """
        self.init_logger()
        try:
            self.execute()
        except SystemExit:
            self.logger.close()
            raise
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            self.logger.log_error("Interrupted by operator")
            self._finish(EXIT_INTERRUPTED)
        except HostDeployError as e:
            self.logger.log_error(e.message, context=e.context)
            self._finish(e.exit_code)
        except Exception as e:
            error_type = type(e).__name__
            self.logger.log_error(f"{error_type}: {e}")
            self._finish(EXIT_FAILURE)
        self._finish(EXIT_SUCCESS)

    def _finish(self, code: int) -> None:
        self.print_log_path()
        self.logger.close()
        raise SystemExit(code)
