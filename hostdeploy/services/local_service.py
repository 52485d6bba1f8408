"""Local command execution (git, rsync, scp) with run-log capture."""

import subprocess
from pathlib import Path
from typing import Optional, Union

from rich.live import Live
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

from hostdeploy.logger import DeployLogger
from hostdeploy.models.results import ExecutionResult


class LocalRunner:
    """Runs argv commands on the controlling machine."""

    def __init__(self, logger: Optional[DeployLogger] = None):
        self.logger = logger

    def run(
        self,
        argv: list[str],
        cwd: Optional[Union[str, Path]] = None,
        description: Optional[str] = None,
        display: Optional[str] = None,
    ) -> ExecutionResult:
        """
        Run a command, logging it and its output.

        Args:
            argv: Command and arguments (never passed through a shell)
            cwd: Working directory
            description: Spinner text shown while the command runs
            display: Loggable rendering of argv, for commands carrying secrets

        Returns:
            ExecutionResult (a missing binary yields returncode 127)
        """
        shown = display or " ".join(argv)
        if self.logger:
            self.logger.log_command(shown)

        if description and self.logger and not self.logger.verbose:
            spinner = Spinner("dots", text=f"[cyan]{description}...[/cyan]")
            with Live(
                Padding(spinner, (0, 0, 0, 2)),
                console=self.logger.console,
                refresh_per_second=10,
            ) as live:
                result = self._run(argv, cwd, shown)
                mark = Text("  ✓ " if result.is_success else "  ✗ ", style="dim" if result.is_success else "red")
                mark.append(description, style="dim")
                live.update(mark)
        else:
            result = self._run(argv, cwd, shown)

        if self.logger:
            self.logger.log_output(result.stdout, "stdout")
            self.logger.log_output(result.stderr, "stderr")

        return result

    @staticmethod
    def _run(argv: list[str], cwd, shown: str) -> ExecutionResult:
        try:
            completed = subprocess.run(argv, cwd=cwd, capture_output=True, text=True)
        except FileNotFoundError as e:
            return ExecutionResult(returncode=127, stderr=str(e), command=shown)
        return ExecutionResult(
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            command=shown,
        )
