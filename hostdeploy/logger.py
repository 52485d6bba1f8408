"""
Logging system for hostdeploy
Provides an append-only run log per invocation with clean console output
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from rich.console import Console
from rich.markup import escape

from hostdeploy.constants import (
    DEFAULT_LOG_DIR,
    LOG_DATETIME_FORMAT,
    LOG_FILE_TIMESTAMP_FORMAT,
    SECRET_MASK,
)
from hostdeploy.models.params import Secret
from hostdeploy.models.results import DeploymentSummary

console = Console()

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class DeployLogger:
    """
    Manages the run log for one deploy or cleanup invocation
    - Appends every entry to a uniquely named file in real-time
    - Echoes steps, results, warnings and errors to the operator
    - Masks registered secrets in everything it writes
    """

    def __init__(
        self,
        operation: str,
        log_dir: Optional[Union[str, Path]] = None,
        verbose: bool = False,
        console_: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            operation: Operation name ('deploy' or 'cleanup')
            log_dir: Directory for run logs (default: ./logs)
            verbose: If True, show all output in console
            console_: Rich console to echo to (default: module console)
        """
        self.operation = operation
        self.verbose = verbose
        self.console = console_ or console
        self.log_file: Optional[TextIO] = None
        self.current_step = ""
        self.has_errors = False
        self._secrets: list[str] = []

        log_root = Path(log_dir) if log_dir else Path.cwd() / DEFAULT_LOG_DIR
        log_root.mkdir(parents=True, exist_ok=True)

        # One file per run: {operation}_{YYYYmmdd_HHMMSS}.log
        self.run_id = datetime.now().strftime(LOG_FILE_TIMESTAMP_FORMAT)
        self.log_path = self._unique_path(log_root, f"{operation}_{self.run_id}")

        self.log_file = open(self.log_path, "a", buffering=1, encoding="utf-8")
        self._write_log_header()

    @staticmethod
    def _unique_path(log_root: Path, stem: str) -> Path:
        candidate = log_root / f"{stem}.log"
        counter = 1
        while candidate.exists():
            candidate = log_root / f"{stem}_{counter}.log"
            counter += 1
        return candidate

    def _write_log_header(self):
        """Write log file header"""
        header = f"""{"=" * 80}
hostdeploy Run Log
{"=" * 80}
Operation: {self.operation}
Run: {self.run_id}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self._write(header)

    def _write(self, text: str) -> None:
        if self.log_file:
            self.log_file.write(text)
            self.log_file.flush()

    def register_secret(self, secret: Union[Secret, str, None]) -> None:
        """Mask this value in every later log line and console echo."""
        if isinstance(secret, Secret):
            value = secret.reveal()
        else:
            value = secret
        if value and value not in self._secrets:
            self._secrets.append(value)

    def redact(self, text: str) -> str:
        for value in self._secrets:
            text = text.replace(value, SECRET_MASK)
        return text

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        message = self.redact(message)
        timestamp = datetime.now().strftime(LOG_DATETIME_FORMAT)
        self._write(f"[{timestamp}] {level}: {message}\n")

        if self.verbose:
            if level == "ERROR":
                self.console.print(f"[red]{escape(message)}[/red]", highlight=False)
            elif level == "WARNING":
                self.console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)
            elif level == "DEBUG":
                self.console.print(f"[dim]{escape(message)}[/dim]", highlight=False)
            else:
                self.console.print(message, highlight=False, markup=False)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output

        Always written to the log file; echoed only in verbose mode.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
        """
        if not output:
            return

        clean_output = self.redact(ANSI_ESCAPE.sub("", output))
        for line in clean_output.splitlines():
            self._write(f"  [{stream}] {line}\n")

        if self.verbose:
            self.console.print(clean_output, highlight=False, markup=False)

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., captured container logs)
        """
        self.has_errors = True
        error = self.redact(error)
        timestamp = datetime.now().strftime(LOG_DATETIME_FORMAT)

        error_block = f"[{timestamp}] ERROR: {error}\n"
        if context:
            context = self.redact(context)
            for line in context.splitlines():
                error_block += f"  [context] {line}\n"
        self._write(error_block)

        # Always shown, even if not verbose
        self.console.print(f"[bold red]✗ {escape(error)}[/bold red]", highlight=False)
        if context:
            self.console.print(
                f"  [color(208)]{escape(context)}[/color(208)]", highlight=False
            )

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        if self.current_step and not self.verbose:
            self.console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self.console.print(
                f"[color(214)]▶[/color(214)] [white]{escape(step_name)}[/white]", highlight=False
            )

    def info(self, message: str):
        """Log an informational line and echo it dimmed"""
        self.log(message, "INFO")

        if not self.verbose:
            self.console.print(f"  [dim]{escape(self.redact(message))}[/dim]", highlight=False)

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            self.console.print(f"  [dim]✓ {escape(self.redact(message))}[/dim]", highlight=False)

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            self.console.print(
                f"  [yellow]⚠[/yellow] [dim]{escape(self.redact(message))}[/dim]", highlight=False
            )

    def summary(self, summary: DeploymentSummary):
        """Append the deployment summary block"""
        self.write_block("Deployment Summary", summary.to_lines())

    def write_block(self, title: str, lines: Iterable[str]):
        block = f"\n{'-' * 80}\n{title}\n{'-' * 80}\n"
        for line in lines:
            block += f"{self.redact(line)}\n"
        block += f"{'-' * 80}\n"
        self._write(block)

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None
