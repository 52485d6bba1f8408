"""SSH service for executing commands on the remote host."""

import subprocess
import time
from typing import Optional

from hostdeploy.constants import SSH_COMMAND_TIMEOUT, SSH_CONNECTION_FAILURE_CODE
from hostdeploy.exceptions import ConnectivityError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.results import SSHResult
from hostdeploy.models.ssh import SSHConfig
from hostdeploy.services.commands import SystemCommands, as_root

PERMISSION_MARKERS = ("permission denied", "got permission denied")


class SSHService:
    """
    Remote command channel bound to one identity and one host.

    A non-zero remote exit status is returned to the caller; an ssh transport
    failure (exit 255, timeout, missing client) raises ConnectivityError.
    """

    def __init__(self, config: SSHConfig, logger: Optional[DeployLogger] = None):
        """
        Initialize SSH service.

        Args:
            config: SSH configuration
            logger: Run logger for command and output capture
        """
        self.config = config
        self.logger = logger

    @property
    def host(self) -> str:
        return self.config.host

    def execute(
        self,
        command: str,
        timeout: Optional[int] = SSH_COMMAND_TIMEOUT,
        input_text: Optional[str] = None,
    ) -> SSHResult:
        """
        Execute command on remote host via SSH.

        Args:
            command: Command to execute
            timeout: Command timeout in seconds
            input_text: Data written to the remote command's stdin

        Returns:
            SSHResult with execution details

        Raises:
            ConnectivityError: If the transport fails
        """
        ssh_cmd = self.config.build_command(command)

        if self.logger:
            self.logger.log_command(f"[{self.config.destination}] {command}")

        start_time = time.time()

        try:
            result = subprocess.run(
                ssh_cmd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            raise ConnectivityError(
                f"SSH command timed out after {timeout}s",
                context=f"Host: {self.host}, Command: {command}",
            )
        except FileNotFoundError:
            raise ConnectivityError(
                "ssh client not found on this machine",
                context="Install OpenSSH client and retry",
            )

        duration = time.time() - start_time

        if self.logger:
            self.logger.log_output(result.stdout, "stdout")
            self.logger.log_output(result.stderr, "stderr")

        if result.returncode == SSH_CONNECTION_FAILURE_CODE:
            raise ConnectivityError(
                f"Cannot reach {self.config.destination}",
                context=result.stderr.strip() or f"Command: {command}",
            )

        return SSHResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            host=self.host,
            command=command,
            duration_seconds=duration,
        )

    def execute_as_root(self, command: str, **kwargs) -> SSHResult:
        """Execute command with sudo (non-interactive)."""
        return self.execute(as_root(command), **kwargs)

    def execute_docker(self, command: str, **kwargs) -> SSHResult:
        """
        Execute a container engine command as the login identity, retrying
        with sudo when the engine socket refuses the user.
        """
        result = self.execute(command, **kwargs)
        if result.is_failure and any(
            marker in result.stderr.lower() for marker in PERMISSION_MARKERS
        ):
            if self.logger:
                self.logger.log("Docker refused login identity, retrying with sudo", "DEBUG")
            return self.execute_as_root(command, **kwargs)
        return result

    def check_connection(self) -> SSHResult:
        """
        Liveness probe for the remote session.

        Raises:
            ConnectivityError: If the host is unreachable or rejects the key
        """
        result = self.execute(SystemCommands.echo("hostdeploy: connection ok"), timeout=60)
        if result.is_failure:
            raise ConnectivityError(
                f"SSH connection to {self.config.destination} failed",
                context=result.output or "Verify host, username and key path",
            )
        return result
