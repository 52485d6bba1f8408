"""
hostdeploy Exception Hierarchy

Every failure that can end a run maps to one exception class, and every
class carries the process exit code the run terminates with.
"""

from typing import Optional

from hostdeploy.constants import (
    EXIT_BUILD_FAILED,
    EXIT_CONFIGURATION,
    EXIT_CONTAINER_NOT_RUNNING,
    EXIT_ENGINE_DOWN,
    EXIT_FAILURE,
    EXIT_PREREQUISITE_FAILED,
    EXIT_PROXY_FAILED,
    EXIT_PROXY_SYNTAX,
    EXIT_SOURCE_FAILED,
    EXIT_TRANSFER_FAILED,
    EXIT_UNREACHABLE,
    EXIT_USER_ABORT,
    EXIT_VALIDATION_FAILED,
)


class HostDeployError(Exception):
    """Base exception for all hostdeploy errors."""

    exit_code = EXIT_FAILURE

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(HostDeployError):
    """Raised when deployment parameters are missing or malformed."""

    exit_code = EXIT_CONFIGURATION


class UserAbortError(HostDeployError):
    """Raised when the operator declines to proceed."""

    exit_code = EXIT_USER_ABORT


class ConnectivityError(HostDeployError):
    """Raised when the remote host is unreachable or rejects the identity."""

    exit_code = EXIT_UNREACHABLE


class SourceError(HostDeployError):
    """Raised when the working copy cannot be obtained or has nothing to deploy."""

    exit_code = EXIT_SOURCE_FAILED


class PrerequisiteError(HostDeployError):
    """Raised when a remote package installation sequence fails."""

    exit_code = EXIT_PREREQUISITE_FAILED


class TransferError(HostDeployError):
    """Raised when the working copy cannot be mirrored to the remote host."""

    exit_code = EXIT_TRANSFER_FAILED


class BuildError(HostDeployError):
    """Raised when the image build fails."""

    exit_code = EXIT_BUILD_FAILED


class ContainerNotRunningError(HostDeployError):
    """Raised when the named container cannot be started or is not running."""

    exit_code = EXIT_CONTAINER_NOT_RUNNING


class EngineServiceDownError(HostDeployError):
    """Raised when the container engine service is not active."""

    exit_code = EXIT_ENGINE_DOWN


class ProxyError(HostDeployError):
    """Raised when the proxy site cannot be written, linked or reloaded."""

    exit_code = EXIT_PROXY_FAILED


class ProxySyntaxError(ProxyError):
    """Raised when the proxy configuration fails its syntax check."""

    exit_code = EXIT_PROXY_SYNTAX


class ValidationError(HostDeployError):
    """Raised when neither the remote nor the public HTTP probe succeeds."""

    exit_code = EXIT_VALIDATION_FAILED
