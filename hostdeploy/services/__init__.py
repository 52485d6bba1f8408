"""
hostdeploy Services Layer

One service per reconciliation concern, all driven over the SSH channel.
"""

from .ssh_service import SSHService
from .local_service import LocalRunner
from .source_service import SourceService
from .prerequisite_service import PrerequisiteService
from .transfer_service import TransferService
from .container_service import ContainerService
from .proxy_service import ProxyService
from .deployment_validator import DeploymentValidator
from .cleanup_service import CleanupService

__all__ = [
    "SSHService",
    "LocalRunner",
    "SourceService",
    "PrerequisiteService",
    "TransferService",
    "ContainerService",
    "ProxyService",
    "DeploymentValidator",
    "CleanupService",
]
