"""
hostdeploy Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .results import (
    ExecutionResult,
    SSHResult,
    ProbeResult,
    ValidationReport,
    DeploymentSummary,
)
from .params import (
    DeploymentParameters,
    Secret,
)
from .artifacts import NamedArtifacts
from .ssh import SSHConfig

__all__ = [
    # Results
    "ExecutionResult",
    "SSHResult",
    "ProbeResult",
    "ValidationReport",
    "DeploymentSummary",
    # Parameters
    "DeploymentParameters",
    "Secret",
    # Artifacts
    "NamedArtifacts",
    # SSH
    "SSHConfig",
]
