"""
hostdeploy Core

Stage pipeline and parameter collection.
"""

from .pipeline import (
    DeploymentContext,
    FailurePolicy,
    Pipeline,
    PipelineReport,
    Stage,
    StageOutcome,
    StageStatus,
)

__all__ = [
    "DeploymentContext",
    "FailurePolicy",
    "Pipeline",
    "PipelineReport",
    "Stage",
    "StageOutcome",
    "StageStatus",
]
