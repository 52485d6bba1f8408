"""
Stage Pipeline

The reconciliation workflow as an ordered list of named stages, run by a
driver loop that stops at the first fatal failure.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

from hostdeploy.exceptions import ConnectivityError, HostDeployError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.artifacts import NamedArtifacts
from hostdeploy.models.params import DeploymentParameters
from hostdeploy.models.results import ValidationReport


class FailurePolicy(Enum):
    """How the driver treats a stage failure."""

    FATAL = "fatal"
    BEST_EFFORT = "best-effort"


class StageStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class DeploymentContext:
    """
    Per-run state shared by the stages.

    The parameters are frozen; stages record what they produce on the
    context itself (working copy, effective branch, validation report).
    """

    logger: DeployLogger
    params: Optional[DeploymentParameters] = None
    artifacts: NamedArtifacts = field(default_factory=NamedArtifacts)
    ssh: Any = None
    working_copy: Optional[Path] = None
    effective_branch: Optional[str] = None
    validation: Optional[ValidationReport] = None


@dataclass(frozen=True)
class Stage:
    """One unit of the pipeline."""

    name: str
    title: str
    action: Callable[[DeploymentContext], None]
    policy: FailurePolicy = FailurePolicy.FATAL
    contract: str = ""


@dataclass
class StageOutcome:
    name: str
    status: StageStatus
    error: Optional[str] = None


@dataclass
class PipelineReport:
    outcomes: list[StageOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        return [o.name for o in self.outcomes if o.status == StageStatus.FAILED]

    @property
    def succeeded(self) -> list[str]:
        return [o.name for o in self.outcomes if o.status == StageStatus.SUCCEEDED]

    def status_of(self, name: str) -> Optional[StageStatus]:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome.status
        return None


class Pipeline:
    """
    Runs stages strictly in order.

    A fatal stage failure is logged and re-raised so the command's error
    path can exit with the failure's code. A best-effort failure is logged
    as a warning and the next stage runs. ConnectivityError is fatal in every
    stage unless the pipeline is built with absorb_connectivity=True.
    """

    def __init__(
        self,
        stages: list[Stage],
        logger: DeployLogger,
        absorb_connectivity: bool = False,
    ):
        self.stages = stages
        self.logger = logger
        self.absorb_connectivity = absorb_connectivity

    @property
    def names(self) -> list[str]:
        return [s.name for s in self.stages]

    def run(self, context: DeploymentContext) -> PipelineReport:
        report = PipelineReport()

        for index, stage in enumerate(self.stages):
            self.logger.step(stage.title)
            if stage.contract:
                self.logger.log(f"Converges to: {stage.contract}", "DEBUG")
            try:
                stage.action(context)
            except HostDeployError as e:
                if self._is_fatal(stage, e):
                    report.outcomes.append(StageOutcome(stage.name, StageStatus.FAILED, e.message))
                    for remaining in self.stages[index + 1 :]:
                        report.outcomes.append(StageOutcome(remaining.name, StageStatus.SKIPPED))
                    raise
                self.logger.warning(f"{stage.title} failed (continuing): {e.message}")
                report.outcomes.append(StageOutcome(stage.name, StageStatus.FAILED, e.message))
                continue

            report.outcomes.append(StageOutcome(stage.name, StageStatus.SUCCEEDED))

        return report

    def _is_fatal(self, stage: Stage, error: HostDeployError) -> bool:
        if stage.policy == FailurePolicy.FATAL:
            return True
        return isinstance(error, ConnectivityError) and not self.absorb_connectivity
