"""
Result Models

Dataclass models for command outputs, probe outcomes and the final
deployment summary.
"""

from dataclasses import dataclass, field
from typing import Optional

from hostdeploy.models.artifacts import NamedArtifacts


@dataclass
class ExecutionResult:
    """Result of a local command execution."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"


@dataclass
class SSHResult:
    """Result of an SSH command execution."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    host: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if SSH command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if SSH command failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"SSHResult(host={self.host}, returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"


@dataclass
class ProbeResult:
    """Outcome of a single deployment check."""

    name: str
    passed: bool
    detail: str = ""


@dataclass
class ValidationReport:
    """All checks run by the deployment validator."""

    checks: list[ProbeResult] = field(default_factory=list)

    def add(self, name: str, passed: bool, detail: str = "") -> ProbeResult:
        result = ProbeResult(name=name, passed=passed, detail=detail)
        self.checks.append(result)
        return result

    def get(self, name: str) -> Optional[ProbeResult]:
        for check in self.checks:
            if check.name == name:
                return check
        return None

    @property
    def passed(self) -> list[str]:
        return [c.name for c in self.checks if c.passed]

    @property
    def failed(self) -> list[str]:
        return [c.name for c in self.checks if not c.passed]


@dataclass
class DeploymentSummary:
    """Final record appended to the run log on success."""

    timestamp: str
    repo_url: str
    branch: str
    effective_branch: str
    remote_identity: str
    artifacts: NamedArtifacts
    app_port: int
    public_url: str

    def to_lines(self) -> list[str]:
        branch = self.branch
        if self.effective_branch and self.effective_branch != self.branch:
            branch = f"{self.branch} (deployed: {self.effective_branch})"
        return [
            f"Timestamp:      {self.timestamp}",
            f"Repository:     {self.repo_url}",
            f"Branch:         {branch}",
            f"Remote:         {self.remote_identity}",
            f"Container:      {self.artifacts.container_name}",
            f"Image:          {self.artifacts.image_name}",
            f"Remote dir:     ~/{self.artifacts.remote_dir}",
            f"Proxy site:     {self.artifacts.proxy_site}",
            f"App port:       {self.app_port}",
            f"Public URL:     {self.public_url}",
        ]
