"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass, field
from typing import Protocol


JOB_STATUS_IMPORTED = "imported"
JOB_STATUS_UP_TO_DATE = "up_to_date"
JOB_STATUS_FAILED = "failed"


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one sync run.

    Attributes:
        job_name: Job identifier.
        status: Final execution state (`imported`, `up_to_date`, `failed`).
        message: Human-readable outcome or failure reason.
        batch_file: Path of the batch file written by the run, if any.
        failed_stage: Name of the failed stage when status is `failed`.
        stage_timeline: Structured stage events recorded during the run.
    """

    job_name: str
    status: str
    message: str = ""
    batch_file: str | None = None
    failed_stage: str | None = None
    stage_timeline: list[dict[str, object]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status != JOB_STATUS_FAILED


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating sync jobs."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.

        Raises:
            RuntimeError: Raised when supported job metadata is unavailable.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow in the job layer.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ValueError: Raised when the job name is unsupported.
        """
