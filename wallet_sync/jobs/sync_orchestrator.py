"""Job-layer orchestrator moving Edenred movements into Wallet."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import loguru
from loguru import logger

from wallet_sync.adapters import (
    SINK_STATUS_UP_TO_DATE,
    SinkAdapterPort,
    SourceAdapterPort,
    SyncAdapterError,
)
from wallet_sync.domain import domain_build_stage_event, domain_map_movement_to_record

from .batch_writer import job_write_batch_file
from .interfaces import (
    JOB_STATUS_FAILED,
    JOB_STATUS_IMPORTED,
    JOB_STATUS_UP_TO_DATE,
    JobExecutionResult,
    JobOrchestratorPort,
)


class SyncJobLogger:
    """Handles all logging for sync runs."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def run_started(self, job_name: str) -> None:
        self._logger.bind(job_name=job_name).info("Sync run {} started", job_name)

    def batch_file_written(self, batch_file: Path, record_count: int) -> None:
        self._logger.bind(batch_file=str(batch_file), count=record_count).info(
            "Wrote {} transactions to {}", record_count, batch_file
        )

    def run_finished(self, job_name: str, status: str, message: str) -> None:
        self._logger.bind(job_name=job_name, status=status).info("Sync run {} {}: {}", job_name, status, message)

    def run_failed(self, job_name: str, stage: str | None, reason: str) -> None:
        self._logger.bind(job_name=job_name, stage=stage).error("Sync run {} failed: {}", job_name, reason)


@dataclass(frozen=True)
class TransactionSyncConfig:
    """Configuration values for one sync run.

    Attributes:
        source_host: Edenred customer portal base URL.
        source_user: Edenred login identifier.
        source_password: Edenred password.
        sink_user: Wallet login email.
        sink_password: Wallet password.
        output_directory: Directory receiving batch files.
        only_new_rows: Trim rows already covered by the last Wallet batch.
    """

    source_host: str
    source_user: str
    source_password: str
    sink_user: str
    sink_password: str
    output_directory: Path = Path("transactions")
    only_new_rows: bool = True

    def __repr__(self) -> str:
        return (
            f"TransactionSyncConfig(source_host={self.source_host!r}, source_user={self.source_user!r}, "
            f"sink_user={self.sink_user!r}, output_directory={str(self.output_directory)!r}, "
            f"only_new_rows={self.only_new_rows})"
        )


class TransactionSyncOrchestrator(JobOrchestratorPort):
    """Concrete job orchestrator for the fetch, write and upload workflow."""

    _SYNC_JOB_NAME = "transaction_sync"
    MAPPING_FAILED = "Failed to map transactions"
    WRITE_FAILED = "Failed to write transactions file"

    def __init__(
        self,
        source_adapter: SourceAdapterPort,
        sink_adapter: SinkAdapterPort,
        config: TransactionSyncConfig,
        clock: Callable[[], datetime] = datetime.now,
        job_logger: SyncJobLogger | None = None,
    ):
        """Initialize sync orchestrator dependencies.

        Args:
            source_adapter: Adapter fetching Edenred movements.
            sink_adapter: Adapter importing batch files into Wallet.
            config: Sync execution configuration.
            clock: Local wall-clock provider used to name batch files.
            job_logger: Optional logger facade.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
        """

        if source_adapter is None:
            raise ValueError("source_adapter must not be None")
        if sink_adapter is None:
            raise ValueError("sink_adapter must not be None")
        if config is None:
            raise ValueError("config must not be None")

        self._source_adapter = source_adapter
        self._sink_adapter = sink_adapter
        self._config = config
        self._clock = clock
        self._logger = job_logger or SyncJobLogger()

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported job names.

        Returns:
            tuple[str, ...]: Supported job names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (self._SYNC_JOB_NAME,)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Run one sync: fetch movements, write the batch file, upload new rows.

        Adapter failures end the run with a `failed` result carrying the
        step-specific reason. Nothing is retried.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: `imported`, `up_to_date` or `failed` outcome.

        Raises:
            ValueError: Raised when job name is unsupported.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._SYNC_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        self._logger.run_started(normalized_job_name)
        timeline: list[dict[str, object]] = [domain_build_stage_event(stage="run", status="started")]

        try:
            movements = self._source_adapter.source_fetch_movements(
                host=self._config.source_host,
                user_id=self._config.source_user,
                password=self._config.source_password,
            )
        except SyncAdapterError as error:
            return self._job_build_failure(normalized_job_name, error.stage, error.reason, timeline, error)
        timeline.append(
            domain_build_stage_event(stage="fetch_movements", status="completed", details={"count": len(movements)})
        )

        try:
            records = [domain_map_movement_to_record(movement) for movement in movements]
        except (ValueError, AttributeError) as error:
            return self._job_build_failure(
                normalized_job_name,
                "map_movements",
                f"{self.MAPPING_FAILED}: {error}",
                timeline,
            )

        try:
            batch_path = job_write_batch_file(
                records=records,
                directory=self._config.output_directory,
                created_at=self._clock(),
            )
        except OSError as error:
            return self._job_build_failure(
                normalized_job_name,
                "write_batch_file",
                f"{self.WRITE_FAILED}: {error}",
                timeline,
            )
        self._logger.batch_file_written(batch_path, len(records))
        timeline.append(
            domain_build_stage_event(
                stage="write_batch_file",
                status="completed",
                details={"batch_file": str(batch_path), "count": len(records)},
            )
        )

        try:
            upload_result = self._sink_adapter.sink_upload_batch_file(
                file_path=batch_path,
                email=self._config.sink_user,
                password=self._config.sink_password,
                only_new_rows=self._config.only_new_rows,
            )
        except SyncAdapterError as error:
            return self._job_build_failure(
                normalized_job_name,
                error.stage,
                error.reason,
                timeline,
                error,
                batch_file=str(batch_path),
            )

        timeline.extend(upload_result.stage_timeline)
        status = JOB_STATUS_UP_TO_DATE if upload_result.status == SINK_STATUS_UP_TO_DATE else JOB_STATUS_IMPORTED
        timeline.append(domain_build_stage_event(stage="run", status="completed"))
        self._logger.run_finished(normalized_job_name, status, upload_result.message)
        return JobExecutionResult(
            job_name=normalized_job_name,
            status=status,
            message=upload_result.message,
            batch_file=str(batch_path),
            stage_timeline=timeline,
        )

    def _job_build_failure(
        self,
        job_name: str,
        stage: str | None,
        reason: str,
        timeline: list[dict[str, object]],
        error: SyncAdapterError | None = None,
        batch_file: str | None = None,
    ) -> JobExecutionResult:
        """Build the failed run result and log the failure reason.

        Args:
            job_name: Executed job name.
            stage: Failed stage name.
            reason: Step-specific failure reason.
            timeline: Run timeline recorded so far.
            error: Adapter error whose own timeline is appended.
            batch_file: Batch file path when one was written.

        Returns:
            JobExecutionResult: Failed run result.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if error is not None:
            timeline.extend(error.stage_timeline)
        else:
            timeline.append(domain_build_stage_event(stage=stage or "run", status="failed", reason=reason))
        self._logger.run_failed(job_name, stage, reason)
        return JobExecutionResult(
            job_name=job_name,
            status=JOB_STATUS_FAILED,
            message=reason,
            batch_file=batch_file,
            failed_stage=stage,
            stage_timeline=timeline,
        )
