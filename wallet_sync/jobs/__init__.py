"""Job layer package for sync workflow orchestration boundaries."""

from .batch_writer import job_build_batch_file_name, job_write_batch_file
from .interfaces import (
	JOB_STATUS_FAILED,
	JOB_STATUS_IMPORTED,
	JOB_STATUS_UP_TO_DATE,
	JobExecutionResult,
	JobOrchestratorPort,
)
from .sync_orchestrator import SyncJobLogger, TransactionSyncConfig, TransactionSyncOrchestrator

__all__ = [
	"JOB_STATUS_FAILED",
	"JOB_STATUS_IMPORTED",
	"JOB_STATUS_UP_TO_DATE",
	"JobExecutionResult",
	"JobOrchestratorPort",
	"SyncJobLogger",
	"TransactionSyncConfig",
	"TransactionSyncOrchestrator",
	"job_build_batch_file_name",
	"job_write_batch_file",
]
