"""Sync trigger router composition."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from wallet_sync.jobs import JobExecutionResult, JobOrchestratorPort


def api_serialize_execution_result(execution_result: JobExecutionResult) -> dict[str, object]:
    """Serialize one sync run result for API responses."""

    return {
        "job_name": execution_result.job_name,
        "status": execution_result.status,
        "message": execution_result.message,
        "batch_file": execution_result.batch_file,
        "failed_stage": execution_result.failed_stage,
    }


def api_create_sync_router(sync_orchestrator: JobOrchestratorPort) -> APIRouter:
    """Create sync router with the run trigger endpoint.

    Args:
        sync_orchestrator: Job orchestrator executing sync runs.

    Returns:
        APIRouter: Router exposing sync APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if sync_orchestrator is None:
        raise ValueError("sync_orchestrator must not be None")

    router = APIRouter(prefix="/sync", tags=["sync"])

    @router.post("/run")
    def api_sync_run_trigger() -> JSONResponse:
        """Trigger one sync run and report its outcome.

        A run that imported a file or found nothing new answers 200; a failed
        upstream step answers 502 with its reason.

        Returns:
            JSONResponse: Trigger result payload.

        Raises:
            RuntimeError: Raised when execution fails unexpectedly.
        """

        execution_result = sync_orchestrator.job_execute(job_name="transaction_sync")
        status_code = status.HTTP_200_OK if execution_result.succeeded else status.HTTP_502_BAD_GATEWAY
        return JSONResponse(content=api_serialize_execution_result(execution_result), status_code=status_code)

    return router
