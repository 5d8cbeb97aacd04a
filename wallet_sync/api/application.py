"""FastAPI application factory for the sync trigger surface."""

from fastapi import FastAPI

from wallet_sync.config import AppSettings
from wallet_sync.jobs import JobOrchestratorPort

from .routers import api_create_health_router, api_create_sync_router


def create_api_application(settings: AppSettings, sync_orchestrator: JobOrchestratorPort) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        sync_orchestrator: Job orchestrator for sync trigger execution.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        RuntimeError: Raised if application initialization fails.
    """
    application = FastAPI(title="Wallet Sync")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        return {
            "service": "wallet-sync",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(settings=settings))
    application.include_router(api_create_sync_router(sync_orchestrator=sync_orchestrator))
    return application
