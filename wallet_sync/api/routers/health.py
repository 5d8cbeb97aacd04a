"""Health endpoint router composition."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from wallet_sync.config import AppSettings
from wallet_sync.domain import HealthStatus


def api_create_health_router(settings: AppSettings) -> APIRouter:
    """Create health-check router.

    Args:
        settings: Validated runtime settings used for health metadata.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when settings are missing.
    """

    if settings is None:
        raise ValueError("settings must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application health and the configured sink target.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.

        Raises:
            RuntimeError: Raised if the payload cannot be produced.
        """

        health = HealthStatus(status="ok", detail="sync service ready")
        payload = {
            "status": health.status,
            "app": "up",
            "detail": health.detail,
            "environment": settings.environment_name,
            "transactions_directory": str(settings.transactions_directory),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
