"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from wallet_sync.adapters import BudgetBakersSinkAdapter, EdenredSourceAdapter
from wallet_sync.api import create_api_application
from wallet_sync.config import AppSettings, config_load_settings
from wallet_sync.jobs import TransactionSyncConfig, TransactionSyncOrchestrator


def bootstrap_create_sync_orchestrator(settings: AppSettings | None = None) -> TransactionSyncOrchestrator:
    """Build the sync orchestrator from validated settings.

    Args:
        settings: Pre-loaded settings; loaded from the environment when omitted.

    Returns:
        TransactionSyncOrchestrator: Fully wired sync orchestrator instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    source_adapter = EdenredSourceAdapter(request_timeout_seconds=resolved_settings.request_timeout_seconds)
    sink_adapter = BudgetBakersSinkAdapter(
        api_base_url=resolved_settings.budgetbakers_api_base_url,
        upload_url=resolved_settings.budgetbakers_upload_url,
        request_timeout_seconds=resolved_settings.request_timeout_seconds,
    )
    return TransactionSyncOrchestrator(
        source_adapter=source_adapter,
        sink_adapter=sink_adapter,
        config=TransactionSyncConfig(
            source_host=resolved_settings.edenred_host,
            source_user=resolved_settings.edenred_user,
            source_password=resolved_settings.edenred_password,
            sink_user=resolved_settings.budgetbakers_user,
            sink_password=resolved_settings.budgetbakers_password,
            output_directory=resolved_settings.transactions_directory,
            only_new_rows=True,
        ),
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the API application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    return create_api_application(
        settings=resolved_settings,
        sync_orchestrator=bootstrap_create_sync_orchestrator(resolved_settings),
    )
