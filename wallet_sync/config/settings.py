"""Typed runtime settings with dotenv support and startup validation."""

from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for sync runs and the trigger API.

    Environment variable names map directly to field names in uppercase.
    Example: `edenred_host` reads from `EDENRED_HOST`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Minimum loguru level for the stderr sink.
        edenred_host: Edenred customer portal base URL.
        edenred_user: Edenred login identifier.
        edenred_password: Edenred password.
        budgetbakers_user: Wallet login email.
        budgetbakers_password: Wallet password.
        budgetbakers_api_base_url: Wallet `ribeez` API base URL.
        budgetbakers_upload_url: Wallet CSV upload URL.
        transactions_directory: Directory receiving batch files.
        request_timeout_seconds: Per-request HTTP timeout.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    edenred_host: str = Field(min_length=1)
    edenred_user: str = Field(min_length=1)
    edenred_password: str = Field(min_length=1)
    budgetbakers_user: str = Field(min_length=1)
    budgetbakers_password: str = Field(min_length=1)
    budgetbakers_api_base_url: str = Field(default="https://api.budgetbakers.com", min_length=1)
    budgetbakers_upload_url: str = Field(
        default="https://docs.budgetbakers.com/upload/import-web/fhfxoy@imports.budgetbakers.com",
        min_length=1,
    )
    transactions_directory: Path = Field(default=Path("transactions"))
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator(
        "edenred_host",
        "edenred_user",
        "edenred_password",
        "budgetbakers_user",
        "budgetbakers_password",
    )
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_level = value.strip().upper()
        if normalized_level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_level


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
