"""BudgetBakers Wallet adapter for incremental CSV batch imports.

One upload runs a strictly linear chain: login, identity lookup, batch list,
optional trimming, upload, batch re-list and format configuration. Each step
waits for the previous response and maps its own failure to a distinct error.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final, NoReturn

import httpx
import loguru
from loguru import logger

from wallet_sync.domain import (
    TrimParseWarning,
    domain_batch_content_has_header,
    domain_build_stage_event,
    domain_parse_batch_cutoff,
    domain_render_batch_content,
    domain_trim_batch_rows,
)
from wallet_sync.wire import WireDecodeError, WireSchemaType, wire_decode, wire_encode_import_config

from .errors import (
    AuthenticationError,
    BatchFileValidationError,
    BatchListError,
    CredentialsValidationError,
    IdentityLookupError,
    ImportConfigurationError,
    SyncAdapterError,
    UploadError,
)
from .interfaces import (
    SINK_STATUS_IMPORTED,
    SINK_STATUS_UP_TO_DATE,
    ImportBatch,
    SinkAdapterPort,
    SinkUploadResult,
)
from .session import AuthenticatedSession, session_extract_cookie, session_send_request


DEFAULT_BUDGETBAKERS_API_BASE_URL: Final[str] = "https://api.budgetbakers.com"
DEFAULT_BUDGETBAKERS_UPLOAD_URL: Final[str] = (
    "https://docs.budgetbakers.com/upload/import-web/fhfxoy@imports.budgetbakers.com"
)


class SinkAdapterLogger:
    """Handles all logging for the Wallet adapter."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def stage_started(self, stage: str) -> None:
        self._logger.bind(stage=stage).debug("Wallet stage started: {}", stage)

    def stage_failed(self, stage: str, reason: str, error: BaseException | None) -> None:
        self._logger.bind(stage=stage).error("Wallet stage {} failed: {} ({})", stage, reason, error)

    def trim_cutoff_unreadable(self, warning: TrimParseWarning) -> None:
        self._logger.bind(file_name=warning.file_name).warning(
            "{}: last batch {!r}, uploading file untrimmed", warning, warning.file_name
        )

    def trim_completed(self, file_name: str, kept_rows: int) -> None:
        self._logger.bind(file_name=file_name, kept_rows=kept_rows).info(
            "Trimmed batch file {} to {} new rows", file_name, kept_rows
        )

    def batch_up_to_date(self, file_name: str) -> None:
        self._logger.bind(file_name=file_name).info("Transactions up to date, {} not imported", file_name)

    def batch_imported(self, file_name: str, batch_id: str) -> None:
        self._logger.bind(file_name=file_name, batch_id=batch_id).info(
            "Imported {} as Wallet batch {}", file_name, batch_id
        )


@dataclass(frozen=True)
class _SinkRunContext:
    """Per-run state threaded through the upload chain.

    Attributes:
        client: HTTP client owned by the run.
        session: Session issued by the login step.
        stage_timeline: Mutable diagnostics timeline.
    """

    client: httpx.Client
    session: AuthenticatedSession
    stage_timeline: list[dict[str, object]]


class BudgetBakersSinkAdapter(SinkAdapterPort):
    """Adapter implementation for the Wallet web import flow."""

    _WEB_CLIENT_HEADERS: Final[dict[str, str]] = {
        "flavor": "0",
        "platform": "web",
        "web-version-code": "4.9.0",
    }
    _LOGIN_PATH: Final[str] = "/auth/authenticate/userpass"
    _USER_PATH: Final[str] = "/ribeez/user/abc"
    _IMPORTS_PATH: Final[str] = "/ribeez/import/v1/all"
    _IMPORT_RECORDS_PATH: Final[str] = "/ribeez/import/v1/item/{batch_id}/records"

    LOGIN_FAILED: Final[str] = "Login failed"
    USER_LOOKUP_FAILED: Final[str] = "Retrieving user information failed"
    BATCH_LIST_FAILED: Final[str] = "Retrieving imported files failed"
    UPLOAD_FAILED: Final[str] = "Uploading file failed"
    UPLOADED_BATCH_LOOKUP_FAILED: Final[str] = "Retrieving uploaded file failed"
    IMPORT_CONFIG_FAILED: Final[str] = "Importing file failed"
    UP_TO_DATE_MESSAGE: Final[str] = "Transactions up to date, file not imported"
    IMPORTED_MESSAGE: Final[str] = "File successfully imported"

    def __init__(
        self,
        api_base_url: str = DEFAULT_BUDGETBAKERS_API_BASE_URL,
        upload_url: str = DEFAULT_BUDGETBAKERS_UPLOAD_URL,
        request_timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        adapter_logger: SinkAdapterLogger | None = None,
    ):
        """Initialize Wallet adapter.

        Args:
            api_base_url: Base URL of the Wallet `ribeez` API.
            upload_url: Absolute URL receiving raw CSV uploads.
            request_timeout_seconds: Per-request timeout in seconds.
            transport: Optional httpx transport, used by tests to fake Wallet.
            adapter_logger: Optional logger facade.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_api_base_url = api_base_url.strip()
        normalized_upload_url = upload_url.strip()
        if not normalized_api_base_url:
            raise ValueError("api_base_url must not be blank")
        if not normalized_upload_url:
            raise ValueError("upload_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._api_base_url = normalized_api_base_url.rstrip("/")
        self._upload_url = normalized_upload_url
        self._request_timeout_seconds = request_timeout_seconds
        self._transport = transport
        self._logger = adapter_logger or SinkAdapterLogger()

    def adapter_sink_name(self) -> str:
        """Return stable adapter sink label.

        Returns:
            str: Sink identifier.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return "budgetbakers_wallet"

    def sink_upload_batch_file(
        self,
        file_path: Path,
        email: str,
        password: str,
        only_new_rows: bool = False,
    ) -> SinkUploadResult:
        """Upload one batch file to Wallet and configure its import.

        Args:
            file_path: Local batch file path.
            email: Wallet login email.
            password: Wallet password.
            only_new_rows: Drop rows older than the last imported batch before uploading.

        Returns:
            SinkUploadResult: `imported`, or `up_to_date` when trimming left no rows.

        Raises:
            BatchFileValidationError: Raised before any request when inputs are invalid.
            AuthenticationError: Raised when login fails.
            IdentityLookupError: Raised when the user identity cannot be read.
            BatchListError: Raised when the batch list cannot be read before or after upload.
            UploadError: Raised when the upload is rejected.
            ImportConfigurationError: Raised when the format configuration is rejected.
        """

        batch_path = Path(file_path)
        file_content = self._sink_validate_inputs(batch_path, email, password)
        stage_timeline: list[dict[str, object]] = []

        with httpx.Client(timeout=self._request_timeout_seconds, transport=self._transport) as client:
            session = self._sink_authenticate(client, email, password, stage_timeline)
            context = _SinkRunContext(client=client, session=session, stage_timeline=stage_timeline)
            user_id = self._sink_resolve_user_id(context)
            last_batch = self._sink_fetch_latest_batch(
                context,
                stage="list_batches",
                reason=self.BATCH_LIST_FAILED,
            )

            if only_new_rows:
                has_new_rows = self._sink_trim_batch_file(batch_path, file_content, last_batch, stage_timeline)
                if not has_new_rows:
                    self._logger.batch_up_to_date(batch_path.name)
                    return SinkUploadResult(
                        status=SINK_STATUS_UP_TO_DATE,
                        message=self.UP_TO_DATE_MESSAGE,
                        stage_timeline=stage_timeline,
                    )

            self._sink_upload(context, batch_path, user_id)
            uploaded_batch = self._sink_fetch_latest_batch(
                context,
                stage="list_uploaded_batch",
                reason=self.UPLOADED_BATCH_LOOKUP_FAILED,
            )
            if uploaded_batch is None:
                self._sink_raise_stage_failure(
                    BatchListError,
                    stage="list_uploaded_batch",
                    reason=self.UPLOADED_BATCH_LOOKUP_FAILED,
                    stage_timeline=stage_timeline,
                )
            self._sink_configure_import(context, uploaded_batch.batch_id)

        self._logger.batch_imported(batch_path.name, uploaded_batch.batch_id)
        return SinkUploadResult(
            status=SINK_STATUS_IMPORTED,
            message=self.IMPORTED_MESSAGE,
            batch_id=uploaded_batch.batch_id,
            stage_timeline=stage_timeline,
        )

    def _sink_validate_inputs(self, batch_path: Path, email: str, password: str) -> str:
        """Validate credentials and the local batch file before any request.

        Args:
            batch_path: Local batch file path.
            email: Wallet login email.
            password: Wallet password.

        Returns:
            str: Batch file content.

        Raises:
            CredentialsValidationError: Raised when credentials are blank.
            BatchFileValidationError: Raised when the file is missing, unreadable or lacks the header.
        """

        if not (email or "").strip() or not (password or "").strip():
            raise CredentialsValidationError("Credentials required", stage="validate")
        if not batch_path.is_file():
            raise BatchFileValidationError("File not specified or not found", stage="validate")

        try:
            with batch_path.open(encoding="utf-8", newline="") as batch_file:
                file_content = batch_file.read()
        except (OSError, UnicodeDecodeError) as error:
            raise BatchFileValidationError("Can't read file", stage="validate") from error
        if not file_content:
            raise BatchFileValidationError("Can't read file", stage="validate")
        if not domain_batch_content_has_header(file_content):
            raise BatchFileValidationError("File data may have wrong format", stage="validate")
        return file_content

    def _sink_authenticate(
        self,
        client: httpx.Client,
        email: str,
        password: str,
        stage_timeline: list[dict[str, object]],
    ) -> AuthenticatedSession:
        """Log in with form-encoded credentials and capture the session cookie.

        Args:
            client: HTTP client owned by the run.
            email: Wallet login email.
            password: Wallet password.
            stage_timeline: Mutable diagnostics timeline.

        Returns:
            AuthenticatedSession: Cookie-only session.

        Raises:
            AuthenticationError: Raised on non-success status, transport failure or missing cookie.
        """

        stage = "authenticate"
        self._sink_record_stage_started(stage, stage_timeline)
        try:
            response = session_send_request(
                client,
                "POST",
                f"{self._api_base_url}{self._LOGIN_PATH}",
                data={"username": email, "password": password},
            )
        except httpx.HTTPError as error:
            self._sink_raise_stage_failure(
                AuthenticationError,
                stage=stage,
                reason=self.LOGIN_FAILED,
                stage_timeline=stage_timeline,
                error=error,
            )

        cookie = session_extract_cookie(response)
        if cookie is None:
            self._sink_raise_stage_failure(
                AuthenticationError,
                stage=stage,
                reason=self.LOGIN_FAILED,
                stage_timeline=stage_timeline,
            )
        stage_timeline.append(domain_build_stage_event(stage=stage, status="completed"))
        return AuthenticatedSession(cookie=cookie)

    def _sink_resolve_user_id(self, context: _SinkRunContext) -> str:
        """Fetch the `User` message and return the account identifier.

        Args:
            context: Per-run state.

        Returns:
            str: Opaque Wallet user id.

        Raises:
            IdentityLookupError: Raised when the request, decoding or id lookup fails.
        """

        stage = "resolve_identity"
        self._sink_record_stage_started(stage, context.stage_timeline)
        try:
            response = session_send_request(
                context.client,
                "GET",
                f"{self._api_base_url}{self._USER_PATH}",
                session=context.session,
                headers=self._WEB_CLIENT_HEADERS,
            )
            user_message = wire_decode(WireSchemaType.USER, response.content)
        except (httpx.HTTPError, WireDecodeError) as error:
            self._sink_raise_stage_failure(
                IdentityLookupError,
                stage=stage,
                reason=self.USER_LOOKUP_FAILED,
                stage_timeline=context.stage_timeline,
                error=error,
            )

        user_id = str(user_message.get("id") or "").strip()
        if not user_id:
            self._sink_raise_stage_failure(
                IdentityLookupError,
                stage=stage,
                reason=self.USER_LOOKUP_FAILED,
                stage_timeline=context.stage_timeline,
            )
        context.stage_timeline.append(domain_build_stage_event(stage=stage, status="completed"))
        return user_id

    def _sink_fetch_latest_batch(self, context: _SinkRunContext, stage: str, reason: str) -> ImportBatch | None:
        """Fetch the `Imports` message and return its most recent batch.

        Args:
            context: Per-run state.
            stage: Stage name used for diagnostics.
            reason: Failure reason for this call site.

        Returns:
            ImportBatch | None: First listed batch, or None when Wallet lists none.

        Raises:
            BatchListError: Raised when the request or decoding fails.
        """

        self._sink_record_stage_started(stage, context.stage_timeline)
        try:
            response = session_send_request(
                context.client,
                "GET",
                f"{self._api_base_url}{self._IMPORTS_PATH}",
                session=context.session,
                headers=self._WEB_CLIENT_HEADERS,
            )
            imports_message = wire_decode(WireSchemaType.IMPORTS, response.content)
        except (httpx.HTTPError, WireDecodeError) as error:
            self._sink_raise_stage_failure(
                BatchListError,
                stage=stage,
                reason=reason,
                stage_timeline=context.stage_timeline,
                error=error,
            )

        listed_files = imports_message.get("files") or []
        latest_batch = None
        if listed_files:
            latest_file = listed_files[0]
            latest_batch = ImportBatch(batch_id=str(latest_file["id"]), file_name=latest_file.get("fileName"))
        context.stage_timeline.append(
            domain_build_stage_event(
                stage=stage,
                status="completed",
                details={
                    "batch_count": len(listed_files),
                    "latest_batch_id": latest_batch.batch_id if latest_batch else None,
                },
            )
        )
        return latest_batch

    def _sink_trim_batch_file(
        self,
        batch_path: Path,
        file_content: str,
        last_batch: ImportBatch | None,
        stage_timeline: list[dict[str, object]],
    ) -> bool:
        """Drop rows already covered by the last imported batch.

        An unreadable cutoff is logged and the file is uploaded untouched.

        Args:
            batch_path: Local batch file path, rewritten in place when trimmed.
            file_content: Current batch file content.
            last_batch: Most recent batch Wallet already imported.
            stage_timeline: Mutable diagnostics timeline.

        Returns:
            bool: False when no data rows survive trimming.

        Raises:
            BatchFileValidationError: Raised when the trimmed file cannot be written.
        """

        stage = "trim"
        if last_batch is None:
            stage_timeline.append(domain_build_stage_event(stage=stage, status="skipped", reason="no prior batch"))
            return True

        try:
            cutoff = domain_parse_batch_cutoff(last_batch.file_name)
        except TrimParseWarning as warning:
            self._logger.trim_cutoff_unreadable(warning)
            stage_timeline.append(domain_build_stage_event(stage=stage, status="skipped", reason=str(warning)))
            return True

        surviving_rows = domain_trim_batch_rows(file_content, cutoff)
        if not surviving_rows:
            stage_timeline.append(
                domain_build_stage_event(
                    stage=stage,
                    status="completed",
                    details={"cutoff": cutoff.isoformat(), "kept_rows": 0},
                )
            )
            return False

        try:
            batch_path.write_text(domain_render_batch_content(surviving_rows), encoding="utf-8", newline="")
        except OSError as error:
            self._sink_raise_stage_failure(
                BatchFileValidationError,
                stage=stage,
                reason="Error rewriting file",
                stage_timeline=stage_timeline,
                error=error,
            )

        self._logger.trim_completed(batch_path.name, len(surviving_rows))
        stage_timeline.append(
            domain_build_stage_event(
                stage=stage,
                status="completed",
                details={"cutoff": cutoff.isoformat(), "kept_rows": len(surviving_rows)},
            )
        )
        return True

    def _sink_upload(self, context: _SinkRunContext, batch_path: Path, user_id: str) -> None:
        """POST the raw batch file bytes to the Wallet upload endpoint.

        Args:
            context: Per-run state.
            batch_path: Local batch file path.
            user_id: Wallet user id resolved after login.

        Returns:
            None: Upload acknowledgement is not inspected beyond its status.

        Raises:
            UploadError: Raised when the file cannot be read or the upload is rejected.
        """

        stage = "upload"
        self._sink_record_stage_started(stage, context.stage_timeline)
        upload_headers = {
            "content-type": "text/csv",
            **self._WEB_CLIENT_HEADERS,
            "x-filename": batch_path.name,
            "x-userid": user_id,
        }
        try:
            session_send_request(
                context.client,
                "POST",
                self._upload_url,
                headers=upload_headers,
                content=batch_path.read_bytes(),
            )
        except (httpx.HTTPError, OSError) as error:
            self._sink_raise_stage_failure(
                UploadError,
                stage=stage,
                reason=self.UPLOAD_FAILED,
                stage_timeline=context.stage_timeline,
                error=error,
            )
        context.stage_timeline.append(
            domain_build_stage_event(stage=stage, status="completed", details={"file_name": batch_path.name})
        )

    def _sink_configure_import(self, context: _SinkRunContext, batch_id: str) -> None:
        """POST the format configuration message for the uploaded batch.

        Args:
            context: Per-run state.
            batch_id: Server-assigned id of the batch uploaded in this run.

        Returns:
            None: Records endpoint response body is not used.

        Raises:
            ImportConfigurationError: Raised when the configuration request fails.
        """

        stage = "configure_import"
        self._sink_record_stage_started(stage, context.stage_timeline)
        configure_headers = {
            **self._WEB_CLIENT_HEADERS,
            "content-type": "application/x-protobuf",
        }
        try:
            session_send_request(
                context.client,
                "POST",
                f"{self._api_base_url}{self._IMPORT_RECORDS_PATH.format(batch_id=batch_id)}",
                session=context.session,
                headers=configure_headers,
                content=wire_encode_import_config(),
            )
        except httpx.HTTPError as error:
            self._sink_raise_stage_failure(
                ImportConfigurationError,
                stage=stage,
                reason=self.IMPORT_CONFIG_FAILED,
                stage_timeline=context.stage_timeline,
                error=error,
            )
        context.stage_timeline.append(
            domain_build_stage_event(stage=stage, status="completed", details={"batch_id": batch_id})
        )

    def _sink_record_stage_started(self, stage: str, stage_timeline: list[dict[str, object]]) -> None:
        self._logger.stage_started(stage)
        stage_timeline.append(domain_build_stage_event(stage=stage, status="started"))

    def _sink_raise_stage_failure(
        self,
        error_type: type[SyncAdapterError],
        stage: str,
        reason: str,
        stage_timeline: list[dict[str, object]],
        error: BaseException | None = None,
    ) -> NoReturn:
        """Record a failed stage and raise its typed adapter error.

        Args:
            error_type: Adapter error class for the stage.
            stage: Failed stage name.
            reason: Step-specific failure reason.
            stage_timeline: Mutable diagnostics timeline.
            error: Underlying cause, chained onto the raised error.

        Returns:
            NoReturn: This helper always raises.

        Raises:
            SyncAdapterError: Always raised as `error_type`.
        """

        self._logger.stage_failed(stage, reason, error)
        stage_timeline.append(domain_build_stage_event(stage=stage, status="failed", reason=reason))
        raise error_type(reason, stage=stage, stage_timeline=stage_timeline) from error
