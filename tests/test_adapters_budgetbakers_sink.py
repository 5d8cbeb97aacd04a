"""Tests for the Wallet upload chain against an in-process fake Wallet API.

The fake answers every endpoint of the chain through `httpx.MockTransport`
and records the order of calls, so each test can assert which steps ran.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from loguru import logger

from wallet_sync.adapters import (
    SINK_STATUS_IMPORTED,
    SINK_STATUS_UP_TO_DATE,
    AuthenticationError,
    BatchFileValidationError,
    BatchListError,
    BudgetBakersSinkAdapter,
    CredentialsValidationError,
    IdentityLookupError,
    ImportConfigurationError,
    UploadError,
)
from wallet_sync.domain import BATCH_FILE_HEADER
from wallet_sync.wire import WireSchemaType, wire_encode, wire_encode_import_config


_API_BASE_URL = "https://api.wallet.test"
_UPLOAD_URL = "https://docs.wallet.test/upload/import-web/box@imports.wallet.test"
_BATCH_FILE_NAME = "2024-03-16T10-00.csv"
_BATCH_ROWS = (
    "2024-03-15T13:59:00.000000+0000,Lunch,0,-12.5",
    "2024-03-15T14:00:00.000000+0000,Refund,5,0",
    "2024-03-16T09:10:00.000000+0000,Groceries,0,-40",
)
_CHAIN_STEPS = ("login", "user", "list_before", "upload", "list_after", "records")


class _FakeWalletApi:
    """Callable MockTransport handler emulating the Wallet web import API."""

    def __init__(
        self,
        batches_before: list[dict[str, str]],
        batches_after: list[dict[str, str]] | None = None,
        fail_step: str | None = None,
        login_sets_cookie: bool = True,
        user_payload: bytes | None = None,
    ):
        """Initialize fake responses.

        Args:
            batches_before: Batch list returned before the upload.
            batches_after: Batch list returned after the upload.
            fail_step: Chain step answered with HTTP 500.
            login_sets_cookie: Whether login returns a `set-cookie` header.
            user_payload: Raw `User` response body override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: This fake does not raise runtime errors.
        """

        self.batches_before = batches_before
        self.batches_after = batches_after if batches_after is not None else []
        self.fail_step = fail_step
        self.login_sets_cookie = login_sets_cookie
        self.user_payload = user_payload
        self.steps: list[str] = []
        self.requests: dict[str, httpx.Request] = {}
        self._list_calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        step = self._resolve_step(request)
        if step is None:
            return httpx.Response(404)
        self.steps.append(step)
        self.requests[step] = request
        if step == self.fail_step:
            return httpx.Response(500)

        if step == "login":
            headers = [("set-cookie", "session=abc; Path=/; HttpOnly"), ("set-cookie", "csrf=xyz; Path=/")]
            return httpx.Response(200, headers=headers if self.login_sets_cookie else [])
        if step == "user":
            body = self.user_payload
            if body is None:
                body = wire_encode(WireSchemaType.USER, {"id": "user-1"})
            return httpx.Response(200, content=body)
        if step == "list_before":
            return httpx.Response(200, content=wire_encode(WireSchemaType.IMPORTS, {"files": self.batches_before}))
        if step == "list_after":
            return httpx.Response(200, content=wire_encode(WireSchemaType.IMPORTS, {"files": self.batches_after}))
        return httpx.Response(200)

    def _resolve_step(self, request: httpx.Request) -> str | None:
        path = request.url.path
        if request.url.host == "docs.wallet.test" and request.method == "POST":
            return "upload"
        if request.method == "POST" and path == "/auth/authenticate/userpass":
            return "login"
        if request.method == "GET" and path == "/ribeez/user/abc":
            return "user"
        if request.method == "GET" and path == "/ribeez/import/v1/all":
            self._list_calls += 1
            return "list_before" if self._list_calls == 1 else "list_after"
        if request.method == "POST" and path.startswith("/ribeez/import/v1/item/") and path.endswith("/records"):
            return "records"
        return None


def _write_batch_file(directory: Path, file_name: str = _BATCH_FILE_NAME) -> Path:
    batch_path = directory / file_name
    batch_path.write_text("\n".join([BATCH_FILE_HEADER, *_BATCH_ROWS]) + "\n", encoding="utf-8")
    return batch_path


def _build_adapter(fake_api: _FakeWalletApi) -> BudgetBakersSinkAdapter:
    return BudgetBakersSinkAdapter(
        api_base_url=_API_BASE_URL,
        upload_url=_UPLOAD_URL,
        transport=httpx.MockTransport(fake_api),
    )


def test_adapters_sink_imports_full_file_when_no_prior_batch(tmp_path: Path) -> None:
    """Upload untrimmed content and configure the newly listed batch.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate the full chain and its request shapes.

    Raises:
        AssertionError: Raised when a step is skipped or sent malformed.
    """

    batch_path = _write_batch_file(tmp_path)
    original_bytes = batch_path.read_bytes()
    fake_api = _FakeWalletApi(
        batches_before=[],
        batches_after=[{"id": "batch-9", "fileName": _BATCH_FILE_NAME}],
    )

    result = _build_adapter(fake_api).sink_upload_batch_file(
        batch_path, "someone@example.test", "secret", only_new_rows=True
    )

    assert result.status == SINK_STATUS_IMPORTED
    assert result.message == "File successfully imported"
    assert result.batch_id == "batch-9"
    assert fake_api.steps == list(_CHAIN_STEPS)
    assert batch_path.read_bytes() == original_bytes

    login_request = fake_api.requests["login"]
    assert login_request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert login_request.content == b"username=someone%40example.test&password=secret"

    user_request = fake_api.requests["user"]
    assert user_request.headers["cookie"] == "session=abc; csrf=xyz"
    assert user_request.headers["platform"] == "web"
    assert user_request.headers["web-version-code"] == "4.9.0"
    assert user_request.headers["flavor"] == "0"

    upload_request = fake_api.requests["upload"]
    assert upload_request.content == original_bytes
    assert upload_request.headers["content-type"] == "text/csv"
    assert upload_request.headers["x-filename"] == _BATCH_FILE_NAME
    assert upload_request.headers["x-userid"] == "user-1"

    records_request = fake_api.requests["records"]
    assert records_request.url.path == "/ribeez/import/v1/item/batch-9/records"
    assert records_request.headers["content-type"] == "application/x-protobuf"
    assert records_request.headers["cookie"] == "session=abc; csrf=xyz"
    assert records_request.content == wire_encode_import_config()


def test_adapters_sink_trims_rows_older_than_last_batch(tmp_path: Path) -> None:
    """Rewrite the file with header plus rows at or after the cutoff, then upload it.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate trimming and the uploaded bytes.

    Raises:
        AssertionError: Raised when stale rows are uploaded.
    """

    batch_path = _write_batch_file(tmp_path)
    fake_api = _FakeWalletApi(
        batches_before=[{"id": "batch-1", "fileName": "2024-03-15T14-00.csv"}],
        batches_after=[
            {"id": "batch-2", "fileName": _BATCH_FILE_NAME},
            {"id": "batch-1", "fileName": "2024-03-15T14-00.csv"},
        ],
    )

    result = _build_adapter(fake_api).sink_upload_batch_file(
        batch_path, "someone@example.test", "secret", only_new_rows=True
    )

    expected_content = "\n".join([BATCH_FILE_HEADER, _BATCH_ROWS[1], _BATCH_ROWS[2]])
    assert result.status == SINK_STATUS_IMPORTED
    assert result.batch_id == "batch-2"
    assert batch_path.read_text(encoding="utf-8") == expected_content
    assert fake_api.requests["upload"].content == expected_content.encode("utf-8")
    assert fake_api.requests["records"].url.path == "/ribeez/import/v1/item/batch-2/records"
    trim_events = [event for event in result.stage_timeline if event["stage"] == "trim"]
    assert trim_events[-1]["details"] == {"cutoff": "2024-03-15T14:00:00", "kept_rows": 2}


def test_adapters_sink_trim_preserves_carriage_return_inside_quoted_note(tmp_path: Path) -> None:
    """Keep quoted notes with `\\r` intact through trimming, rewrite and upload.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate uploaded bytes keep the whole row.

    Raises:
        AssertionError: Raised when the row is split at the carriage return.
    """

    batch_path = tmp_path / _BATCH_FILE_NAME
    quoted_row = '2024-03-16T09:20:00,"Shop\rTwo",0,-3'
    batch_path.write_bytes(
        f"{BATCH_FILE_HEADER}\n{_BATCH_ROWS[0]}\n{quoted_row}\n".encode("utf-8")
    )
    fake_api = _FakeWalletApi(
        batches_before=[{"id": "batch-1", "fileName": "2024-03-15T14-00.csv"}],
        batches_after=[{"id": "batch-2", "fileName": _BATCH_FILE_NAME}],
    )

    _build_adapter(fake_api).sink_upload_batch_file(
        batch_path, "someone@example.test", "secret", only_new_rows=True
    )

    expected_bytes = f"{BATCH_FILE_HEADER}\n{quoted_row}".encode("utf-8")
    assert batch_path.read_bytes() == expected_bytes
    assert fake_api.requests["upload"].content == expected_bytes


def test_adapters_sink_reports_up_to_date_without_uploading(tmp_path: Path) -> None:
    """Stop after trimming when no row is newer than the last batch.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate the short-circuit outcome.

    Raises:
        AssertionError: Raised when upload or configuration is attempted.
    """

    batch_path = _write_batch_file(tmp_path)
    original_bytes = batch_path.read_bytes()
    fake_api = _FakeWalletApi(batches_before=[{"id": "batch-1", "fileName": "2024-03-17T00-00.csv"}])

    result = _build_adapter(fake_api).sink_upload_batch_file(
        batch_path, "someone@example.test", "secret", only_new_rows=True
    )

    assert result.status == SINK_STATUS_UP_TO_DATE
    assert result.message == "Transactions up to date, file not imported"
    assert result.batch_id is None
    assert fake_api.steps == ["login", "user", "list_before"]
    assert batch_path.read_bytes() == original_bytes


def test_adapters_sink_skips_trimming_when_not_requested(tmp_path: Path) -> None:
    batch_path = _write_batch_file(tmp_path)
    original_bytes = batch_path.read_bytes()
    fake_api = _FakeWalletApi(
        batches_before=[{"id": "batch-1", "fileName": "2024-03-17T00-00.csv"}],
        batches_after=[{"id": "batch-2", "fileName": _BATCH_FILE_NAME}],
    )

    result = _build_adapter(fake_api).sink_upload_batch_file(batch_path, "someone@example.test", "secret")

    assert result.status == SINK_STATUS_IMPORTED
    assert fake_api.requests["upload"].content == original_bytes


def test_adapters_sink_unreadable_cutoff_warns_and_uploads_untrimmed(tmp_path: Path) -> None:
    """Log a warning and upload the whole file when the last batch name has no date.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate the non-fatal trimming fallback.

    Raises:
        AssertionError: Raised when the run fails or rows are dropped.
    """

    batch_path = _write_batch_file(tmp_path)
    original_bytes = batch_path.read_bytes()
    fake_api = _FakeWalletApi(
        batches_before=[{"id": "batch-1", "fileName": "statement.csv"}],
        batches_after=[{"id": "batch-2", "fileName": _BATCH_FILE_NAME}],
    )
    captured_messages: list[str] = []
    handler_id = logger.add(captured_messages.append, level="WARNING", format="{message}")
    try:
        result = _build_adapter(fake_api).sink_upload_batch_file(
            batch_path, "someone@example.test", "secret", only_new_rows=True
        )
    finally:
        logger.remove(handler_id)

    assert result.status == SINK_STATUS_IMPORTED
    assert fake_api.requests["upload"].content == original_bytes
    assert any("Couldn't read last uploaded date" in message for message in captured_messages)
    trim_events = [event for event in result.stage_timeline if event["stage"] == "trim"]
    assert trim_events == [
        {
            "stage": "trim",
            "status": "skipped",
            "at_utc": trim_events[0]["at_utc"],
            "reason": "Couldn't read last uploaded date",
        }
    ]


@pytest.mark.parametrize(
    ("fail_step", "error_type", "reason"),
    [
        ("login", AuthenticationError, "Login failed"),
        ("user", IdentityLookupError, "Retrieving user information failed"),
        ("list_before", BatchListError, "Retrieving imported files failed"),
        ("upload", UploadError, "Uploading file failed"),
        ("list_after", BatchListError, "Retrieving uploaded file failed"),
        ("records", ImportConfigurationError, "Importing file failed"),
    ],
)
def test_adapters_sink_step_failure_stops_chain_with_step_reason(
    tmp_path: Path,
    fail_step: str,
    error_type: type[Exception],
    reason: str,
) -> None:
    """Raise the failed step's typed error and never call later steps.

    Args:
        tmp_path: Pytest temporary directory fixture.
        fail_step: Step answered with HTTP 500.
        error_type: Expected adapter error type.
        reason: Expected failure reason.

    Returns:
        None: Assertions validate failure isolation per step.

    Raises:
        AssertionError: Raised when the reason is wrong or later steps run.
    """

    batch_path = _write_batch_file(tmp_path)
    fake_api = _FakeWalletApi(
        batches_before=[],
        batches_after=[{"id": "batch-9", "fileName": _BATCH_FILE_NAME}],
        fail_step=fail_step,
    )

    with pytest.raises(error_type) as error_info:
        _build_adapter(fake_api).sink_upload_batch_file(
            batch_path, "someone@example.test", "secret", only_new_rows=True
        )

    assert error_info.value.reason == reason
    assert str(error_info.value) == reason
    assert error_info.value.stage_timeline[-1]["status"] == "failed"
    assert fake_api.steps == list(_CHAIN_STEPS[: _CHAIN_STEPS.index(fail_step) + 1])


def test_adapters_sink_login_without_cookie_is_login_failure(tmp_path: Path) -> None:
    batch_path = _write_batch_file(tmp_path)
    fake_api = _FakeWalletApi(batches_before=[], login_sets_cookie=False)

    with pytest.raises(AuthenticationError, match="Login failed"):
        _build_adapter(fake_api).sink_upload_batch_file(batch_path, "someone@example.test", "secret")

    assert fake_api.steps == ["login"]


def test_adapters_sink_undecodable_user_payload_is_identity_failure(tmp_path: Path) -> None:
    batch_path = _write_batch_file(tmp_path)
    fake_api = _FakeWalletApi(batches_before=[], user_payload=b"\x0a\x05ab")

    with pytest.raises(IdentityLookupError, match="Retrieving user information failed") as error_info:
        _build_adapter(fake_api).sink_upload_batch_file(batch_path, "someone@example.test", "secret")

    assert error_info.value.stage == "resolve_identity"
    assert fake_api.steps == ["login", "user"]


def test_adapters_sink_empty_listing_after_upload_is_uploaded_batch_failure(tmp_path: Path) -> None:
    batch_path = _write_batch_file(tmp_path)
    fake_api = _FakeWalletApi(batches_before=[], batches_after=[])

    with pytest.raises(BatchListError, match="Retrieving uploaded file failed"):
        _build_adapter(fake_api).sink_upload_batch_file(batch_path, "someone@example.test", "secret")

    assert "records" not in fake_api.steps


def test_adapters_sink_upload_timeout_maps_to_upload_failure(tmp_path: Path) -> None:
    """Map transport timeouts to the failing step instead of leaking httpx errors.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate timeout mapping.

    Raises:
        AssertionError: Raised when the timeout escapes untyped.
    """

    batch_path = _write_batch_file(tmp_path)
    fake_api = _FakeWalletApi(batches_before=[], batches_after=[{"id": "batch-9"}])

    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "docs.wallet.test":
            raise httpx.ReadTimeout("upload timed out", request=request)
        return fake_api(request)

    adapter = BudgetBakersSinkAdapter(
        api_base_url=_API_BASE_URL,
        upload_url=_UPLOAD_URL,
        transport=httpx.MockTransport(_handler),
    )

    with pytest.raises(UploadError, match="Uploading file failed") as error_info:
        adapter.sink_upload_batch_file(batch_path, "someone@example.test", "secret")

    assert isinstance(error_info.value.__cause__, httpx.ReadTimeout)
    assert isinstance(error_info.value, ConnectionError)


@pytest.mark.parametrize(
    ("email", "password"),
    [("", "secret"), ("someone@example.test", ""), ("   ", "secret")],
)
def test_adapters_sink_blank_credentials_fail_before_any_request(
    tmp_path: Path, email: str, password: str
) -> None:
    batch_path = _write_batch_file(tmp_path)
    fake_api = _FakeWalletApi(batches_before=[])

    with pytest.raises(CredentialsValidationError, match="Credentials required"):
        _build_adapter(fake_api).sink_upload_batch_file(batch_path, email, password)

    assert fake_api.steps == []


def test_adapters_sink_missing_file_fails_before_any_request(tmp_path: Path) -> None:
    fake_api = _FakeWalletApi(batches_before=[])

    with pytest.raises(BatchFileValidationError, match="File not specified or not found"):
        _build_adapter(fake_api).sink_upload_batch_file(tmp_path / "missing.csv", "someone@example.test", "secret")

    assert fake_api.steps == []


def test_adapters_sink_file_without_header_fails_before_any_request(tmp_path: Path) -> None:
    """Reject a batch file lacking the column header before logging in.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate pre-network validation.

    Raises:
        AssertionError: Raised when the adapter contacts Wallet.
    """

    batch_path = tmp_path / _BATCH_FILE_NAME
    batch_path.write_text("when,what,how much\n" + "\n".join(_BATCH_ROWS), encoding="utf-8")
    fake_api = _FakeWalletApi(batches_before=[])

    with pytest.raises(BatchFileValidationError, match="File data may have wrong format") as error_info:
        _build_adapter(fake_api).sink_upload_batch_file(batch_path, "someone@example.test", "secret")

    assert isinstance(error_info.value, ValueError)
    assert fake_api.steps == []


def test_adapters_sink_empty_file_fails_before_any_request(tmp_path: Path) -> None:
    batch_path = tmp_path / _BATCH_FILE_NAME
    batch_path.write_text("", encoding="utf-8")
    fake_api = _FakeWalletApi(batches_before=[])

    with pytest.raises(BatchFileValidationError, match="Can't read file"):
        _build_adapter(fake_api).sink_upload_batch_file(batch_path, "someone@example.test", "secret")

    assert fake_api.steps == []


def test_adapters_sink_rejects_blank_configuration() -> None:
    with pytest.raises(ValueError):
        BudgetBakersSinkAdapter(api_base_url=" ")
    with pytest.raises(ValueError):
        BudgetBakersSinkAdapter(request_timeout_seconds=0)
