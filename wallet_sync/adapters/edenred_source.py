"""Edenred customer portal adapter for card movement retrieval."""

from __future__ import annotations

from typing import Any, Final, NoReturn

import httpx
import loguru
from loguru import logger

from wallet_sync.domain import domain_build_stage_event

from .errors import (
    AuthenticationError,
    CredentialsValidationError,
    IdentityLookupError,
    MovementFetchError,
    SyncAdapterError,
)
from .interfaces import SourceAdapterPort
from .session import AuthenticatedSession, session_extract_cookie, session_send_request


class SourceAdapterLogger:
    """Handles all logging for the Edenred adapter."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def stage_started(self, stage: str) -> None:
        self._logger.bind(stage=stage).debug("Edenred stage started: {}", stage)

    def stage_failed(self, stage: str, reason: str, error: BaseException | None) -> None:
        self._logger.bind(stage=stage).error("Edenred stage {} failed: {} ({})", stage, reason, error)

    def movements_fetched(self, card_id: str, movement_count: int) -> None:
        self._logger.bind(card_id=card_id, count=movement_count).info(
            "Fetched {} movements for card {}", movement_count, card_id
        )


class EdenredSourceAdapter(SourceAdapterPort):
    """Adapter implementation for the Edenred login, card list and movement flow.

    Only the first card returned by the card list is read.
    """

    _API_PREFIX: Final[str] = "/edenred-customer/api"
    _CHANNEL_PARAMETERS: Final[dict[str, str]] = {
        "appVersion": "1.0",
        "appType": "PORTAL",
        "channel": "WEB",
    }

    LOGIN_FAILED: Final[str] = "Login failed"
    CARD_LOOKUP_FAILED: Final[str] = "Failed to retrieve ID"
    MOVEMENT_FETCH_FAILED: Final[str] = "Failed to retrieve transactions"

    def __init__(
        self,
        request_timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        adapter_logger: SourceAdapterLogger | None = None,
    ):
        """Initialize Edenred adapter.

        Args:
            request_timeout_seconds: Per-request timeout in seconds.
            transport: Optional httpx transport, used by tests to fake Edenred.
            adapter_logger: Optional logger facade.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the timeout is not positive.
        """

        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._request_timeout_seconds = request_timeout_seconds
        self._transport = transport
        self._logger = adapter_logger or SourceAdapterLogger()

    def adapter_source_name(self) -> str:
        """Return stable adapter source label.

        Returns:
            str: Source identifier.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return "edenred_customer_portal"

    def source_fetch_movements(self, host: str, user_id: str, password: str) -> list[dict[str, Any]]:
        """Fetch the movement list of the first card on the account.

        Args:
            host: Edenred API base URL.
            user_id: Edenred login identifier.
            password: Edenred password.

        Returns:
            list[dict[str, Any]]: Raw movement records, untransformed.

        Raises:
            CredentialsValidationError: Raised before any request when host or credentials are blank.
            AuthenticationError: Raised when login fails or returns no token.
            IdentityLookupError: Raised when the card list is unavailable or empty.
            MovementFetchError: Raised when the movement list is unavailable or malformed.
        """

        normalized_host = (host or "").strip().rstrip("/")
        if not normalized_host or not (user_id or "").strip() or not (password or "").strip():
            raise CredentialsValidationError("Host and credentials required", stage="validate")

        api_base_url = f"{normalized_host}{self._API_PREFIX}"
        stage_timeline: list[dict[str, object]] = []

        with httpx.Client(timeout=self._request_timeout_seconds, transport=self._transport) as client:
            session = self._source_authenticate(client, api_base_url, user_id, password, stage_timeline)
            card_id = self._source_resolve_card_id(client, api_base_url, session, stage_timeline)
            movements = self._source_fetch_movement_list(client, api_base_url, session, card_id, stage_timeline)

        self._logger.movements_fetched(card_id, len(movements))
        return movements

    def _source_authenticate(
        self,
        client: httpx.Client,
        api_base_url: str,
        user_id: str,
        password: str,
        stage_timeline: list[dict[str, object]],
    ) -> AuthenticatedSession:
        """Log in with JSON credentials and capture cookie and bearer token.

        Args:
            client: HTTP client owned by the run.
            api_base_url: Edenred customer API base URL.
            user_id: Edenred login identifier.
            password: Edenred password.
            stage_timeline: Mutable diagnostics timeline.

        Returns:
            AuthenticatedSession: Session carrying the login cookie and token.

        Raises:
            AuthenticationError: Raised on non-success status, transport failure or missing token.
        """

        stage = "source_authenticate"
        self._source_record_stage_started(stage, stage_timeline)
        try:
            response = session_send_request(
                client,
                "POST",
                f"{api_base_url}/authenticate/default",
                headers={"content-type": "application/json"},
                params=self._CHANNEL_PARAMETERS,
                json={"userId": user_id, "password": password},
            )
            token = response.json()["data"]["token"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as error:
            self._source_raise_stage_failure(AuthenticationError, stage, self.LOGIN_FAILED, stage_timeline, error)

        if not isinstance(token, str) or not token.strip():
            self._source_raise_stage_failure(AuthenticationError, stage, self.LOGIN_FAILED, stage_timeline)
        stage_timeline.append(domain_build_stage_event(stage=stage, status="completed"))
        return AuthenticatedSession(cookie=session_extract_cookie(response), bearer_token=token)

    def _source_resolve_card_id(
        self,
        client: httpx.Client,
        api_base_url: str,
        session: AuthenticatedSession,
        stage_timeline: list[dict[str, object]],
    ) -> str:
        """Read the id of the first card listed for the account.

        Args:
            client: HTTP client owned by the run.
            api_base_url: Edenred customer API base URL.
            session: Session issued by the login step.
            stage_timeline: Mutable diagnostics timeline.

        Returns:
            str: Card identifier.

        Raises:
            IdentityLookupError: Raised when the card list is unavailable, malformed or empty.
        """

        stage = "source_resolve_card"
        self._source_record_stage_started(stage, stage_timeline)
        try:
            response = session_send_request(
                client,
                "GET",
                f"{api_base_url}/protected/card/list",
                session=session,
                params=self._CHANNEL_PARAMETERS,
            )
            card_id = response.json()["data"][0]["id"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as error:
            self._source_raise_stage_failure(IdentityLookupError, stage, self.CARD_LOOKUP_FAILED, stage_timeline, error)

        if card_id is None or not str(card_id).strip():
            self._source_raise_stage_failure(IdentityLookupError, stage, self.CARD_LOOKUP_FAILED, stage_timeline)
        stage_timeline.append(
            domain_build_stage_event(stage=stage, status="completed", details={"card_id": str(card_id)})
        )
        return str(card_id)

    def _source_fetch_movement_list(
        self,
        client: httpx.Client,
        api_base_url: str,
        session: AuthenticatedSession,
        card_id: str,
        stage_timeline: list[dict[str, object]],
    ) -> list[dict[str, Any]]:
        """Fetch the raw movement list of one card.

        Args:
            client: HTTP client owned by the run.
            api_base_url: Edenred customer API base URL.
            session: Session issued by the login step.
            card_id: Card identifier resolved after login.
            stage_timeline: Mutable diagnostics timeline.

        Returns:
            list[dict[str, Any]]: Movement records as returned by Edenred.

        Raises:
            MovementFetchError: Raised when the request fails or `movementList` is not a list.
        """

        stage = "source_fetch_movements"
        self._source_record_stage_started(stage, stage_timeline)
        try:
            response = session_send_request(
                client,
                "GET",
                f"{api_base_url}/protected/card/{card_id}/accountmovement",
                session=session,
                params=self._CHANNEL_PARAMETERS,
            )
            movement_list = response.json()["data"]["movementList"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as error:
            self._source_raise_stage_failure(MovementFetchError, stage, self.MOVEMENT_FETCH_FAILED, stage_timeline, error)

        if not isinstance(movement_list, list):
            self._source_raise_stage_failure(MovementFetchError, stage, self.MOVEMENT_FETCH_FAILED, stage_timeline)
        stage_timeline.append(
            domain_build_stage_event(stage=stage, status="completed", details={"movement_count": len(movement_list)})
        )
        return movement_list

    def _source_record_stage_started(self, stage: str, stage_timeline: list[dict[str, object]]) -> None:
        """Log a stage start and record it on the timeline.

        Args:
            stage: Stage name.
            stage_timeline: Mutable diagnostics timeline.

        Returns:
            None: Mutates `stage_timeline` in place.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        self._logger.stage_started(stage)
        stage_timeline.append(domain_build_stage_event(stage=stage, status="started"))

    def _source_raise_stage_failure(
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
