"""Session state carried through one authenticated call chain."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx


@dataclass(frozen=True)
class AuthenticatedSession:
    """Cookie and bearer token issued by one login exchange.

    Both values are attached verbatim to every later request of the same run
    and are never persisted.

    Attributes:
        cookie: `Cookie` header value built from the login `set-cookie` headers.
        bearer_token: Value for the `authorization` header.
    """

    cookie: str | None = None
    bearer_token: str | None = None

    def session_build_headers(self, extra_headers: Mapping[str, str] | None = None) -> dict[str, str]:
        """Merge session credentials into per-request headers.

        Args:
            extra_headers: Endpoint-specific headers.

        Returns:
            dict[str, str]: Request headers including session credentials.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        request_headers = dict(extra_headers or {})
        if self.cookie:
            request_headers["cookie"] = self.cookie
        if self.bearer_token:
            request_headers["authorization"] = self.bearer_token
        return request_headers

    def __repr__(self) -> str:
        return (
            f"AuthenticatedSession(cookie={'<set>' if self.cookie else None}, "
            f"bearer_token={'<set>' if self.bearer_token else None})"
        )


def session_extract_cookie(response: httpx.Response) -> str | None:
    """Build one `Cookie` header value from every `set-cookie` response header.

    Args:
        response: Login response.

    Returns:
        str | None: `name=value` pairs joined by `; `, or None when no cookie was set.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    cookie_pairs: list[str] = []
    for set_cookie_value in response.headers.get_list("set-cookie"):
        cookie_pair = set_cookie_value.split(";", 1)[0].strip()
        if cookie_pair:
            cookie_pairs.append(cookie_pair)
    return "; ".join(cookie_pairs) or None


def session_send_request(
    client: httpx.Client,
    method: str,
    url: str,
    session: AuthenticatedSession | None = None,
    headers: Mapping[str, str] | None = None,
    **request_options: Any,
) -> httpx.Response:
    """Send one request carrying the session and require a success status.

    Args:
        client: HTTP client owned by the current run.
        method: HTTP method.
        url: Absolute endpoint URL.
        session: Session to attach, if the endpoint needs one.
        headers: Endpoint-specific headers.
        request_options: Extra `httpx.Client.request` options (`params`, `content`, `data`, `json`).

    Returns:
        httpx.Response: Successful response.

    Raises:
        httpx.HTTPError: Raised for transport failures, timeouts and non-success statuses.
    """

    request_headers = session.session_build_headers(headers) if session else dict(headers or {})
    response = client.request(method, url, headers=request_headers, **request_options)
    response.raise_for_status()
    return response
