"""Write requests that need a fresh CSRF token per attempt."""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Callable, Mapping, Protocol

from ..platforms.wikidata.api import (
    ANONYMOUS_TOKEN,
    ApiErrorInfo,
    WikidataApiResult,
    is_token_error,
    parse_csrf_token,
)
from ..platforms.wikidata.errors import RemoteRejected
from ..utils.logging import get_logger
from .http_client import FORM_CONTENT_TYPE, HttpRequest, HttpResponse

LOGGER = get_logger(__name__)

_TOKEN_QUERY = {
    "action": "query",
    "meta": "tokens",
    "type": "csrf",
    "format": "json",
    "formatversion": "2",
}


class Transport(Protocol):
    @property
    def endpoint(self) -> str:
        """Default API endpoint URL."""

    def fetch(self, request: HttpRequest) -> HttpResponse:
        """Perform the exchange, raising ``TransportFailure`` on network errors."""


@dataclass(frozen=True, slots=True)
class TokenRetryPolicy:
    """Allows at most one resubmission, and only for token rejections."""

    is_token_error: Callable[[ApiErrorInfo], bool] = is_token_error
    max_retries: int = 1

    def __post_init__(self) -> None:
        if not 0 <= self.max_retries <= 1:
            raise ValueError("max_retries must be 0 or 1")

    def should_retry(self, error: ApiErrorInfo, attempt: int) -> bool:
        return attempt <= self.max_retries and self.is_token_error(error)


@dataclass(frozen=True, slots=True)
class SubmitResult:
    result: WikidataApiResult
    authenticated: bool


class AuthenticatedRequestClient:
    """Acquires a CSRF token, posts a form-encoded write and parses the API result."""

    def __init__(
        self,
        transport: Transport,
        *,
        retry_policy: TokenRetryPolicy | None = None,
    ) -> None:
        self._transport = transport
        self._retry_policy = retry_policy or TokenRetryPolicy()

    def fetch_token(self, endpoint: str | None = None) -> str:
        """Fetch a new token; tokens are never reused across attempts."""
        url = endpoint or self._transport.endpoint
        response = self._transport.fetch(HttpRequest(url=url, method="GET", params=_TOKEN_QUERY))
        return parse_csrf_token(response.text)

    def submit(
        self,
        query_parameters: Mapping[str, str],
        body_parameters: Mapping[str, str],
        *,
        token_field: str = "token",
        endpoint: str | None = None,
    ) -> SubmitResult:
        """Submit the write, retrying once with a new token on token rejection.

        Raises ``TransportFailure`` for network errors, ``UnparseableResponse``
        for undecodable bodies and ``RemoteRejected`` when the API returns an
        ``error`` object.
        """
        url = endpoint or self._transport.endpoint
        action = query_parameters.get("action")
        attempt = 0
        while True:
            attempt += 1
            token = self.fetch_token(url)
            authenticated = token != ANONYMOUS_TOKEN
            body = dict(body_parameters)
            body[token_field] = token

            response = self._transport.fetch(
                HttpRequest(
                    url=url,
                    method="POST",
                    params=query_parameters,
                    headers={"Content-Type": FORM_CONTENT_TYPE},
                    data=urllib.parse.urlencode(body).encode("utf-8"),
                )
            )
            result = WikidataApiResult.from_text(response.text)

            if result.error is None:
                LOGGER.info(
                    "API write accepted",
                    extra={
                        "event": "api.write_accepted",
                        "action": action,
                        "attempt": attempt,
                        "authenticated": authenticated,
                    },
                )
                return SubmitResult(result=result, authenticated=authenticated)

            if self._retry_policy.should_retry(result.error, attempt):
                LOGGER.warning(
                    "Token rejected (%s); retrying with a new token",
                    result.error.code,
                    extra={"event": "api.token_retry", "action": action, "attempt": attempt},
                )
                continue

            LOGGER.warning(
                "API write rejected: %s",
                result.error.code,
                extra={"event": "api.write_rejected", "action": action, "attempt": attempt},
            )
            raise RemoteRejected(result.error.code, result.error.info)


__all__ = ["AuthenticatedRequestClient", "SubmitResult", "TokenRetryPolicy", "Transport"]
