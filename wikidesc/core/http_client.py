"""HTTP client with cookie persistence for the Wikidata action API."""

from __future__ import annotations

import http.cookiejar
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import requests

from ..platforms.wikidata.errors import TransportFailure
from ..settings import ApiSettings
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(slots=True)
class HttpRequest:
    url: str
    method: str = "GET"
    params: Mapping[str, str] | None = None
    headers: Mapping[str, str] | None = None
    data: bytes | None = None
    timeout: float | None = None


@dataclass(slots=True)
class HttpResponse:
    url: str
    status: int
    headers: Mapping[str, str]
    text: str
    elapsed: float


class HttpClient:
    """Thin ``requests.Session`` wrapper backed by a ``MozillaCookieJar``.

    Session cookies (including login cookies saved by a browser export) are
    loaded from ``cookie_path`` and written back after every exchange, so an
    authenticated session survives restarts.
    Exchanges are serialized on an internal lock so concurrent publishes never
    interleave cookie-jar writes.
    """

    def __init__(
        self,
        *,
        api: ApiSettings,
        cookie_path: Path | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._api = api
        self._cookie_path = cookie_path
        self._lock = threading.Lock()
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": api.user_agent})

        self._cookie_jar: http.cookiejar.MozillaCookieJar | None = None
        if cookie_path is not None:
            cookie_path.parent.mkdir(parents=True, exist_ok=True)
            self._cookie_jar = http.cookiejar.MozillaCookieJar(str(cookie_path))
            self._load_cookie_jar()
            self._session.cookies = self._cookie_jar  # type: ignore[assignment]

    @property
    def endpoint(self) -> str:
        return self._api.endpoint

    @property
    def cookie_path(self) -> Path | None:
        return self._cookie_path

    def fetch(self, request: HttpRequest) -> HttpResponse:
        timeout = request.timeout if request.timeout is not None else self._api.timeout
        start_time = time.monotonic()
        with self._lock:
            resp = self._send(request, timeout)
            self._save_cookie_jar()

        elapsed = time.monotonic() - start_time
        LOGGER.debug(
            "HTTP %s %s -> %s in %.3fs",
            request.method.upper(),
            request.url,
            resp.status_code,
            elapsed,
        )
        return HttpResponse(
            url=resp.url,
            status=resp.status_code,
            headers=dict(resp.headers.items()),
            text=resp.text,
            elapsed=elapsed,
        )

    def _send(self, request: HttpRequest, timeout: float) -> requests.Response:
        try:
            resp = self._session.request(
                request.method.upper(),
                request.url,
                params=dict(request.params or {}),
                headers=dict(request.headers or {}),
                data=request.data,
                timeout=timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            status = getattr(getattr(exc, "response", None), "status_code", None)
            raise TransportFailure(
                "Request to remote API failed",
                error=exc,
                details={"url": request.url, "status": status, "reason": str(exc)},
            ) from exc
        return resp

    def _load_cookie_jar(self) -> None:
        assert self._cookie_jar is not None
        try:
            self._cookie_jar.load(ignore_discard=True, ignore_expires=True)
        except FileNotFoundError:
            self._cookie_jar.clear()
        except (http.cookiejar.LoadError, OSError) as exc:
            LOGGER.warning("Failed to load cookie jar (%s): %s", self._cookie_path, exc)
            self._cookie_jar.clear()

    def _save_cookie_jar(self) -> None:
        if self._cookie_jar is None:
            return
        try:
            self._cookie_jar.save(ignore_discard=True, ignore_expires=True)
        except OSError as exc:
            LOGGER.warning("Failed to write cookie jar (%s): %s", self._cookie_path, exc)


__all__ = ["FORM_CONTENT_TYPE", "HttpClient", "HttpRequest", "HttpResponse"]
