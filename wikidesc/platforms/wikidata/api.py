"""Wikidata API constants and result parsing."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import UnparseableResponse

SET_DESCRIPTION_ACTION = "wbsetdescription"
ANONYMOUS_TOKEN = "+\\"
TOKEN_ERROR_CODES = frozenset({"badtoken", "notoken"})


@dataclass(frozen=True, slots=True)
class ApiErrorInfo:
    code: str | None
    info: str | None


@dataclass(frozen=True, slots=True)
class WikidataApiResult:
    """The parts of an action API response the publisher cares about."""

    error: ApiErrorInfo | None = None
    success: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.success == 1

    @classmethod
    def from_payload(cls, payload: Any) -> "WikidataApiResult":
        if not isinstance(payload, Mapping):
            raise UnparseableResponse(details={"type": type(payload).__name__})

        error: ApiErrorInfo | None = None
        raw_error = payload.get("error")
        if raw_error is not None:
            if not isinstance(raw_error, Mapping):
                raise UnparseableResponse(details={"error": repr(raw_error)[:200]})
            error = ApiErrorInfo(
                code=_optional_str(raw_error.get("code")),
                info=_optional_str(raw_error.get("info")),
            )

        raw_success = payload.get("success")
        try:
            success = int(raw_success) if raw_success is not None else None
        except (TypeError, ValueError) as exc:
            raise UnparseableResponse(details={"success": repr(raw_success)}) from exc

        return cls(error=error, success=success)

    @classmethod
    def from_text(cls, text: str) -> "WikidataApiResult":
        return cls.from_payload(decode_json(text))


def decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise UnparseableResponse(details={"body": text[:200]}) from exc


def parse_csrf_token(text: str) -> str:
    """Extract ``query.tokens.csrftoken`` from a ``meta=tokens`` response."""
    payload = decode_json(text)
    try:
        token = payload["query"]["tokens"]["csrftoken"]
    except (KeyError, TypeError) as exc:
        raise UnparseableResponse(
            "Token response is missing csrftoken", details={"body": text[:200]}
        ) from exc
    if not isinstance(token, str) or not token:
        raise UnparseableResponse("Token response carried an empty csrftoken")
    return token


def is_token_error(error: ApiErrorInfo) -> bool:
    return error.code in TOKEN_ERROR_CODES


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


__all__ = [
    "ANONYMOUS_TOKEN",
    "ApiErrorInfo",
    "SET_DESCRIPTION_ACTION",
    "TOKEN_ERROR_CODES",
    "WikidataApiResult",
    "decode_json",
    "is_token_error",
    "parse_csrf_token",
]
