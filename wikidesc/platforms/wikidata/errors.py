"""Outcome taxonomy for description publishing."""

from __future__ import annotations

import enum
import json
from typing import Any, ClassVar, Mapping


class PublishOutcome(enum.Enum):
    SUCCESS = "success"
    REMOTE_REJECTED = "remote_rejected"
    TRANSPORT_FAILURE = "transport_failure"
    POLICY_BLOCKED = "policy_blocked"
    MALFORMED_TARGET = "malformed_target"
    UNPARSEABLE_RESPONSE = "unparseable_response"


class PublishError(Exception):
    """Base class for every failure delivered to a publish completion."""

    outcome: ClassVar[PublishOutcome]

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | details: {detail_repr}"


class MalformedTarget(PublishError):
    """The article reference did not yield a title, language and site."""

    outcome = PublishOutcome.MALFORMED_TARGET

    def __init__(
        self,
        message: str = "Article reference is missing title, language or site",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class PolicyBlocked(PublishError):
    """Description editing is disabled for the article's language."""

    outcome = PublishOutcome.POLICY_BLOCKED

    def __init__(self, language_code: str) -> None:
        super().__init__(
            "Description editing is disabled for this language",
            details={"language": language_code},
        )
        self.language_code = language_code


class TransportFailure(PublishError):
    """Network or I/O failure while talking to the API."""

    outcome = PublishOutcome.TRANSPORT_FAILURE

    def __init__(self, message: str, *, error: BaseException | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.error = error


class RemoteRejected(PublishError):
    """The API understood the request and declined it."""

    outcome = PublishOutcome.REMOTE_REJECTED

    def __init__(self, code: str | None, message: str | None) -> None:
        super().__init__(
            message or code or "Request rejected by remote API", details={"code": code}
        )
        self.code = code
        self.message = message


class UnparseableResponse(PublishError):
    """The response body could not be decoded into an API result."""

    outcome = PublishOutcome.UNPARSEABLE_RESPONSE

    def __init__(self, message: str = "API result could not be parsed", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


def outcome_of(error: PublishError | None) -> PublishOutcome:
    return PublishOutcome.SUCCESS if error is None else error.outcome


__all__ = [
    "MalformedTarget",
    "PolicyBlocked",
    "PublishError",
    "PublishOutcome",
    "RemoteRejected",
    "TransportFailure",
    "UnparseableResponse",
    "outcome_of",
]
