"""Wikidata platform adapters."""

from __future__ import annotations

from .api import ApiErrorInfo, WikidataApiResult
from .errors import (
    MalformedTarget,
    PolicyBlocked,
    PublishError,
    PublishOutcome,
    RemoteRejected,
    TransportFailure,
    UnparseableResponse,
    outcome_of,
)
from .models import ArticleReference, PublishRequest, PublishTarget, TargetSource

__all__ = [
    "ApiErrorInfo",
    "ArticleReference",
    "MalformedTarget",
    "PolicyBlocked",
    "PublishError",
    "PublishOutcome",
    "PublishRequest",
    "PublishTarget",
    "RemoteRejected",
    "TargetSource",
    "TransportFailure",
    "UnparseableResponse",
    "WikidataApiResult",
    "outcome_of",
]
