"""Core primitives for talking to the remote API."""

from .csrf_client import AuthenticatedRequestClient, SubmitResult, TokenRetryPolicy
from .http_client import HttpClient, HttpRequest, HttpResponse

__all__ = [
    "AuthenticatedRequestClient",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "SubmitResult",
    "TokenRetryPolicy",
]
