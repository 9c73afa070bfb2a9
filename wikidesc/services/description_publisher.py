"""Publishes Wikidata short descriptions for articles."""

from __future__ import annotations

from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Mapping, Protocol

from ..core.csrf_client import SubmitResult
from ..platforms.wikidata import (
    MalformedTarget,
    PolicyBlocked,
    PublishError,
    PublishRequest,
    TargetSource,
    TransportFailure,
    outcome_of,
)
from ..storage import WriterThread
from ..utils.logging import get_logger
from .edit_state import EditStateTracker
from .language_policy import LanguagePolicyStore

LOGGER = get_logger(__name__)

Completion = Callable[[PublishError | None], None]


class RequestClient(Protocol):
    def submit(
        self,
        query_parameters: Mapping[str, str],
        body_parameters: Mapping[str, str],
        *,
        token_field: str = "token",
    ) -> SubmitResult:
        """Submit a token-protected write."""


class DescriptionPublisher:
    """Validates, gates and submits description edits.

    ``publish`` returns immediately. Malformed targets and blocked languages
    complete synchronously on the calling thread; everything else performs its
    network I/O on ``executor`` and completes on ``writer``. After an
    authenticated success, ``EditStateTracker.mark_succeeded`` is queued on
    ``writer`` behind the completion, so the caller is never held up by it.
    """

    def __init__(
        self,
        client: RequestClient,
        policy: LanguagePolicyStore,
        tracker: EditStateTracker,
        writer: WriterThread,
        *,
        executor: Executor | None = None,
    ) -> None:
        self._client = client
        self._policy = policy
        self._tracker = tracker
        self._writer = writer
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="wikidesc-io"
        )

    def is_description_editable(self, reference: TargetSource) -> bool:
        """True when ``publish`` would reach the network for ``reference``.

        Besides the language policy this also requires the title and site to
        resolve, since a reference without them can only end in
        ``MalformedTarget``.
        """
        target = reference.resolve_target()
        return target is not None and not self._policy.is_blocked(target.language_code)

    def publish(
        self,
        new_description: str,
        reference: TargetSource,
        completion: Completion,
    ) -> None:
        target = reference.resolve_target()
        if target is None:
            LOGGER.warning(
                "Refusing to publish description for unresolved reference",
                extra={"event": "publish.malformed_target", "reference": repr(reference)},
            )
            _invoke(completion, MalformedTarget(details={"reference": repr(reference)}))
            return

        if self._policy.is_blocked(target.language_code):
            LOGGER.info(
                "Description editing disabled for language %s",
                target.language_code,
                extra={"event": "publish.policy_blocked", "language": target.language_code},
            )
            _invoke(completion, PolicyBlocked(target.language_code))
            return

        request = PublishRequest(target=target, new_description=new_description)
        LOGGER.info(
            "Publishing description for %s (%s)",
            target.entity_title,
            target.site_identifier,
            extra={"event": "publish.started", "site": target.site_identifier},
        )
        self._executor.submit(self._submit, request, completion)

    def publish_future(self, new_description: str, reference: TargetSource) -> Future[None]:
        """Same as ``publish`` but resolves a future instead of calling back."""
        future: Future[None] = Future()

        def _complete(error: PublishError | None) -> None:
            if error is None:
                future.set_result(None)
            else:
                future.set_exception(error)

        self.publish(new_description, reference, _complete)
        return future

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _submit(self, request: PublishRequest, completion: Completion) -> None:
        error: PublishError | None = None
        authenticated = False
        try:
            submitted = self._client.submit(
                request.query_parameters(),
                request.body_parameters(),
                token_field="token",
            )
        except PublishError as exc:
            error = exc
        except Exception as exc:
            error = TransportFailure("Unexpected failure while publishing", error=exc)
        else:
            authenticated = submitted.authenticated

        LOGGER.info(
            "Publish finished: %s",
            outcome_of(error).value,
            extra={
                "event": "publish.completed",
                "outcome": outcome_of(error).value,
                "authenticated": authenticated,
                "site": request.target.site_identifier,
            },
        )
        self._writer.dispatch(_invoke, completion, error)
        if error is None and authenticated:
            self._writer.dispatch(self._tracker.mark_succeeded)


def _invoke(completion: Completion, error: PublishError | None) -> None:
    try:
        completion(error)
    except Exception:
        LOGGER.exception(
            "Publish completion callback raised",
            extra={"event": "publish.callback_failed"},
        )


__all__ = ["Completion", "DescriptionPublisher", "RequestClient"]
