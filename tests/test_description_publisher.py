"""Tests for the description publishing pipeline."""

from __future__ import annotations

import json
import threading
from typing import Any, Mapping

import pytest

from wikidesc.core import AuthenticatedRequestClient, HttpRequest, HttpResponse, SubmitResult
from wikidesc.platforms.wikidata import (
    ArticleReference,
    MalformedTarget,
    PolicyBlocked,
    PublishError,
    PublishOutcome,
    PublishTarget,
    RemoteRejected,
    TransportFailure,
    WikidataApiResult,
    outcome_of,
)
from wikidesc.services import (
    DescriptionPublisher,
    EditNotifications,
    EditStateTracker,
    LanguagePolicyStore,
)
from wikidesc.storage import MemoryKeyValueStore, WriterThread

LONDON = PublishTarget(entity_title="Q84", language_code="en", site_identifier="enwiki")
LONDRES = PublishTarget(entity_title="Londres", language_code="fr", site_identifier="frwiki")
DESCRIPTION = "Capital of England and the United Kingdom"


class StubClient:
    def __init__(
        self,
        *,
        authenticated: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.authenticated = authenticated
        self.error = error
        self.calls: list[tuple[dict[str, str], dict[str, str], str]] = []

    def submit(
        self,
        query_parameters: Mapping[str, str],
        body_parameters: Mapping[str, str],
        *,
        token_field: str = "token",
    ) -> SubmitResult:
        self.calls.append((dict(query_parameters), dict(body_parameters), token_field))
        if self.error is not None:
            raise self.error
        return SubmitResult(result=WikidataApiResult(success=1), authenticated=self.authenticated)


class BadTokenTransport:
    endpoint = "https://www.wikidata.org/w/api.php"

    def __init__(self) -> None:
        self.requests: list[HttpRequest] = []

    def fetch(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        if request.method == "GET":
            payload: Any = {"query": {"tokens": {"csrftoken": f"tok{len(self.requests)}+\\"}}}
        else:
            payload = {"error": {"code": "badtoken", "info": "Invalid CSRF token."}}
        return HttpResponse(
            url=request.url, status=200, headers={}, text=json.dumps(payload), elapsed=0.0
        )


class TokenOutageTransport:
    endpoint = "https://www.wikidata.org/w/api.php"

    def __init__(self) -> None:
        self.requests: list[HttpRequest] = []

    def fetch(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        raise TransportFailure("token endpoint unreachable")


class Harness:
    def __init__(self, writer: WriterThread, executor: Any, client: Any) -> None:
        self.writer = writer
        self.store = MemoryKeyValueStore()
        self.policy = LanguagePolicyStore(self.store, writer)
        self.notifications = EditNotifications()
        self.posted: list[str] = []
        self.notifications.subscribe(lambda: self.posted.append("posted"))
        self.tracker = EditStateTracker(self.store, writer, notifications=self.notifications)
        self.client = client
        self.publisher = DescriptionPublisher(
            client, self.policy, self.tracker, writer, executor=executor
        )
        self.results: list[PublishError | None] = []
        self.callback_threads: list[str] = []

    def completion(self, error: PublishError | None) -> None:
        self.callback_threads.append(threading.current_thread().name)
        self.results.append(error)

    def publish(self, reference: Any, description: str = DESCRIPTION) -> None:
        self.publisher.publish(description, reference, self.completion)
        self.drain()

    def drain(self) -> None:
        self.writer.run_sync(lambda: None)


@pytest.fixture
def make_harness(writer: WriterThread, inline_executor: Any):
    def _make(client: Any | None = None) -> Harness:
        return Harness(writer, inline_executor, client or StubClient())

    return _make


def test_default_policy_blocks_english_without_network(make_harness) -> None:
    harness = make_harness()

    harness.publish(LONDON)

    assert len(harness.results) == 1
    assert isinstance(harness.results[0], PolicyBlocked)
    assert harness.results[0].language_code == "en"
    assert harness.client.calls == []


def test_every_blocked_language_is_refused(make_harness) -> None:
    harness = make_harness()
    harness.policy.replace_policy({"de", "fr", "ja"})

    for code in ("de", "fr", "ja"):
        harness.publish(PublishTarget("Q84", code, f"{code}wiki"))

    assert [outcome_of(error) for error in harness.results] == [PublishOutcome.POLICY_BLOCKED] * 3
    assert harness.client.calls == []


@pytest.mark.parametrize(
    "target",
    [
        PublishTarget("", "fr", "frwiki"),
        PublishTarget("Londres", "", "frwiki"),
        PublishTarget("Londres", "fr", ""),
        ArticleReference("https://fr.wikipedia.org/w/index.php?title=Londres"),
        ArticleReference("https://example.org/wiki/Londres"),
        ArticleReference("https://[fr.wikipedia.org/wiki/Londres"),
    ],
)
def test_malformed_target_completes_synchronously(make_harness, target: Any) -> None:
    harness = make_harness()
    harness.policy.replace_policy({"fr"})
    results: list[PublishError | None] = []

    harness.publisher.publish(DESCRIPTION, target, results.append)

    assert len(results) == 1
    assert isinstance(results[0], MalformedTarget)
    assert harness.client.calls == []


def test_authenticated_success_marks_edit_state_once(make_harness) -> None:
    harness = make_harness()
    harness.policy.replace_policy({"fr"})
    target = PublishTarget("Q84", "en", "enwiki")

    harness.publish(target)
    harness.publish(target)

    assert harness.results == [None, None]
    assert harness.tracker.has_succeeded_before()
    assert harness.posted == ["posted"]
    assert all(name.startswith("test-writer") for name in harness.callback_threads)


def test_request_parameters(make_harness) -> None:
    harness = make_harness()

    harness.publish(LONDRES, description="capitale du Royaume-Uni")

    query, body, token_field = harness.client.calls[0]
    assert query == {"action": "wbsetdescription", "format": "json", "formatversion": "2"}
    assert body == {
        "language": "fr",
        "uselang": "fr",
        "site": "frwiki",
        "title": "Londres",
        "value": "capitale du Royaume-Uni",
    }
    assert token_field == "token"


def test_unauthenticated_success_leaves_edit_state(make_harness) -> None:
    harness = make_harness(StubClient(authenticated=False))

    harness.publish(LONDRES)

    assert harness.results == [None]
    assert not harness.tracker.has_succeeded_before()
    assert harness.posted == []


def test_repeated_bad_token_is_rejected(make_harness) -> None:
    transport = BadTokenTransport()
    harness = make_harness(AuthenticatedRequestClient(transport))
    harness.policy.replace_policy({"fr"})

    harness.publish(LONDON)

    assert len(harness.results) == 1
    error = harness.results[0]
    assert isinstance(error, RemoteRejected)
    assert (error.code, error.message) == ("badtoken", "Invalid CSRF token.")
    assert len([req for req in transport.requests if req.method == "GET"]) == 2
    assert not harness.tracker.has_succeeded_before()


def test_unexpected_client_error_becomes_transport_failure(make_harness) -> None:
    harness = make_harness(StubClient(error=ConnectionResetError("reset")))

    harness.publish(LONDRES)

    assert len(harness.results) == 1
    error = harness.results[0]
    assert isinstance(error, TransportFailure)
    assert isinstance(error.error, ConnectionResetError)
    assert not harness.tracker.has_succeeded_before()


def test_raising_callback_is_contained(make_harness) -> None:
    harness = make_harness()
    calls: list[PublishError | None] = []

    def completion(error: PublishError | None) -> None:
        calls.append(error)
        raise RuntimeError("ui went away")

    harness.publisher.publish(DESCRIPTION, LONDRES, completion)
    harness.drain()

    assert calls == [None]
    assert harness.tracker.has_succeeded_before()


def test_publish_future_resolves(make_harness) -> None:
    harness = make_harness()

    assert harness.publisher.publish_future(DESCRIPTION, LONDRES).result(timeout=5) is None

    blocked = harness.publisher.publish_future(DESCRIPTION, LONDON)
    with pytest.raises(PolicyBlocked):
        blocked.result(timeout=5)


def test_is_description_editable(make_harness) -> None:
    harness = make_harness()

    assert not harness.publisher.is_description_editable(
        ArticleReference("https://en.wikipedia.org/wiki/London")
    )
    assert harness.publisher.is_description_editable(
        ArticleReference("https://fr.m.wikipedia.org/wiki/Londres")
    )
    assert not harness.publisher.is_description_editable(PublishTarget("", "fr", "frwiki"))


def test_publish_with_thread_pool_completes_on_writer(writer: WriterThread) -> None:
    store = MemoryKeyValueStore()
    policy = LanguagePolicyStore(store, writer)
    tracker = EditStateTracker(store, writer)
    publisher = DescriptionPublisher(StubClient(), policy, tracker, writer)
    done = threading.Event()
    seen: list[tuple[PublishError | None, bool]] = []

    def completion(error: PublishError | None) -> None:
        seen.append((error, writer.is_current()))
        done.set()

    publisher.publish(DESCRIPTION, LONDRES, completion)

    assert done.wait(timeout=5)
    publisher.close()
    writer.run_sync(lambda: None)
    assert seen == [(None, True)]
    assert tracker.has_succeeded_before()


def test_token_outage_is_reported_as_transport_failure(make_harness) -> None:
    transport = TokenOutageTransport()
    harness = make_harness(AuthenticatedRequestClient(transport))

    harness.publish(LONDRES)

    assert len(harness.results) == 1
    assert outcome_of(harness.results[0]) is PublishOutcome.TRANSPORT_FAILURE
    assert [req.method for req in transport.requests] == ["GET"]
    assert not harness.tracker.has_succeeded_before()
