"""Command-line interface for publishing descriptions and managing policy."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from typing import Callable, Sequence

from ..core import AuthenticatedRequestClient, HttpClient
from ..platforms.wikidata import ArticleReference, PublishError, PublishTarget, TargetSource
from ..services import DescriptionPublisher, EditStateTracker, LanguagePolicyStore
from ..settings import AppConfig, load_config
from ..storage import JsonFileKeyValueStore, WriterThread
from ..utils.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class Services:
    writer: WriterThread
    policy: LanguagePolicyStore
    tracker: EditStateTracker
    publisher: DescriptionPublisher

    def close(self) -> None:
        self.publisher.close()
        self.writer.shutdown()


def build_services(config: AppConfig) -> Services:
    writer = WriterThread()
    store = JsonFileKeyValueStore(config.paths.store_file)
    policy = LanguagePolicyStore(
        store, writer, fallback=config.policy.default_blocked_languages
    )
    tracker = EditStateTracker(store, writer)
    http = HttpClient(api=config.api, cookie_path=config.paths.cookie_jar)
    publisher = DescriptionPublisher(AuthenticatedRequestClient(http), policy, tracker, writer)
    return Services(writer=writer, policy=policy, tracker=tracker, publisher=publisher)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    handler: Callable[[argparse.Namespace, Services], int] | None = getattr(
        args, "handler", None
    )
    if handler is None:
        parser.print_help(sys.stderr)
        return 1

    config = load_config(args.config)
    configure_logging(
        level=config.logging.level,
        structured=False if args.log_plain else config.logging.structured,
    )

    services = build_services(config)
    try:
        return handler(args, services)
    finally:
        services.close()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikidesc", description="Publish Wikidata short descriptions"
    )
    parser.add_argument("--config", help="Path to configuration file", default=None)
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text logs instead of JSON",
    )

    subparsers = parser.add_subparsers(dest="command")
    _add_publish_command(subparsers)
    _add_policy_commands(subparsers)

    status_parser = subparsers.add_parser(
        "status", help="Show whether an authenticated edit has been made"
    )
    status_parser.set_defaults(handler=_handle_status)
    return parser


def _add_publish_command(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    publish_parser = subparsers.add_parser("publish", help="Publish a short description")
    publish_parser.add_argument(
        "--url", help="Article URL, e.g. https://en.wikipedia.org/wiki/London"
    )
    publish_parser.add_argument("--title", help="Page title when no URL is given")
    publish_parser.add_argument("--language", help="Language code when no URL is given")
    publish_parser.add_argument(
        "--site", help="Site identifier (e.g. enwiki) when no URL is given"
    )
    publish_parser.add_argument("--description", required=True, help="New short description")
    publish_parser.set_defaults(handler=_handle_publish)


def _add_policy_commands(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    policy_parser = subparsers.add_parser(
        "policy", help="Inspect or replace blocked languages"
    )
    policy_subparsers = policy_parser.add_subparsers(dest="policy_command", required=True)

    show_parser = policy_subparsers.add_parser("show", help="Print blocked language codes")
    show_parser.set_defaults(handler=_handle_policy_show)

    set_parser = policy_subparsers.add_parser(
        "set", help="Replace the blocked language codes (no codes clears the set)"
    )
    set_parser.add_argument("codes", nargs="*", help="Language codes to block")
    set_parser.set_defaults(handler=_handle_policy_set)


def _reference_from_args(args: argparse.Namespace) -> TargetSource:
    if args.url:
        return ArticleReference(args.url)
    language = args.language or ""
    site = args.site or (f"{language.replace('-', '_')}wiki" if language else "")
    return PublishTarget(
        entity_title=args.title or "",
        language_code=language,
        site_identifier=site,
    )


def _handle_publish(args: argparse.Namespace, services: Services) -> int:
    reference = _reference_from_args(args)
    future = services.publisher.publish_future(args.description, reference)
    try:
        future.result()
    except PublishError as exc:
        print(
            json.dumps(
                {"outcome": exc.outcome.value, "message": str(exc)}, ensure_ascii=False
            )
        )
        return 1
    print(json.dumps({"outcome": "success"}))
    return 0


def _handle_policy_show(args: argparse.Namespace, services: Services) -> int:
    _ = args
    print(json.dumps(sorted(services.policy.blocked_languages())))
    return 0


def _handle_policy_set(args: argparse.Namespace, services: Services) -> int:
    services.policy.replace_policy(args.codes)
    print(json.dumps(sorted(services.policy.blocked_languages())))
    return 0


def _handle_status(args: argparse.Namespace, services: Services) -> int:
    _ = args
    print(json.dumps({"made_authenticated_edit": services.tracker.has_succeeded_before()}))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
