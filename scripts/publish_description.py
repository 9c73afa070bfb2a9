"""Publish a Wikidata short description for a Wikipedia article URL."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from wikidesc.app import cli


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Publish a short description for an article on Wikidata"
    )
    parser.add_argument("url", help="Article URL, e.g. https://fr.wikipedia.org/wiki/Londres")
    parser.add_argument("description", help="New short description")
    parser.add_argument("--config", default=None, help="Path to configuration file")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    argv = ["--log-plain"]
    if args.config:
        argv += ["--config", args.config]
    argv += ["publish", "--url", args.url, "--description", args.description]
    raise SystemExit(cli.main(argv))


if __name__ == "__main__":
    main()
