"""Targets and requests for description edits."""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass
from typing import Protocol

from .api import SET_DESCRIPTION_ACTION

_ARTICLE_PATH_PREFIX = "/wiki/"
_WIKIPEDIA_DOMAIN = "wikipedia.org"
_MOBILE_LABEL = "m"


@dataclass(frozen=True, slots=True)
class PublishTarget:
    """Entity title, language and site a description edit applies to."""

    entity_title: str
    language_code: str
    site_identifier: str

    @property
    def is_resolved(self) -> bool:
        return bool(self.entity_title and self.language_code and self.site_identifier)

    def resolve_target(self) -> PublishTarget | None:
        return self if self.is_resolved else None


class TargetSource(Protocol):
    """Anything the publisher can turn into a ``PublishTarget``."""

    def resolve_target(self) -> PublishTarget | None:
        """Return a fully resolved target, or ``None`` when a part is missing."""


@dataclass(frozen=True, slots=True)
class ArticleReference:
    """A Wikipedia article URL such as ``https://en.wikipedia.org/wiki/London``."""

    url: str

    @property
    def _parsed(self) -> urllib.parse.SplitResult | None:
        try:
            return urllib.parse.urlsplit(self.url)
        except ValueError:
            return None

    @property
    def title(self) -> str | None:
        parsed = self._parsed
        if parsed is None:
            return None
        path = parsed.path
        if not path.startswith(_ARTICLE_PATH_PREFIX):
            return None
        raw = path[len(_ARTICLE_PATH_PREFIX) :]
        title = urllib.parse.unquote(raw).replace("_", " ").strip()
        return title or None

    @property
    def language(self) -> str | None:
        parsed = self._parsed
        if parsed is None:
            return None
        host = (parsed.hostname or "").lower()
        if not host.endswith("." + _WIKIPEDIA_DOMAIN):
            return None
        labels = host[: -len(_WIKIPEDIA_DOMAIN) - 1].split(".")
        labels = [label for label in labels if label and label != _MOBILE_LABEL]
        if len(labels) != 1 or labels[0] == "www":
            return None
        return labels[0]

    @property
    def wiki(self) -> str | None:
        language = self.language
        if not language:
            return None
        return f"{language.replace('-', '_')}wiki"

    def resolve_target(self) -> PublishTarget | None:
        title, language, wiki = self.title, self.language, self.wiki
        if not (title and language and wiki):
            return None
        return PublishTarget(entity_title=title, language_code=language, site_identifier=wiki)


@dataclass(frozen=True, slots=True)
class PublishRequest:
    target: PublishTarget
    new_description: str

    def query_parameters(self) -> dict[str, str]:
        return {
            "action": SET_DESCRIPTION_ACTION,
            "format": "json",
            "formatversion": "2",
        }

    def body_parameters(self) -> dict[str, str]:
        language = self.target.language_code
        return {
            "language": language,
            "uselang": language,
            "site": self.target.site_identifier,
            "title": self.target.entity_title,
            "value": self.new_description,
        }


__all__ = ["ArticleReference", "PublishRequest", "PublishTarget", "TargetSource"]
