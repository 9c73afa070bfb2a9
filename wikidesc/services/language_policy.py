"""Per-language gating for description editing."""

from __future__ import annotations

from typing import Iterable

from ..settings import DEFAULT_BLOCKED_LANGUAGES
from ..storage import KeyValueStore, WriterThread
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

BLOCKED_LANGUAGES_KEY = "wikidesc.description_editing.blocked_languages"


class LanguagePolicyStore:
    """Persisted set of language codes for which publishing is disabled.

    Until a policy has been pushed, the built-in fallback applies. Every read
    and write is marshalled onto ``writer`` so readers observe either the old
    or the new set, never a mix.
    """

    def __init__(
        self,
        store: KeyValueStore,
        writer: WriterThread,
        *,
        fallback: Iterable[str] = DEFAULT_BLOCKED_LANGUAGES,
    ) -> None:
        self._store = store
        self._writer = writer
        self._fallback = frozenset(fallback)

    def blocked_languages(self) -> frozenset[str]:
        return self._writer.run_sync(self._read)

    def is_blocked(self, language_code: str) -> bool:
        return language_code in self.blocked_languages()

    def replace_policy(self, codes: Iterable[str]) -> None:
        """Replace the whole set; persistence failures are logged, not raised."""
        replacement = sorted({str(code) for code in codes})
        self._writer.run_sync(self._write, replacement)

    def _read(self) -> frozenset[str]:
        value = self._store.get(BLOCKED_LANGUAGES_KEY)
        if value is None:
            return self._fallback
        if not isinstance(value, (list, tuple, set, frozenset)):
            LOGGER.warning(
                "Unexpected blocked-language value %r; using fallback",
                value,
                extra={"event": "policy.invalid_value"},
            )
            return self._fallback
        return frozenset(str(code) for code in value)

    def _write(self, codes: list[str]) -> None:
        try:
            self._store.set(BLOCKED_LANGUAGES_KEY, codes)
        except (OSError, TypeError, ValueError) as exc:
            LOGGER.warning(
                "Failed to persist blocked languages: %s",
                exc,
                extra={"event": "policy.persist_failed"},
            )
            return
        LOGGER.info(
            "Blocked languages replaced",
            extra={"event": "policy.replaced", "languages": codes},
        )


__all__ = ["BLOCKED_LANGUAGES_KEY", "LanguagePolicyStore"]
