"""Tracks whether an authenticated description edit has ever succeeded."""

from __future__ import annotations

from typing import Callable, Protocol

from ..storage import KeyValueStore, WriterThread
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

MADE_AUTHENTICATED_EDIT_KEY = "wikidesc.description_editing.made_authenticated_edit"
DID_MAKE_AUTHENTICATED_EDIT = "wikidesc.did_make_authenticated_description_edit"

Listener = Callable[[], None]


class RemoteNotificationsController(Protocol):
    def start(self) -> None:
        """Begin (or resume) polling for remote notifications."""


class EditNotifications:
    """Payload-less broadcast fired on the first authenticated edit."""

    name = DID_MAKE_AUTHENTICATED_EDIT

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def post(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                LOGGER.exception(
                    "Notification listener failed",
                    extra={"event": "notification.listener_failed", "notification": self.name},
                )


class EditStateTracker:
    """Owns the persisted ``made authenticated edit`` flag.

    The flag only moves from false to true. The first transition posts
    ``DID_MAKE_AUTHENTICATED_EDIT`` and starts the remote-notifications
    controller; because the flag is persisted, this happens once per install,
    not once per process.
    """

    def __init__(
        self,
        store: KeyValueStore,
        writer: WriterThread,
        *,
        notifications: EditNotifications | None = None,
        remote_notifications: RemoteNotificationsController | None = None,
    ) -> None:
        self._store = store
        self._writer = writer
        self._notifications = notifications or EditNotifications()
        self._remote_notifications = remote_notifications

    @property
    def notifications(self) -> EditNotifications:
        return self._notifications

    def has_succeeded_before(self) -> bool:
        return self._writer.run_sync(self._read)

    def mark_succeeded(self) -> None:
        self._writer.run_sync(self._mark)

    def _read(self) -> bool:
        value = self._store.get(MADE_AUTHENTICATED_EDIT_KEY)
        if value is None:
            return False
        if not isinstance(value, bool):
            LOGGER.warning(
                "Expected boolean for %s, got %r",
                MADE_AUTHENTICATED_EDIT_KEY,
                value,
                extra={"event": "edit_state.invalid_value"},
            )
            return False
        return value

    def _mark(self) -> None:
        if self._read():
            return
        self._store.set(MADE_AUTHENTICATED_EDIT_KEY, True)
        LOGGER.info(
            "First authenticated description edit recorded",
            extra={"event": "edit_state.first_authenticated_edit"},
        )
        self._notifications.post()
        if self._remote_notifications is not None:
            self._remote_notifications.start()


__all__ = [
    "DID_MAKE_AUTHENTICATED_EDIT",
    "EditNotifications",
    "EditStateTracker",
    "MADE_AUTHENTICATED_EDIT_KEY",
    "RemoteNotificationsController",
]
