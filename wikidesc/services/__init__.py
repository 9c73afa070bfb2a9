"""Description publishing services."""

from __future__ import annotations

from .description_publisher import Completion, DescriptionPublisher
from .edit_state import (
    DID_MAKE_AUTHENTICATED_EDIT,
    EditNotifications,
    EditStateTracker,
    RemoteNotificationsController,
)
from .language_policy import LanguagePolicyStore

__all__ = [
    "Completion",
    "DID_MAKE_AUTHENTICATED_EDIT",
    "DescriptionPublisher",
    "EditNotifications",
    "EditStateTracker",
    "LanguagePolicyStore",
    "RemoteNotificationsController",
]
