"""Public interface for the Firebase Realtime Database adapter."""

from __future__ import annotations

from .client import FirebaseClient, node_path
from .settings import (
    AppSettings,
    FirebaseSettingsStore,
    NewsSource,
    document_from_settings,
    settings_from_document,
)
from .store import FirebaseUnionStore

__all__ = [
    "AppSettings",
    "FirebaseClient",
    "FirebaseSettingsStore",
    "FirebaseUnionStore",
    "NewsSource",
    "document_from_settings",
    "node_path",
    "settings_from_document",
]
