"""Public document store exports for teamstore."""

from __future__ import annotations

from .adapter import SYSTEM_ACTOR, DocumentStoreAdapter
from .backend import (
    ANALYTICS_COLLECTION,
    FILES_COLLECTION,
    FOLDERS_COLLECTION,
    TEAMS_COLLECTION,
    DocumentBackend,
    Filter,
)
from .codec import document_to_item, item_to_document
from .firestore import FirestoreBackend
from .memory import InMemoryBackend
from .teams import TeamDirectory

__all__ = [
    "DocumentBackend",
    "Filter",
    "FILES_COLLECTION",
    "FOLDERS_COLLECTION",
    "TEAMS_COLLECTION",
    "ANALYTICS_COLLECTION",
    "DocumentStoreAdapter",
    "SYSTEM_ACTOR",
    "InMemoryBackend",
    "FirestoreBackend",
    "TeamDirectory",
    "item_to_document",
    "document_to_item",
]
