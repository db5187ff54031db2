"""Public blob store exports for teamstore."""

from __future__ import annotations

from .base import BlobRef, BlobStore
from .drive import DriveBlobStore

__all__ = ["BlobRef", "BlobStore", "DriveBlobStore"]
