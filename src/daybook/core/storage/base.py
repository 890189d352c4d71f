"""
Abstract base class for storage backends.

A backend is an opaque ordered key-value map: keys are caller-assigned
strings, values are opaque bytes. Each single-key write is atomic; there
are no multi-key transactions.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime

from ..exceptions import StorageUnavailable


@dataclass
class StorageMetadata:
    """Metadata for stored objects."""

    key: str
    size: int
    modified_at: datetime
    compression: str | None = None
    content_type: str | None = None


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    def __init__(self, **config):
        self.config = config

    @abstractmethod
    async def open(self) -> None:
        """Create the underlying store if needed. Safe to call repeatedly."""

    @abstractmethod
    async def save(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        compress: bool = True,
    ) -> StorageMetadata:
        """Insert or fully replace the value stored at ``key``."""

    @abstractmethod
    async def load(self, key: str) -> bytes:
        """Load data from storage. Raises StorageKeyError if not found."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in storage."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete an object. Returns True if deleted, False if didn't exist."""

    @abstractmethod
    async def list_keys(self, prefix: str = "", limit: int | None = None) -> AsyncIterator[str]:
        """List keys in ascending order with optional prefix filter."""

    @abstractmethod
    async def get_metadata(self, key: str) -> StorageMetadata:
        """Get metadata for a stored object. Raises StorageKeyError if not found."""

    async def count(self) -> int:
        """Number of keys currently stored."""
        total = 0
        async for _key in self.list_keys():
            total += 1
        return total


class StorageError(StorageUnavailable):
    """Base exception for storage backend failures."""


class StorageKeyError(StorageError, KeyError):
    """Raised when a storage key doesn't exist."""

    def __str__(self) -> str:
        # KeyError.__str__ would wrap the message in quotes
        return Exception.__str__(self)


class StoragePermissionError(StorageError):
    """Raised when a storage operation is not permitted (unsafe key, read-only path)."""
