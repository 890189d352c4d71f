"""EntryStore — durable mapping from date identifier to JournalEntry.

Sits on top of any StorageBackend. Each entry is one record of JSON
(gzip-compressed by default) with attachments in their data-URI form.
There is no cache: every call goes to the backend, and backend failures
surface as StorageUnavailable subclasses.
"""

from __future__ import annotations

import json

from loguru import logger

from daybook.core.exceptions import InvalidAttachmentEncoding
from daybook.core.storage import (
    CompressionType,
    StorageBackend,
    StorageError,
    StorageKeyError,
    compress_json,
    decompress_json,
)
from daybook.core.types import DateId

from .codec import deserialize_entry, serialize_entry
from .models import JournalEntry, SerializedJournalEntry

RECORD_CONTENT_TYPE = "application/json"


class EntryStore:
    """Journal entries keyed by date identifier.

    Example::

        store = EntryStore(LocalStorage("~/.daybook-data"))
        await store.save_entry("2024-01-01", JournalEntry(text="hello", mood="calm"))
        entries = await store.get_all_entries()
    """

    def __init__(self, backend: StorageBackend, *, compress: bool = True):
        self.backend = backend
        self.compression = CompressionType.GZIP if compress else CompressionType.NONE

    async def open(self) -> None:
        """Create the underlying store on first use. Idempotent."""
        await self.backend.open()

    def _encode(self, entry: JournalEntry) -> bytes:
        return compress_json(serialize_entry(entry).to_dict(), self.compression)

    @staticmethod
    def _decode(date_id: DateId, data: bytes) -> JournalEntry:
        try:
            raw = decompress_json(data)
            serialized = SerializedJournalEntry(
                text=raw["text"],
                mood=raw.get("mood"),
                images=raw.get("images") or [],
            )
            return deserialize_entry(serialized)
        except (OSError, EOFError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Corrupt record for '{date_id}': {e}") from e
        except (KeyError, TypeError, ValueError, AttributeError, InvalidAttachmentEncoding) as e:
            raise StorageError(f"Malformed record for '{date_id}': {e}") from e

    async def has_entries(self) -> bool:
        """True iff at least one entry is stored."""
        async for _key in self.backend.list_keys(limit=1):
            return True
        return False

    async def count(self) -> int:
        return await self.backend.count()

    async def get_all_entries(self) -> dict[DateId, JournalEntry]:
        """Snapshot of every stored entry, ordered by date identifier."""
        keys = [key async for key in self.backend.list_keys()]
        entries: dict[DateId, JournalEntry] = {}
        for key in keys:
            try:
                data = await self.backend.load(key)
            except StorageKeyError:
                # Deleted between listing and loading
                continue
            entries[key] = self._decode(key, data)
        return entries

    async def get_entry(self, date_id: DateId) -> JournalEntry | None:
        """Return the entry at ``date_id``, or None if there is none."""
        try:
            data = await self.backend.load(date_id)
        except StorageKeyError:
            return None
        return self._decode(date_id, data)

    async def save_entry(self, date_id: DateId, entry: JournalEntry) -> None:
        """Insert or fully replace the entry at ``date_id``."""
        if not isinstance(entry, JournalEntry):
            raise TypeError(f"Expected JournalEntry, got {type(entry).__name__}")
        # Record is already compressed here; the backend stores it as-is
        await self.backend.save(date_id, self._encode(entry), content_type=RECORD_CONTENT_TYPE, compress=False)
        logger.debug(f"Saved entry {date_id} ({len(entry.images)} images)")

    async def delete_entry(self, date_id: DateId) -> None:
        """Remove the entry at ``date_id``; absent identifiers are ignored."""
        if await self.backend.delete(date_id):
            logger.debug(f"Deleted entry {date_id}")
