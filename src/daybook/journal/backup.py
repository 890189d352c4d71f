"""Backup export and import.

A backup document is a pretty-printed JSON object mapping date identifier
to ``{"text": ..., "mood": ..., "images": [<data URI>, ...]}``. Import is
all-or-nothing up to the point of writing: the whole document is parsed
and every attachment decoded before the first entry is written.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from loguru import logger

from daybook.core.exceptions import InvalidAttachmentEncoding, InvalidBackupFormat
from daybook.core.types import DateId

from .codec import deserialize_entry, serialize_entry
from .models import DEFAULT_IMPORT_STRATEGY, ImportStrategy, JournalEntry, SerializedJournalEntry
from .reconcile import ImportReconciler
from .store import EntryStore


class _ShapeError(ValueError):
    """Internal: document parsed but is not shaped like a backup."""


def dump_backup(entries: Mapping[DateId, JournalEntry], indent: int = 2) -> str:
    """Serialize entries into a backup document."""
    document = {date_id: serialize_entry(entry).to_dict() for date_id, entry in entries.items()}
    return json.dumps(document, indent=indent, ensure_ascii=False)


def _require_utf8(date_id: str, field: str, value: str) -> None:
    # json.loads lets lone surrogates through; the store cannot write them
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise _ShapeError(f"entry {date_id!r}: {field} is not valid Unicode") from None


def _parse_serialized(date_id: str, raw: Any) -> SerializedJournalEntry:
    if not date_id:
        raise _ShapeError("empty date identifier")
    _require_utf8(date_id, "identifier", date_id)
    if not isinstance(raw, dict):
        raise _ShapeError(f"entry {date_id!r} is not an object")

    text = raw.get("text")
    if text is None:
        text = ""
    elif not isinstance(text, str):
        raise _ShapeError(f"entry {date_id!r}: text is not a string")
    _require_utf8(date_id, "text", text)

    mood = raw.get("mood")
    if mood is not None:
        if not isinstance(mood, str):
            raise _ShapeError(f"entry {date_id!r}: mood is not a string")
        _require_utf8(date_id, "mood", mood)

    images = raw.get("images")
    if images is None:
        images = []
    elif not isinstance(images, list):
        raise _ShapeError(f"entry {date_id!r}: images is not a list")
    elif not all(isinstance(img, str) for img in images):
        raise _ShapeError(f"entry {date_id!r}: images must be strings")

    return SerializedJournalEntry(text=text, mood=mood, images=images)


def parse_backup(document: str | bytes) -> dict[DateId, JournalEntry]:
    """Parse a backup document and decode all attachments.

    Raises:
        InvalidBackupFormat: Anything about the document is wrong. The
            specific reason is logged, not attached to the exception.
    """
    try:
        if isinstance(document, (bytes, bytearray)):
            document = bytes(document).decode("utf-8")
        if not isinstance(document, str):
            raise _ShapeError(f"document must be text, got {type(document).__name__}")

        data = json.loads(document)
        if not isinstance(data, dict):
            raise _ShapeError("top level is not an object")

        entries: dict[DateId, JournalEntry] = {}
        for date_id, raw in data.items():
            try:
                entries[date_id] = deserialize_entry(_parse_serialized(date_id, raw))
            except InvalidAttachmentEncoding as e:
                raise _ShapeError(f"entry {date_id!r}: {e}") from e
        return entries
    except (UnicodeDecodeError, RecursionError, json.JSONDecodeError, _ShapeError) as e:
        logger.warning(f"Rejected backup document: {e}")
        raise InvalidBackupFormat() from None


class BackupSerializer:
    """Export the whole EntryStore to a backup document and import one back.

    Example::

        backup = BackupSerializer(store)
        document = await backup.export_backup()
        await backup.import_backup(document, strategy="merge")
    """

    def __init__(
        self,
        store: EntryStore,
        *,
        indent: int = 2,
        default_strategy: ImportStrategy | str = DEFAULT_IMPORT_STRATEGY,
    ):
        self.store = store
        self.indent = indent
        self.default_strategy = ImportStrategy.parse(default_strategy)
        self.reconciler = ImportReconciler(store)

    async def export_backup(self) -> str:
        """Return a backup document covering every entry currently stored."""
        entries = await self.store.get_all_entries()
        document = dump_backup(entries, indent=self.indent)
        logger.info(f"Exported backup with {len(entries)} entries")
        return document

    async def import_backup(
        self,
        document: str | bytes,
        strategy: ImportStrategy | str | None = None,
    ) -> None:
        """Import a backup document into the store.

        Args:
            document: Backup document text (or UTF-8 bytes).
            strategy: merge, overwrite, or keep_old. Defaults to the
                serializer's default strategy.

        Raises:
            ValueError: Unknown strategy.
            InvalidBackupFormat: Malformed document; nothing was written.
            StorageUnavailable: The store failed mid-import.
        """
        resolved = self.default_strategy if strategy is None else ImportStrategy.parse(strategy)
        entries = parse_backup(document)
        summary = await self.reconciler.apply(entries, resolved)
        logger.info(f"Imported backup ({resolved.value}): {summary}")
