"""One-shot migration from the legacy flat journal file.

The legacy format is a single JSON object mapping date identifier to
``{"text": str, "mood"?: str}`` with no attachments. Migration never
raises: failures are logged and the legacy data stays put for the next run.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import aiofiles
import aiofiles.os
from loguru import logger

from daybook.core.exceptions import DaybookError, MigrationFailure
from daybook.core.types import DateId, PathLike

from .models import JournalEntry
from .store import EntryStore


@runtime_checkable
class LegacyStore(Protocol):
    """Source of legacy entries."""

    async def read(self) -> Mapping[str, Any] | None:
        """Return the raw legacy mapping, or None when there is no legacy data."""
        ...

    async def clear(self) -> None:
        """Remove the legacy data after a successful migration."""
        ...


class LegacyFileStore:
    """Legacy data kept as one JSON file (``journal_entries.json``)."""

    def __init__(self, path: PathLike):
        self.path = Path(path).expanduser()

    async def read(self) -> Mapping[str, Any] | None:
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            return None
        if not content.strip():
            return None
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise MigrationFailure(f"Legacy file {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MigrationFailure(f"Legacy file {self.path} does not contain an object")
        return data

    async def clear(self) -> None:
        try:
            await aiofiles.os.remove(self.path)
        except FileNotFoundError:
            pass


def _convert(legacy: Mapping[str, Any]) -> dict[DateId, JournalEntry]:
    """Validate the whole legacy mapping before anything is written."""
    entries: dict[DateId, JournalEntry] = {}
    for date_id, value in legacy.items():
        if not isinstance(date_id, str) or not date_id:
            raise MigrationFailure(f"Invalid legacy identifier: {date_id!r}")
        if not isinstance(value, Mapping):
            raise MigrationFailure(f"Legacy entry {date_id!r} is not an object")
        text = value.get("text")
        mood = value.get("mood")
        if text is not None and not isinstance(text, str):
            raise MigrationFailure(f"Legacy entry {date_id!r}: text is not a string")
        if mood is not None and not isinstance(mood, str):
            raise MigrationFailure(f"Legacy entry {date_id!r}: mood is not a string")
        entries[date_id] = JournalEntry(text=text or "", mood=mood, images=[])
    return entries


class LegacyMigrator:
    """Copy legacy entries into the EntryStore, then clear the legacy source."""

    def __init__(self, store: EntryStore, legacy: LegacyStore):
        self.store = store
        self.legacy = legacy

    async def _migrate(self) -> int:
        try:
            legacy = await self.legacy.read()
        except (OSError, DaybookError) as e:
            raise MigrationFailure(f"Cannot read legacy data: {e}") from e
        if legacy is None:
            return -1

        entries = _convert(legacy)
        try:
            for date_id, entry in entries.items():
                await self.store.save_entry(date_id, entry)
            await self.legacy.clear()
        except (OSError, DaybookError) as e:
            raise MigrationFailure(f"Cannot write migrated entries: {e}") from e
        return len(entries)

    async def migrate(self) -> bool:
        """Run the migration if legacy data exists.

        Returns:
            True if legacy data was migrated and cleared, False otherwise
            (nothing to migrate, or the migration failed).
        """
        try:
            migrated = await self._migrate()
        except MigrationFailure as e:
            logger.error(f"Legacy migration failed, will retry next run: {e}")
            return False
        except Exception as e:
            logger.opt(exception=e).error(f"Legacy migration failed unexpectedly, will retry next run: {e}")
            return False

        if migrated < 0:
            logger.debug("No legacy journal data to migrate")
            return False
        logger.info(f"Migrated {migrated} legacy entries")
        return True
