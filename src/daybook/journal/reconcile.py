"""Import reconciliation: place incoming backup entries into a live store.

One strategy applies to every identifier in the import. Identifiers that
exist only in the live store are never touched; import never deletes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from loguru import logger

from daybook.core.types import DateId

from .models import ImportStrategy, JournalEntry
from .store import EntryStore

OLD_HEADER = "== OLD =="
NEW_HEADER = "== NEW =="


def merge_entries(existing: JournalEntry, incoming: JournalEntry) -> JournalEntry:
    """Combine two entries for the same date.

    Text keeps both halves under distinct headers. Mood and images take the
    incoming value when it is non-empty; images are never concatenated.
    """
    text = f"{OLD_HEADER}\n{existing.text}\n\n{NEW_HEADER}\n{incoming.text or ''}"
    mood = incoming.mood if incoming.mood else existing.mood
    images = list(incoming.images) if incoming.images else list(existing.images)
    return JournalEntry(text=text, mood=mood, images=images)


def resolve_entry(
    existing: JournalEntry | None,
    incoming: JournalEntry,
    strategy: ImportStrategy,
) -> JournalEntry | None:
    """Decide what to write for one identifier. None means leave it untouched."""
    if existing is None:
        return incoming
    match strategy:
        case ImportStrategy.OVERWRITE:
            return incoming
        case ImportStrategy.KEEP_OLD:
            return None
        case ImportStrategy.MERGE:
            return merge_entries(existing, incoming)
    raise ValueError(f"Unhandled import strategy: {strategy!r}")


@dataclass
class ReconcileSummary:
    """Per-outcome counts for one import."""

    created: int = 0
    replaced: int = 0
    merged: int = 0
    skipped: int = 0

    @property
    def written(self) -> int:
        return self.created + self.replaced + self.merged

    def __str__(self) -> str:
        return (
            f"{self.created} created, {self.replaced} replaced, "
            f"{self.merged} merged, {self.skipped} skipped"
        )


class ImportReconciler:
    """Apply decoded backup entries to an EntryStore under one strategy."""

    def __init__(self, store: EntryStore):
        self.store = store

    async def apply(
        self,
        incoming: Mapping[DateId, JournalEntry],
        strategy: ImportStrategy | str,
    ) -> ReconcileSummary:
        """Reconcile and write entries sequentially, in mapping order.

        Not transactional: a failure part-way leaves earlier identifiers
        written and later ones untouched.
        """
        strategy = ImportStrategy.parse(strategy)
        summary = ReconcileSummary()

        for date_id, entry in incoming.items():
            existing = await self.store.get_entry(date_id)
            resolved = resolve_entry(existing, entry, strategy)
            if resolved is None:
                summary.skipped += 1
                logger.debug(f"Kept existing entry {date_id}")
                continue

            await self.store.save_entry(date_id, resolved)
            if existing is None:
                summary.created += 1
            elif strategy == ImportStrategy.MERGE:
                summary.merged += 1
            else:
                summary.replaced += 1

        return summary
