"""Journal entry store with backup export and reconciling import.

Provides the entry model, an EntryStore over pluggable storage backends,
a data-URI attachment codec, backup serialization with merge/overwrite/
keep_old import strategies, and a one-shot legacy migrator.
"""

from .backup import BackupSerializer, dump_backup, parse_backup
from .codec import decode_attachment, encode_attachment
from .config import JournalConfig
from .migration import LegacyFileStore, LegacyMigrator, LegacyStore
from .models import (
    DEFAULT_IMPORT_STRATEGY,
    Attachment,
    ImportStrategy,
    JournalEntry,
    SerializedJournalEntry,
    guess_media_type,
)
from .reconcile import ImportReconciler, ReconcileSummary, merge_entries, resolve_entry
from .session import JournalSession, open_journal
from .store import EntryStore

__all__ = [
    "DEFAULT_IMPORT_STRATEGY",
    "Attachment",
    "BackupSerializer",
    "EntryStore",
    "ImportReconciler",
    "ImportStrategy",
    "JournalConfig",
    "JournalEntry",
    "JournalSession",
    "LegacyFileStore",
    "LegacyMigrator",
    "LegacyStore",
    "ReconcileSummary",
    "SerializedJournalEntry",
    "decode_attachment",
    "dump_backup",
    "encode_attachment",
    "guess_media_type",
    "merge_entries",
    "open_journal",
    "parse_backup",
    "resolve_entry",
]
