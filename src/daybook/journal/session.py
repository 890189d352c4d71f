"""Session bootstrap.

``open_journal()`` is called once at startup. It builds the storage
backend and EntryStore, runs the legacy migration, and returns explicit
handles for the caller to pass around.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from daybook.core.config import Config
from daybook.core.storage import LocalStorage, MemoryStorage, StorageBackend

from .backup import BackupSerializer
from .config import JournalConfig
from .migration import LegacyFileStore, LegacyMigrator, LegacyStore
from .store import EntryStore


@dataclass
class JournalSession:
    """Handles for one open journal."""

    config: JournalConfig
    entries: EntryStore
    backup: BackupSerializer


def create_backend(settings: JournalConfig) -> StorageBackend:
    if settings.backend == "memory":
        return MemoryStorage()
    return LocalStorage(settings.data_dir, database=settings.database, store_name=settings.store_name)


async def open_journal(
    config: Config | JournalConfig | None = None,
    *,
    backend: StorageBackend | None = None,
    legacy: LegacyStore | None = None,
) -> JournalSession:
    """Open the journal store and migrate legacy data if present.

    Args:
        config: Core Config or ready JournalConfig. Defaults to ``Config()``.
        backend: Storage backend override; built from config when omitted.
        legacy: Legacy source override; defaults to the configured legacy file.

    Raises:
        StorageUnavailable: The store could not be opened. Migration
            problems never raise.
    """
    if config is None:
        config = Config()
    settings = config if isinstance(config, JournalConfig) else JournalConfig.from_config(config)

    store = EntryStore(backend or create_backend(settings), compress=settings.compress)
    await store.open()
    logger.debug(f"Journal store ready ({settings.backend}: {settings.database}/{settings.store_name})")

    if legacy is None and settings.legacy_file:
        legacy = LegacyFileStore(settings.legacy_file)
    if legacy is not None:
        await LegacyMigrator(store, legacy).migrate()

    return JournalSession(
        config=settings,
        entries=store,
        backup=BackupSerializer(store, indent=settings.indent, default_strategy=settings.default_strategy),
    )
