"""Typed settings for the journal store, backup, and migration.

Pure data with sensible defaults. Build from a core Config with
``JournalConfig.from_config()``; env overrides arrive as strings and are
coerced here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from daybook.core.config import Config
from daybook.core.exceptions import ConfigurationError

from .models import DEFAULT_IMPORT_STRATEGY, ImportStrategy

BACKENDS = ("local", "memory")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _as_bool(key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"{key} must be a boolean, got {value!r}")


@dataclass
class JournalConfig:
    """Settings for one journal session.

    Attributes:
        data_dir: Root directory for local storage.
        backend: ``local`` (files under data_dir) or ``memory``.
        database: Database name; a directory under data_dir.
        store_name: Store name inside the database.
        compress: gzip entry records.
        default_strategy: Import strategy used when none is given.
        indent: Indentation of exported backup documents.
        legacy_file: Legacy flat JSON file to migrate from, if any.
    """

    data_dir: str = field(default_factory=lambda: os.path.expanduser("~/.daybook-data"))
    backend: str = "local"
    database: str = "journal_db"
    store_name: str = "entries"
    compress: bool = True
    default_strategy: ImportStrategy = DEFAULT_IMPORT_STRATEGY
    indent: int = 2
    legacy_file: str | None = None

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"storage.backend must be one of {', '.join(BACKENDS)}, got {self.backend!r}")
        try:
            self.default_strategy = ImportStrategy.parse(self.default_strategy)
        except ValueError as e:
            raise ConfigurationError(f"backup.default_strategy: {e}") from e
        if not self.database or not self.store_name:
            raise ConfigurationError("storage.database and storage.store must be non-empty")

    @classmethod
    def from_config(cls, config: Config) -> JournalConfig:
        indent = config.get("backup.indent", 2)
        try:
            indent = int(indent)
        except (TypeError, ValueError):
            raise ConfigurationError(f"backup.indent must be an integer, got {indent!r}") from None

        return cls(
            data_dir=config.get_data_dir(),
            backend=str(config.get("storage.backend", "local")).lower(),
            database=str(config.get("storage.database", "journal_db")),
            store_name=str(config.get("storage.store", "entries")),
            compress=_as_bool("storage.compress", config.get("storage.compress", True)),
            default_strategy=config.get("backup.default_strategy", DEFAULT_IMPORT_STRATEGY.value),
            indent=indent,
            legacy_file=config.get("legacy.file") or None,
        )
