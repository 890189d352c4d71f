"""In-memory storage backend.

Same contract as LocalStorage, nothing survives the process. Used for
ephemeral sessions and tests.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime

from .base import StorageBackend, StorageKeyError, StorageMetadata, StoragePermissionError
from .compression import CompressionType, compress_bytes, get_compression_for_content_type


@dataclass
class _Record:
    data: bytes
    content_type: str
    compression: CompressionType
    modified_at: datetime


class MemoryStorage(StorageBackend):
    """Dict-backed storage backend."""

    def __init__(self, **config):
        super().__init__(**config)
        self._records: dict[str, _Record] = {}

    async def open(self) -> None:
        return None

    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            raise StoragePermissionError("Storage key must be a non-empty string.")

    async def save(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        compress: bool = True,
    ) -> StorageMetadata:
        self._check_key(key)
        compression = get_compression_for_content_type(content_type) if compress else CompressionType.NONE
        record = _Record(
            data=compress_bytes(bytes(data), compression),
            content_type=content_type,
            compression=compression,
            modified_at=datetime.now(),
        )
        self._records[key] = record
        return self._metadata(key, record)

    async def load(self, key: str) -> bytes:
        self._check_key(key)
        try:
            return self._records[key].data
        except KeyError:
            raise StorageKeyError(f"Key not found: {key}") from None

    async def exists(self, key: str) -> bool:
        self._check_key(key)
        return key in self._records

    async def delete(self, key: str) -> bool:
        self._check_key(key)
        return self._records.pop(key, None) is not None

    async def list_keys(self, prefix: str = "", limit: int | None = None) -> AsyncIterator[str]:
        count = 0
        for key in sorted(self._records):
            if prefix and not key.startswith(prefix):
                continue
            yield key
            count += 1
            if limit and count >= limit:
                return

    async def count(self) -> int:
        return len(self._records)

    async def get_metadata(self, key: str) -> StorageMetadata:
        self._check_key(key)
        record = self._records.get(key)
        if record is None:
            raise StorageKeyError(f"Key not found: {key}")
        return self._metadata(key, record)

    @staticmethod
    def _metadata(key: str, record: _Record) -> StorageMetadata:
        return StorageMetadata(
            key=key,
            size=len(record.data),
            modified_at=record.modified_at,
            compression=record.compression.value if record.compression != CompressionType.NONE else None,
            content_type=record.content_type,
        )
