"""
Local filesystem storage backend.

One file per key under ``<base_path>/<database>/<store_name>/``. Writes go
to a hidden temp file that is fsynced and then renamed over the target, so
a single save is atomic.
"""

import asyncio
import os
import uuid
from collections.abc import AsyncIterator
from datetime import datetime
from pathlib import Path
from urllib.parse import quote, unquote

import aiofiles
import aiofiles.os
from loguru import logger

from ..types import PathLike
from .base import StorageBackend, StorageError, StorageKeyError, StorageMetadata, StoragePermissionError
from .compression import CompressionType, compress_bytes, get_compression_for_content_type, is_gzipped

_RECORD_SUFFIX = ".rec"


def _encode_key(key: str) -> str:
    """Map an arbitrary key onto a single safe filename component."""
    encoded = quote(key, safe="")
    # "." and ".." are not usable filenames; hidden names are reserved for temp files
    if encoded.startswith("."):
        encoded = "%2E" + encoded[1:]
    return encoded + _RECORD_SUFFIX


def _decode_filename(name: str) -> str | None:
    if name.startswith(".") or not name.endswith(_RECORD_SUFFIX):
        return None
    return unquote(name[: -len(_RECORD_SUFFIX)])


class LocalStorage(StorageBackend):
    """Local filesystem storage backend."""

    def __init__(
        self,
        base_path: PathLike = "~/.daybook-data",
        database: str = "journal_db",
        store_name: str = "entries",
        **config,
    ):
        super().__init__(**config)
        self.base_path = Path(base_path).expanduser().resolve()
        self.database = database
        self.store_name = store_name
        self.store_path = self.base_path / database / store_name
        self._opened = False

    async def open(self) -> None:
        if self._opened:
            return
        try:
            self.store_path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot create store at {self.store_path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot open store at {self.store_path}: {e}") from e
        if not self.store_path.is_dir():
            raise StorageError(f"Store path is not a directory: {self.store_path}")
        self._opened = True
        logger.debug(f"Opened local store {self.database}/{self.store_name} at {self.store_path}")

    def _get_full_path(self, key: str) -> Path:
        if not isinstance(key, str) or not key:
            raise StoragePermissionError("Storage key must be a non-empty string.")
        if "\x00" in key:
            raise StoragePermissionError("Storage key cannot contain null bytes.")
        return self.store_path / _encode_key(key)

    async def save(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        compress: bool = True,
    ) -> StorageMetadata:
        await self.open()
        path = self._get_full_path(key)

        compression = CompressionType.NONE
        if compress:
            compression = get_compression_for_content_type(content_type)
            data = compress_bytes(data, compression)

        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
                await f.flush()
                await asyncio.get_running_loop().run_in_executor(None, os.fsync, f.fileno())
            await aiofiles.os.replace(tmp_path, path)
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write to {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot write key '{key}': {e}") from e
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)

        stat = await aiofiles.os.stat(path)
        return StorageMetadata(
            key=key,
            size=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime),
            compression=compression.value if compression != CompressionType.NONE else None,
            content_type=content_type,
        )

    async def load(self, key: str) -> bytes:
        await self.open()
        path = self._get_full_path(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            raise StorageKeyError(f"Key not found: {key}") from None
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read key '{key}': {e}") from e

    async def exists(self, key: str) -> bool:
        await self.open()
        return await aiofiles.os.path.isfile(self._get_full_path(key))

    async def delete(self, key: str) -> bool:
        await self.open()
        path = self._get_full_path(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Cannot delete key '{key}': {e}") from e
        return True

    async def list_keys(self, prefix: str = "", limit: int | None = None) -> AsyncIterator[str]:
        await self.open()
        try:
            names = await aiofiles.os.listdir(self.store_path)
        except OSError as e:
            raise StorageError(f"Cannot list store {self.store_path}: {e}") from e

        keys = sorted(k for k in map(_decode_filename, names) if k is not None)
        count = 0
        for key in keys:
            if prefix and not key.startswith(prefix):
                continue
            yield key
            count += 1
            if limit and count >= limit:
                return

    async def get_metadata(self, key: str) -> StorageMetadata:
        await self.open()
        path = self._get_full_path(key)
        try:
            stat = await aiofiles.os.stat(path)
            async with aiofiles.open(path, "rb") as f:
                head = await f.read(2)
        except FileNotFoundError:
            raise StorageKeyError(f"Key not found: {key}") from None
        except OSError as e:
            raise StorageError(f"Cannot stat key '{key}': {e}") from e

        return StorageMetadata(
            key=key,
            size=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime),
            compression="gzip" if is_gzipped(head) else None,
        )
