"""
Storage backends for daybook.

Provides an async ordered key-value interface with a local filesystem
backend (atomic single-key writes, optional gzip) and an in-memory one.
"""

from .base import (
    StorageBackend,
    StorageError,
    StorageKeyError,
    StorageMetadata,
    StoragePermissionError,
)
from .compression import (
    CompressionType,
    compress_bytes,
    compress_json,
    decompress_bytes,
    decompress_json,
    get_compression_for_content_type,
)
from .local import LocalStorage
from .memory import MemoryStorage

__all__ = [
    "CompressionType",
    "LocalStorage",
    "MemoryStorage",
    "StorageBackend",
    "StorageError",
    "StorageKeyError",
    "StorageMetadata",
    "StoragePermissionError",
    "compress_bytes",
    "compress_json",
    "decompress_bytes",
    "decompress_json",
    "get_compression_for_content_type",
]
