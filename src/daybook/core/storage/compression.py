"""
Compression utilities for storage backends.

gzip only; no extra dependencies. Decompression sniffs the gzip magic
number so records written with compression disabled still load.
"""

import gzip
import json
from enum import Enum
from typing import Any

_GZIP_MAGIC = b"\x1f\x8b"


class CompressionType(Enum):
    """Supported compression types."""

    NONE = "none"
    GZIP = "gzip"


def compress_bytes(data: bytes, compression: CompressionType = CompressionType.GZIP) -> bytes:
    """Compress binary data."""
    if compression == CompressionType.NONE:
        return data
    if compression == CompressionType.GZIP:
        # mtime=0 keeps output stable for identical input
        return gzip.compress(data, compresslevel=6, mtime=0)
    raise ValueError(f"Unsupported compression type: {compression}")


def decompress_bytes(data: bytes, compression: CompressionType | None = None) -> bytes:
    """Decompress binary data.

    With ``compression=None`` the format is detected from the payload.
    """
    if compression is None:
        compression = CompressionType.GZIP if is_gzipped(data) else CompressionType.NONE
    if compression == CompressionType.NONE:
        return data
    if compression == CompressionType.GZIP:
        return gzip.decompress(data)
    raise ValueError(f"Unsupported compression type: {compression}")


def is_gzipped(data: bytes) -> bool:
    return data[:2] == _GZIP_MAGIC


def compress_json(obj: Any, compression: CompressionType = CompressionType.GZIP) -> bytes:
    """JSON-serialize (compact, UTF-8) and compress an object."""
    json_str = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    return compress_bytes(json_str.encode("utf-8"), compression)


def decompress_json(data: bytes) -> Any:
    """Decompress (if needed) and parse JSON data."""
    return json.loads(decompress_bytes(data).decode("utf-8"))


def get_compression_for_content_type(content_type: str) -> CompressionType:
    """Determine best compression type based on MIME type."""
    # Already compressed formats
    if any(ct in content_type for ct in ["image/", "video/", "audio/", "zip", "gzip"]):
        return CompressionType.NONE
    return CompressionType.GZIP
