"""Core data models for the journal store.

``JournalEntry`` is what the store holds; ``SerializedJournalEntry`` is its
shape inside a backup document, with attachments as data-URI strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

DEFAULT_MEDIA_TYPE = "application/octet-stream"

# Printable ASCII minus space and comma, so the type survives inside a data URI header
_MEDIA_TYPE_RE = re.compile(r"[\x21-\x2b\x2d-\x7e]+")

# (magic prefix, offset, media type)
_SIGNATURES: tuple[tuple[bytes, int, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", 0, "image/png"),
    (b"\xff\xd8\xff", 0, "image/jpeg"),
    (b"GIF87a", 0, "image/gif"),
    (b"GIF89a", 0, "image/gif"),
    (b"WEBP", 8, "image/webp"),
    (b"BM", 0, "image/bmp"),
)


def guess_media_type(data: bytes) -> str:
    """Best-effort media type from magic bytes."""
    for magic, offset, media_type in _SIGNATURES:
        if data[offset : offset + len(magic)] == magic:
            if media_type == "image/webp" and data[:4] != b"RIFF":
                continue
            return media_type
    return DEFAULT_MEDIA_TYPE


class ImportStrategy(StrEnum):
    """How an imported entry is combined with an existing one at the same date."""

    MERGE = "merge"  # Concatenate text, prefer incoming mood/images when set
    OVERWRITE = "overwrite"  # Incoming replaces existing
    KEEP_OLD = "keep_old"  # Existing wins, incoming discarded

    @classmethod
    def parse(cls, value: ImportStrategy | str) -> ImportStrategy:
        try:
            return cls(value)
        except ValueError:
            options = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown import strategy {value!r}; expected one of: {options}") from None


DEFAULT_IMPORT_STRATEGY = ImportStrategy.KEEP_OLD


@dataclass
class Attachment:
    """A binary image attached to an entry.

    Attributes:
        data: Raw bytes, preserved exactly.
        media_type: MIME type (with any parameters), e.g. ``image/png``.
    """

    data: bytes
    media_type: str = DEFAULT_MEDIA_TYPE

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            raise TypeError("Attachment data must be bytes")
        self.data = bytes(self.data)
        if not self.media_type:
            self.media_type = DEFAULT_MEDIA_TYPE
        elif not isinstance(self.media_type, str) or not _MEDIA_TYPE_RE.fullmatch(self.media_type):
            raise ValueError(f"Invalid attachment media type {self.media_type!r}")

    @classmethod
    def from_bytes(cls, data: bytes) -> Attachment:
        return cls(data=bytes(data), media_type=guess_media_type(data))

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Attachment(media_type='{self.media_type}', size={len(self.data)})"


@dataclass
class JournalEntry:
    """One day's entry.

    Attributes:
        text: Free-form body; required, may be empty.
        mood: Optional short tag.
        images: Ordered attachments. Raw bytes are wrapped into Attachment.
    """

    text: str
    mood: str | None = None
    images: list[Attachment] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise ValueError("Entry text must be a string")
        if self.mood is not None and not isinstance(self.mood, str):
            raise ValueError("Entry mood must be a string or None")
        self.images = [
            img if isinstance(img, Attachment) else Attachment.from_bytes(img) for img in (self.images or [])
        ]

    def __repr__(self) -> str:
        preview = self.text[:40] + "..." if len(self.text) > 40 else self.text
        return f"JournalEntry(text='{preview}', mood={self.mood!r}, images={len(self.images)})"


@dataclass
class SerializedJournalEntry:
    """Backup-document form of a JournalEntry."""

    text: str
    mood: str | None = None
    images: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.mood is not None:
            data["mood"] = self.mood
        data["images"] = list(self.images)
        return data
