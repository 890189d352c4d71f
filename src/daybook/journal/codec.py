"""Attachment codec: binary attachments <-> self-describing data-URI text.

Encoding is always ``data:<media type>;base64,<padded standard base64>``.
Decoding accepts any RFC 2397 data URI, base64 or percent-encoded.
"""

from __future__ import annotations

import base64
import binascii
import re
from urllib.parse import unquote, unquote_to_bytes

from daybook.core.exceptions import InvalidAttachmentEncoding

from .models import Attachment, JournalEntry, SerializedJournalEntry

# RFC 2397: a data URI without an explicit media type is US-ASCII text
_RFC2397_DEFAULT_TYPE = "text/plain;charset=US-ASCII"
_WHITESPACE_RE = re.compile(r"\s+")


def encode_attachment(attachment: Attachment | bytes) -> str:
    """Encode an attachment as a data URI. Raw bytes get a sniffed media type."""
    if not isinstance(attachment, Attachment):
        attachment = Attachment.from_bytes(attachment)
    payload = base64.b64encode(attachment.data).decode("ascii")
    return f"data:{attachment.media_type};base64,{payload}"


def decode_attachment(text: str) -> Attachment:
    """Decode a data URI back into an Attachment.

    Raises:
        InvalidAttachmentEncoding: ``text`` is not a valid data URI.
    """
    if not isinstance(text, str):
        raise InvalidAttachmentEncoding(f"Expected a data URI string, got {type(text).__name__}")

    scheme, sep, rest = text.strip().partition(":")
    if not sep or scheme.lower() != "data":
        raise InvalidAttachmentEncoding("Attachment is not a data URI")

    header, sep, payload = rest.partition(",")
    if not sep:
        raise InvalidAttachmentEncoding("Data URI has no ',' separating header and payload")

    params = [p.strip() for p in header.split(";")]
    is_base64 = len(params) > 1 and params[-1].lower() == "base64"
    if is_base64:
        params = params[:-1]
    params = [p for p in params if p]
    if params and "=" in params[0]:
        # Parameters without a type, e.g. "data:;charset=utf-8,..."
        params.insert(0, "text/plain")
    media_type = ";".join(params) or _RFC2397_DEFAULT_TYPE

    if is_base64:
        cleaned = _WHITESPACE_RE.sub("", unquote(payload))
        try:
            data = base64.b64decode(cleaned, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidAttachmentEncoding(f"Invalid base64 payload: {e}") from e
    else:
        try:
            data = unquote_to_bytes(payload)
        except (TypeError, ValueError) as e:
            raise InvalidAttachmentEncoding(f"Invalid percent-encoded payload: {e}") from e

    try:
        return Attachment(data=data, media_type=media_type)
    except ValueError as e:
        raise InvalidAttachmentEncoding(str(e)) from e


def serialize_entry(entry: JournalEntry) -> SerializedJournalEntry:
    """Encode every attachment of an entry, preserving order."""
    return SerializedJournalEntry(
        text=entry.text,
        mood=entry.mood,
        images=[encode_attachment(img) for img in entry.images],
    )


def deserialize_entry(serialized: SerializedJournalEntry) -> JournalEntry:
    """Decode every attachment of a serialized entry, preserving order."""
    return JournalEntry(
        text=serialized.text,
        mood=serialized.mood,
        images=[decode_attachment(img) for img in serialized.images],
    )
