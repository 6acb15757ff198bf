"""Normalization helpers for raw message content."""
from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable

from .errors import DecodingFailure

logger = logging.getLogger(__name__)

DEFAULT_ENCODINGS = [
    "utf-8",
    "iso-8859-1",
    "windows-1252",
    "utf-16le",
    "utf-16be",
]

MIN_PRINTABLE_RATIO = 0.3
HEX_ROW_WIDTH = 16

# NUL plus C0 controls except tab, newline and carriage return, and DEL.
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
PRINTABLE_RE = re.compile(r"[\x20-\x7E\n\t]")


def resolve_encodings(encodings: Iterable[str] | None = None) -> list[str]:
    if encodings:
        order = [name.strip() for name in encodings if name and name.strip()]
    else:
        env_value = os.environ.get("INSPECTOR_ENCODINGS")
        if env_value:
            order = [name.strip() for name in env_value.split(",") if name.strip()]
        else:
            order = list(DEFAULT_ENCODINGS)
    seen = set()
    unique_order: list[str] = []
    for name in order:
        key = name.lower()
        if key not in seen:
            unique_order.append(name)
            seen.add(key)
    return unique_order or list(DEFAULT_ENCODINGS)


def strip_control_chars(text: str) -> str:
    return CONTROL_CHARS_RE.sub("", text)


def printable_ratio(text: str) -> float:
    if not text:
        return 0.0
    return len(PRINTABLE_RE.findall(text)) / len(text)


def decode_bytes(data: bytes, encodings: Iterable[str] | None = None) -> tuple[str, str]:
    """Decode ``data`` with the first encoding that yields mostly printable text.

    Returns the decoded text and the encoding name. Raises ``DecodingFailure``
    when no encoding clears the printable threshold.
    """

    for encoding in resolve_encodings(encodings):
        try:
            decoded = data.decode(encoding, errors="replace")
        except LookupError:
            logger.debug("Unknown encoding skipped: %s", encoding)
            continue
        ratio = printable_ratio(decoded)
        if ratio >= MIN_PRINTABLE_RATIO:
            logger.debug("Decoded %d bytes as %s (printable %.2f)", len(data), encoding, ratio)
            return decoded, encoding
    raise DecodingFailure(f"no encoding produced printable text for {len(data)} bytes")


def hex_dump(data: bytes, name: str = "content") -> str:
    lines = [f"Hexadecimal dump of {name} ({len(data)} bytes):", ""]
    for offset in range(0, len(data), HEX_ROW_WIDTH):
        chunk = data[offset : offset + HEX_ROW_WIDTH]
        hex_row = [f"{byte:02x}" for byte in chunk]
        hex_row.extend("  " for _ in range(HEX_ROW_WIDTH - len(chunk)))
        char_row = "".join(chr(byte) if 0x20 <= byte <= 0x7E else "." for byte in chunk)
        char_row = char_row.ljust(HEX_ROW_WIDTH)
        lines.append(f"{offset:08x}: {' '.join(hex_row)}  |{char_row}|")
    return "\n".join(lines)


def normalize_content(
    raw: str | bytes | bytearray,
    *,
    name: str = "content",
    encodings: Iterable[str] | None = None,
) -> str:
    if isinstance(raw, str):
        return strip_control_chars(raw)
    data = bytes(raw)
    try:
        text, _ = decode_bytes(data, encodings)
    except DecodingFailure as exc:
        logger.warning("Falling back to hex dump for %s: %s", name, exc)
        return strip_control_chars(hex_dump(data, name))
    return strip_control_chars(text)
