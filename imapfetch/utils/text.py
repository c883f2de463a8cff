"""Byte-level helpers shared by the IMAP response parsers."""

from typing import Optional

CRLF = b"\r\n"


def find_insensitive(
    haystack: bytes, needle: bytes, start: int = 0, end: Optional[int] = None
) -> int:
    """ASCII case-insensitive ``bytes.find``.

    Returns the index of the first match in ``haystack[start:end]`` relative
    to the start of ``haystack``, or -1.
    """
    if end is None:
        end = len(haystack)
    return haystack.lower().find(needle.lower(), start, end)


def unfold(value: bytes) -> bytes:
    """Remove every CRLF pair from a header value.

    This is broader than RFC 2822 unfolding, which only drops a CRLF that is
    followed by whitespace; any CRLF inside the value is removed.
    """
    return value.replace(CRLF, b"")


def decode_text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def quote_imap_string(value: str) -> str:
    """Render a LOGIN/SELECT argument as an IMAP atom or quoted string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    if not value or any(ch in value for ch in ' "\\'):
        return f'"{escaped}"'
    return escaped
