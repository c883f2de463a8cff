"""Structural parser for multipart/alternative message bodies.

The parser works on the fully buffered message and only locates the first
``text/plain; charset=UTF-8`` part. No transfer decoding is applied: the
part's text is returned exactly as it appears between its header block and
the next boundary delimiter.

Stages, each fatal on failure:

1. ``MIME-Version: 1.0`` must be present.
2. ``Content-Type: multipart/alternative;`` must be present.
3. ``boundary=`` after it gives the quoted or bare boundary token.
4. ``\\r\\n--<boundary>\\r\\n`` opens the first part.
5. Parts are walked until one declares text/plain with charset UTF-8; that
   part must also declare an accepted Content-Transfer-Encoding.
6. The part body starts 4 bytes after the later of those two headers.
7. ``\\r\\n--<boundary>`` ends the body.

All searches are ASCII case-insensitive.
"""

from typing import Optional, Tuple

from imapfetch.core.imap.constants import Limits
from imapfetch.core.models import MimeMessage, MimePart, TransferEncoding
from imapfetch.utils.errors import (
    BoundaryMissingError,
    EncodingMissingError,
    EndBoundaryMissingError,
    MimeVersionMissingError,
    NotMultipartAlternativeError,
    PlainTextPartMissingError,
    StartBoundaryMissingError,
)
from imapfetch.utils.logging import get_logger
from imapfetch.utils.text import CRLF, decode_text, find_insensitive

logger = get_logger(__name__)

MIME_VERSION = b"MIME-Version: 1.0"
MULTIPART_ALTERNATIVE = b"Content-Type: multipart/alternative;"
BOUNDARY_PARAM = b"boundary="
TEXT_PLAIN = b"Content-Type: text/plain"
CHARSET_UTF8 = b"charset=UTF-8"
TRANSFER_ENCODING = b"Content-Transfer-Encoding: "

# Characters ending an unquoted boundary token
_BARE_BOUNDARY_END = (b" ", b"\r", b"\n")


def extract_boundary(body: bytes, start: int = 0) -> bytes:
    """Return the boundary token of the first ``boundary=`` at or after start.

    Raises:
        BoundaryMissingError: If the parameter is absent, unterminated or empty
    """
    param = find_insensitive(body, BOUNDARY_PARAM, start)
    if param < 0:
        raise BoundaryMissingError()

    value_start = param + len(BOUNDARY_PARAM)

    if body[value_start:value_start + 1] == b'"':
        value_start += 1
        value_end = body.find(b'"', value_start)
        if value_end < 0:
            raise BoundaryMissingError("Boundary quote is not terminated")
    else:
        value_end = value_start
        while value_end < len(body) and body[value_end:value_end + 1] not in _BARE_BOUNDARY_END:
            value_end += 1

    boundary = body[value_start:value_end]
    if not boundary:
        raise BoundaryMissingError("Boundary parameter is empty")

    return boundary


def _find_charset_end(body: bytes, start: int, end: int) -> int:
    """Return the index after ``charset=UTF-8`` in a text/plain part, or -1."""
    if find_insensitive(body, TEXT_PLAIN, start, end) < 0:
        return -1

    charset = find_insensitive(body, CHARSET_UTF8, start, end)
    if charset < 0:
        return -1

    return charset + len(CHARSET_UTF8)


def _find_encoding_end(
    body: bytes, start: int, end: int
) -> Tuple[int, Optional[TransferEncoding]]:
    """Return the index after the first accepted transfer-encoding header."""
    for encoding in TransferEncoding:
        header = TRANSFER_ENCODING + encoding.value.encode("ascii")
        index = find_insensitive(body, header, start, end)
        if index >= 0:
            return index + len(header), encoding

    return -1, None


class MimeParser:
    """Parse a buffered message into a MimeMessage with its text/plain part."""

    def __init__(self, body: bytes):
        self.body = body

    def parse(self) -> MimeMessage:
        """Run every stage and return the parsed message.

        Raises:
            StructuralError: A subclass naming the first stage that failed
        """
        body = self.body

        if find_insensitive(body, MIME_VERSION) < 0:
            raise MimeVersionMissingError()

        content_type = find_insensitive(body, MULTIPART_ALTERNATIVE)
        if content_type < 0:
            raise NotMultipartAlternativeError()

        boundary = extract_boundary(body, content_type)
        logger.debug("MIME boundary found", extra={"boundary": decode_text(boundary)})

        start_delimiter = CRLF + b"--" + boundary + CRLF
        part_delimiter = CRLF + b"--" + boundary

        opening = find_insensitive(body, start_delimiter, content_type)
        if opening < 0:
            raise StartBoundaryMissingError()

        part = self._select_plain_text_part(
            opening + len(start_delimiter), boundary, part_delimiter
        )

        return MimeMessage(
            version="1.0",
            content_type="multipart/alternative",
            boundary=decode_text(boundary),
            parts=[part],
        )

    def _select_plain_text_part(
        self, cursor: int, boundary: bytes, part_delimiter: bytes
    ) -> MimePart:
        """Walk parts from cursor and materialise the first text/plain one."""
        body = self.body

        while True:
            part_end = find_insensitive(body, part_delimiter, cursor)
            search_end = part_end if part_end >= 0 else len(body)

            charset_end = _find_charset_end(body, cursor, search_end)
            if charset_end >= 0:
                return self._read_part(cursor, search_end, part_delimiter)

            # Not the text part; the next delimiter must open another one
            if part_end < 0:
                break
            after = part_end + len(part_delimiter)
            if body[after:after + 2] != CRLF:
                break
            cursor = after + len(CRLF)

        raise PlainTextPartMissingError()

    def _read_part(self, cursor: int, search_end: int, part_delimiter: bytes) -> MimePart:
        """Locate the part body after its headers.

        Raises:
            EncodingMissingError: If no accepted transfer encoding is declared
            EndBoundaryMissingError: If no delimiter follows the body
        """
        body = self.body

        charset_end = _find_charset_end(body, cursor, search_end)
        encoding_end, encoding = _find_encoding_end(body, cursor, search_end)
        if encoding is None:
            raise EncodingMissingError()

        # Header order inside a part is free
        cursor = max(charset_end, encoding_end)

        # Skips the blank line after the part headers; the bytes are not checked
        body_start = cursor + Limits.BODY_SEPARATOR_LENGTH

        body_end = find_insensitive(body, part_delimiter, body_start)
        if body_end < 0:
            raise EndBoundaryMissingError()

        return MimePart(
            content_type="text/plain",
            charset="UTF-8",
            transfer_encoding=encoding,
            text=decode_text(body[body_start:body_end]),
        )


def parse_mime(body: bytes) -> MimeMessage:
    """Parse a buffered multipart/alternative message."""
    return MimeParser(body).parse()
