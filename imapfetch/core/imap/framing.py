"""Locate the literal announced by a single-message FETCH response."""

import re
from typing import Callable

from imapfetch.core.models import LiteralFrame
from imapfetch.utils.errors import LiteralNotFoundError
from imapfetch.utils.text import decode_text

# Section of a whole-message fetch (BODY[])
FULL_MESSAGE = ""


def _literal_pattern(section: str) -> re.Pattern:
    return re.compile(
        rb"^\* (\d+) FETCH \(BODY\["
        + re.escape(section.encode("ascii"))
        + rb"\] \{(\d+)\}\r\n",
        re.MULTILINE | re.IGNORECASE,
    )


def frame_ready(section: str, tag: str) -> Callable[[bytes], bool]:
    """Return a peek stop test for a FETCH of ``section`` sent as ``tag``.

    The test accepts a chunk once it holds the literal announcement or the
    tagged completion line, so untagged data delivered ahead of the FETCH
    line does not end the peek early.
    """
    pattern = _literal_pattern(section)
    completion = re.compile(
        rb"^" + re.escape(tag.encode("ascii")) + rb" [^\r\n]*\r\n", re.MULTILINE
    )

    def ready(chunk: bytes) -> bool:
        return pattern.search(chunk) is not None or completion.search(chunk) is not None

    return ready


def frame_literal(chunk: bytes, section: str = FULL_MESSAGE) -> LiteralFrame:
    """Find ``* <seq> FETCH (BODY[<section>] {<N>}`` followed by CRLF.

    Args:
        chunk: Peeked response bytes; nothing is consumed
        section: FETCH section, "" for the whole message or
            ``HEADER.FIELDS (FROM)`` and friends

    Returns:
        Frame with the sequence number, the announced length and the offset
        of the first literal byte within ``chunk``

    Raises:
        LiteralNotFoundError: If no line in the chunk announces the literal
    """
    match = _literal_pattern(section).search(chunk)
    if match is None:
        first_line = chunk.split(b"\r\n", 1)[0]
        raise LiteralNotFoundError(
            f"No literal announced for BODY[{section}]",
            details={"section": section, "response": decode_text(first_line[:120])},
        )

    return LiteralFrame(
        sequence=int(match.group(1)),
        length=int(match.group(2)),
        offset=match.end(),
    )
