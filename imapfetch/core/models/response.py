"""IMAP response models"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LiteralFrame:
    """Location of a literal announced by a FETCH line.

    ``offset`` is relative to the start of the peeked chunk and points at the
    first literal byte, just past the line's CRLF.
    """

    sequence: int
    length: int
    offset: int


@dataclass(frozen=True)
class TaggedResponse:
    """Everything read for one command, up to and including its tagged line."""

    tag: str
    status: str
    text: str
    data: bytes

    @property
    def ok(self) -> bool:
        return self.status == "OK"
