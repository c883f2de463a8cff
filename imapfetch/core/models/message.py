"""Message domain models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

NO_SUBJECT = "<No subject>"


class FieldName(Enum):
    """Header fields that can be fetched individually."""

    FROM = "From"
    TO = "To"
    DATE = "Date"
    SUBJECT = "Subject"

    @property
    def section(self) -> str:
        """FETCH section name, e.g. ``HEADER.FIELDS (FROM)``."""
        return f"HEADER.FIELDS ({self.value.upper()})"

    @property
    def label(self) -> bytes:
        """Field-name prefix at the start of the literal, e.g. ``b"From: "``."""
        return f"{self.value}: ".encode("ascii")

    @property
    def placeholder(self) -> str:
        """Displayed value when the field is present but blank."""
        return NO_SUBJECT if self is FieldName.SUBJECT else ""


@dataclass(frozen=True)
class HeaderField:
    """A single unfolded header field."""

    name: FieldName
    raw: bytes
    value: str
    blank: bool = False

    @classmethod
    def blank_field(cls, name: FieldName) -> "HeaderField":
        return cls(name=name, raw=b"", value=name.placeholder, blank=True)

    def render(self) -> str:
        """Render as an output line (``To:`` when blank with no placeholder)."""
        if not self.value:
            return f"{self.name.value}:"
        return f"{self.name.value}: {self.value}"


class TransferEncoding(Enum):
    """Content-Transfer-Encoding values accepted for the text part.

    Declaration order is the order in which they are searched.
    """

    QUOTED_PRINTABLE = "quoted-printable"
    SEVEN_BIT = "7bit"
    EIGHT_BIT = "8bit"


@dataclass
class MimePart:
    """One body part of a multipart message."""

    content_type: str
    charset: str
    transfer_encoding: TransferEncoding
    text: str


@dataclass
class MimeMessage:
    """A multipart/alternative message with its selected text part."""

    version: str
    content_type: str
    boundary: str
    parts: List[MimePart] = field(default_factory=list)

    @property
    def plain_text(self) -> Optional[MimePart]:
        """First text/plain part, if one was materialised."""
        for part in self.parts:
            if part.content_type == "text/plain":
                return part
        return None
