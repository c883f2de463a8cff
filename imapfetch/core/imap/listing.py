"""Parse a buffered ``FETCH 1:*`` subject response into a mailbox listing."""

import re

from imapfetch.core.models import MailboxListing
from imapfetch.utils.errors import ListingFormatError
from imapfetch.utils.logging import get_logger
from imapfetch.utils.text import CRLF, decode_text, find_insensitive, unfold

logger = get_logger(__name__)

UNTAGGED_MARKER = b"* "
SUBJECT_LABEL = b"\r\nSubject:"
ENTRY_TERMINATOR = b"\r\n\r\n)\r\n"

_SUBJECT_FETCH = re.compile(
    rb"\* (\d+) FETCH \(BODY\[HEADER\.FIELDS \(SUBJECT\)\] \{(\d+)\}\r\n",
    re.IGNORECASE,
)
_UNTAGGED_OTHER = re.compile(rb"\* (?:\d+ )?[A-Z]+", re.IGNORECASE)
_TRAILING_LITERAL = re.compile(rb"\{(\d+)\}$")


def _skip_untagged(response: bytes, marker: int, line_end: int) -> int:
    """Return the position after an untagged line and any literal it announces."""
    literal = _TRAILING_LITERAL.search(response, marker, line_end)
    position = line_end + len(CRLF)
    if literal is not None:
        position = min(position + int(literal.group(1)), len(response))
    return position


def parse_subject_listing(response: bytes) -> MailboxListing:
    """Extract (sequence, subject) pairs from a subject FETCH response.

    Entries are returned in response order. A message whose literal has no
    ``Subject:`` line gets a None subject.

    Raises:
        ListingFormatError: If a FETCH line or an entry terminator is malformed
    """
    listing = MailboxListing()
    position = 0

    while True:
        marker = response.find(UNTAGGED_MARKER, position)
        if marker < 0:
            break

        match = _SUBJECT_FETCH.match(response, marker)
        if match is None:
            line_end = response.find(CRLF, marker)
            if _UNTAGGED_OTHER.match(response, marker) and line_end >= 0:
                # Unsolicited data such as "* 4 EXISTS" or "* 2 FETCH (FLAGS (\Seen))"
                position = _skip_untagged(response, marker, line_end)
                continue
            raise ListingFormatError(
                "Header not found",
                details={"response": decode_text(response[marker:marker + 80])},
            )

        sequence = int(match.group(1))
        literal_start = match.end()
        literal_end = literal_start + int(match.group(2))

        if literal_end > len(response):
            raise ListingFormatError(
                "Subject literal is truncated",
                details={"sequence": sequence},
            )

        # The CRLF closing the FETCH line counts as the label's leading CRLF
        label = find_insensitive(response, SUBJECT_LABEL, literal_start - len(CRLF), literal_end)

        if label < 0:
            listing.add(sequence, None)
            position = literal_end
            continue

        value_start = label + len(SUBJECT_LABEL)
        value_end = response.find(ENTRY_TERMINATOR, value_start)
        if value_end < 0 or value_end > literal_end:
            raise ListingFormatError(
                "Subject end not found",
                details={"sequence": sequence},
            )

        subject = response[value_start:value_end].lstrip(b" \t")
        listing.add(sequence, decode_text(unfold(subject)))
        position = literal_end

    logger.debug("Parsed mailbox listing", extra={"count": len(listing)})
    return listing
