"""Read a single header field out of a HEADER.FIELDS literal."""

from imapfetch.core.imap.constants import Limits
from imapfetch.core.imap.transport import IMAPTransport
from imapfetch.core.models import FieldName, HeaderField, LiteralFrame
from imapfetch.utils.errors import FieldNotFoundError
from imapfetch.utils.logging import get_logger
from imapfetch.utils.text import decode_text, unfold

logger = get_logger(__name__)


async def extract_field(
    transport: IMAPTransport, frame: LiteralFrame, field: FieldName
) -> HeaderField:
    """Consume the status line and literal of a header-field FETCH.

    The literal looks like ``From: value\\r\\n\\r\\n``: the field label, the
    (possibly folded) value, the field's CRLF and the blank line ending the
    header block. Exactly ``frame.offset + frame.length`` bytes are consumed;
    the response's closing lines are left for the session.

    Raises:
        FieldNotFoundError: If the literal does not hold the requested field
    """
    await transport.read_exact(frame.offset)

    if frame.length <= Limits.BLANK_FIELD_LENGTH:
        await transport.read_exact(frame.length)
        logger.debug(f"{field.value} field is blank")
        return HeaderField.blank_field(field)

    label = field.label
    value_length = frame.length - len(label) - Limits.FIELD_TERMINATOR_LENGTH
    if value_length < 0:
        raise FieldNotFoundError(
            f"{field.value} literal is too short to hold the field",
            details={"field": field.value, "length": frame.length},
        )

    # Label is "<Name>: "; compare the name and colon only
    received_label = await transport.read_exact(len(label))
    if received_label[:-1].lower() != label[:-1].lower():
        raise FieldNotFoundError(
            f"{field.value} response not found",
            details={"field": field.value, "label": decode_text(received_label)},
        )

    raw = await transport.read_exact(value_length)
    await transport.read_exact(Limits.FIELD_TERMINATOR_LENGTH)

    # No space after the colon: the last label byte belongs to the value
    if received_label[-1:] not in (b" ", b"\t"):
        raw = received_label[-1:] + raw

    value = unfold(raw).strip(b" \t\r\n")
    if not value:
        logger.debug(f"{field.value} field is blank")
        return HeaderField(name=field, raw=raw, value=field.placeholder, blank=True)

    return HeaderField(name=field, raw=raw, value=decode_text(value))
