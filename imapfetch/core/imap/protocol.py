"""IMAP protocol operations - the four message retrieval requests."""

from typing import List

from imapfetch.core.imap.constants import Commands, Limits
from imapfetch.core.imap.fields import extract_field
from imapfetch.core.imap.framing import FULL_MESSAGE, frame_literal, frame_ready
from imapfetch.core.imap.listing import parse_subject_listing
from imapfetch.core.imap.mime import parse_mime
from imapfetch.core.imap.session import IMAPSession
from imapfetch.core.models import (
    FieldName,
    HeaderField,
    LiteralFrame,
    MailboxListing,
    MimeMessage,
)
from imapfetch.utils.errors import (
    CommandFailedError,
    FieldNotFoundError,
    LiteralNotFoundError,
    MessageNotFoundError,
)
from imapfetch.utils.logging import async_log_call, get_logger

logger = get_logger(__name__)

HEADER_FIELD_ORDER = (FieldName.FROM, FieldName.TO, FieldName.DATE, FieldName.SUBJECT)


class IMAPProtocol:
    """Message retrieval operations over a selected mailbox."""

    def __init__(self, session: IMAPSession, peek_size: int = Limits.PEEK_SIZE):
        """Initialise IMAP protocol handler.

        Args:
            session: Authenticated session with a folder selected
            peek_size: Bytes inspected when looking for a literal announcement
        """
        self.session = session
        self.transport = session.transport
        self.peek_size = peek_size

    async def _fetch_frame(self, message_num: int, section: str) -> tuple[str, LiteralFrame]:
        """Send a single-section FETCH and locate its literal.

        Raises:
            LiteralNotFoundError: If the response does not announce the literal
        """
        tag = await self.session.send_command(
            Commands.FETCH_SECTION.format(message_num=message_num, section=section)
        )
        chunk = await self.transport.peek(self.peek_size, frame_ready(section, tag))
        frame = frame_literal(chunk, section)
        self.session.check_literal_size(frame.length)

        logger.debug(
            "Literal located",
            extra={"tag": tag, "sequence": frame.sequence, "length": frame.length},
        )
        return tag, frame

    @async_log_call
    async def fetch_raw_message(self, message_num: int) -> bytes:
        """Fetch the whole message as raw bytes.

        Raises:
            MessageNotFoundError: If the server returns no message literal
            CommandFailedError: If the FETCH does not complete with OK
        """
        try:
            tag, frame = await self._fetch_frame(message_num, FULL_MESSAGE)
        except LiteralNotFoundError as e:
            raise MessageNotFoundError(
                "Message not found", details={"message_num": message_num}
            ) from e

        await self.transport.read_exact(frame.offset)
        message = await self.transport.read_exact(frame.length)
        await self.session.finish(tag, "fetch message")

        logger.info(
            "Fetched message", extra={"message_num": message_num, "size": len(message)}
        )
        return message

    @async_log_call
    async def fetch_header_field(self, message_num: int, field: FieldName) -> HeaderField:
        """Fetch one header field, unfolded.

        Raises:
            FieldNotFoundError: If the server returns no field literal
            CommandFailedError: If the FETCH does not complete with OK
        """
        try:
            tag, frame = await self._fetch_frame(message_num, field.section)
        except LiteralNotFoundError as e:
            raise FieldNotFoundError(
                f"{field.value} response not found",
                details={"message_num": message_num, "field": field.value},
            ) from e

        header = await extract_field(self.transport, frame, field)
        await self.session.finish(tag, f"fetch {field.value} field")
        return header

    async def fetch_header_fields(self, message_num: int) -> List[HeaderField]:
        """Fetch From, To, Date and Subject, one command each."""
        return [
            await self.fetch_header_field(message_num, field)
            for field in HEADER_FIELD_ORDER
        ]

    @async_log_call
    async def fetch_mime_text(self, message_num: int) -> MimeMessage:
        """Fetch the message and extract its text/plain alternative.

        Raises:
            MessageNotFoundError: If the server returns no message literal
            StructuralError: If the MIME structure is not as expected
        """
        message = await self.fetch_raw_message(message_num)
        return parse_mime(message)

    @async_log_call
    async def list_subjects(self) -> MailboxListing:
        """Fetch the subject of every message in the mailbox.

        An empty mailbox yields an empty listing; servers may reject the
        ``1:*`` range with NO or BAD in that case.

        Raises:
            CommandFailedError: If the FETCH fails after returning entries
        """
        tag = await self.session.send_command(Commands.LIST_SUBJECTS)
        response = await self.session.read_response(tag)
        listing = parse_subject_listing(response.data)

        if not response.ok and not listing.is_empty:
            raise CommandFailedError(
                "IMAP operation failed: list subjects",
                details={"tag": tag, "status": response.status, "response": response.text},
            )

        if listing.is_empty and not response.ok:
            logger.debug(
                "Subject fetch rejected, treating mailbox as empty",
                extra={"status": response.status},
            )

        logger.info("Listed mailbox", extra={"count": len(listing)})
        return listing
