from .mailbox import MailboxEntry, MailboxListing
from .message import (
    NO_SUBJECT,
    FieldName,
    HeaderField,
    MimeMessage,
    MimePart,
    TransferEncoding,
)
from .response import LiteralFrame, TaggedResponse

__all__ = [
    "NO_SUBJECT",
    "FieldName",
    "HeaderField",
    "LiteralFrame",
    "MailboxEntry",
    "MailboxListing",
    "MimeMessage",
    "MimePart",
    "TaggedResponse",
    "TransferEncoding",
]
