"""IMAP constants and configuration values."""


class IMAPResponse:
    """Untagged response markers."""

    GREETING = b"* OK"


class Timeouts:
    """Timeout values for IMAP operations (in seconds)."""

    IMAP_CONNECT = 30.0  # TCP connect + TLS handshake, per address family
    IMAP_CLOSE = 5.0  # LOGOUT and socket close


class Limits:
    """Buffer sizes used when framing responses."""

    PEEK_SIZE = 1024  # Prefix inspected for the FETCH literal announcement
    BLANK_FIELD_LENGTH = 2  # Literal of a present-but-empty header field
    FIELD_TERMINATOR_LENGTH = 2  # CRLF ending the field line inside the literal
    BODY_SEPARATOR_LENGTH = 4  # CRLFCRLF between part headers and part body


class Commands:
    """Command templates, sent after the tag."""

    LOGIN = "LOGIN {username} {password}"
    SELECT = "SELECT {folder}"
    FETCH_SECTION = "FETCH {message_num} BODY.PEEK[{section}]"
    LIST_SUBJECTS = "FETCH 1:* (BODY.PEEK[HEADER.FIELDS (SUBJECT)])"
    LOGOUT = "LOGOUT"
