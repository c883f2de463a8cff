"""
Test helper functions and utilities for reducing duplicate code across test modules
"""
import asyncio
from typing import List, Optional

from imapfetch.core.imap.transport import IMAPTransport


class FakeStreamWriter:
    """Stands in for asyncio.StreamWriter and records everything written"""

    def __init__(self):
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.data.extend(data)

    async def drain(self) -> None:
        return None

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None

    @property
    def commands(self) -> List[bytes]:
        """Command lines sent so far, without their CRLF"""
        return [line for line in bytes(self.data).split(b"\r\n") if line]


class TransportTestHelper:
    """Helper methods for building transports over scripted server bytes"""

    @staticmethod
    def create_reader(*chunks: bytes, eof: bool = True) -> asyncio.StreamReader:
        """Create a StreamReader pre-fed with chunks (call inside a running loop)"""
        reader = asyncio.StreamReader()
        for chunk in chunks:
            reader.feed_data(chunk)
        if eof:
            reader.feed_eof()
        return reader

    @staticmethod
    def create_transport(
        *chunks: bytes, eof: bool = True, timeout: Optional[float] = None
    ) -> IMAPTransport:
        """Create a transport whose server side has already sent chunks"""
        reader = TransportTestHelper.create_reader(*chunks, eof=eof)
        return IMAPTransport(reader, FakeStreamWriter(), timeout=timeout)

    @staticmethod
    def feed_later(reader: asyncio.StreamReader, delay: float, chunk: bytes, eof: bool = False) -> None:
        """Deliver a chunk after a delay, to exercise short reads"""
        loop = asyncio.get_running_loop()
        loop.call_later(delay, reader.feed_data, chunk)
        if eof:
            loop.call_later(delay, reader.feed_eof)


class IMAPTestHelper:
    """Helper methods for building IMAP server responses"""

    GREETING = b"* OK IMAP4rev1 Service Ready\r\n"

    @staticmethod
    def tagged(tag: str, status: str = "OK", text: str = "completed") -> bytes:
        return f"{tag} {status} {text}\r\n".encode("ascii")

    @staticmethod
    def fetch_response(
        tag: str, literal: bytes, section: str = "", sequence: int = 1, status: str = "OK"
    ) -> bytes:
        """Single-section FETCH response: status line, literal, closing paren, tagged line"""
        return (
            f"* {sequence} FETCH (BODY[{section}] {{{len(literal)}}}\r\n".encode("ascii")
            + literal
            + b")\r\n"
            + IMAPTestHelper.tagged(tag, status, "FETCH completed")
        )

    @staticmethod
    def field_literal(name: str, value: Optional[str]) -> bytes:
        """HEADER.FIELDS literal; None gives the literal of an absent field"""
        if value is None:
            return b"\r\n"
        return f"{name}: {value}\r\n\r\n".encode("utf-8")

    @staticmethod
    def subject_entry(sequence: int, subject: Optional[str]) -> bytes:
        """One untagged entry of a FETCH 1:* subject listing"""
        literal = IMAPTestHelper.field_literal("Subject", subject)
        return (
            f"* {sequence} FETCH (BODY[HEADER.FIELDS (SUBJECT)] {{{len(literal)}}}\r\n".encode("ascii")
            + literal
            + b")\r\n"
        )

    @staticmethod
    def session_preamble() -> bytes:
        """Greeting plus OK completions for LOGIN (A0001) and SELECT (A0002)"""
        return (
            IMAPTestHelper.GREETING
            + IMAPTestHelper.tagged("A0001", "OK", "LOGIN completed")
            + b"* 2 EXISTS\r\n* 0 RECENT\r\n"
            + IMAPTestHelper.tagged("A0002", "OK", "[READ-WRITE] SELECT completed")
        )


class MimeTestHelper:
    """Helper methods for building multipart/alternative messages"""

    @staticmethod
    def plain_part(
        text: str = "Hello",
        encoding: Optional[str] = "7bit",
        encoding_first: bool = False,
    ) -> str:
        content_type = "Content-Type: text/plain; charset=UTF-8\r\n"
        transfer = f"Content-Transfer-Encoding: {encoding}\r\n" if encoding else ""
        headers = transfer + content_type if encoding_first else content_type + transfer
        return headers + "\r\n" + text

    @staticmethod
    def html_part(html: str = "<p>Hello</p>") -> str:
        return (
            "Content-Type: text/html; charset=UTF-8\r\n"
            "Content-Transfer-Encoding: 7bit\r\n"
            "\r\n" + html
        )

    @staticmethod
    def create_message(
        parts: Optional[List[str]] = None,
        boundary: str = "b1",
        quoted: bool = True,
        version: bool = True,
        content_type: str = "multipart/alternative;",
        terminate: bool = True,
    ) -> bytes:
        """Build a message; parts default to a single text/plain part"""
        if parts is None:
            parts = [MimeTestHelper.plain_part()]

        param = f'"{boundary}"' if quoted else boundary
        headers = "From: alice@example.com\r\n"
        if version:
            headers += "MIME-Version: 1.0\r\n"
        headers += f"Content-Type: {content_type} boundary={param}\r\n\r\n"

        body = "".join(f"--{boundary}\r\n{part}\r\n" for part in parts)
        if terminate:
            body += f"--{boundary}--\r\n"
        else:
            body = body[: -len("\r\n")]

        return (headers + body).encode("utf-8")
