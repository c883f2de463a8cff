"""Byte transport over an asyncio stream pair."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from imapfetch.core.imap.constants import Limits
from imapfetch.utils.errors import NetworkTimeoutError, TransportError
from imapfetch.utils.logging import get_logger
from imapfetch.utils.text import CRLF

logger = get_logger(__name__)

T = TypeVar("T")


def _has_line(buffered: bytes) -> bool:
    return CRLF in buffered


class IMAPTransport:
    """Exact-length and line reads with a non-consuming peek.

    Bytes returned by ``peek`` stay in an internal buffer and are handed out
    again by the next ``read_exact``/``readline`` before the stream is read.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        timeout: Optional[float] = None,
    ):
        """Initialise the transport.

        Args:
            reader: Stream the server's bytes arrive on
            writer: Stream commands are written to
            timeout: Seconds to wait for any single read or write, None to
                wait indefinitely
        """
        self._reader = reader
        self._writer = writer
        self._buffer = bytearray()
        self.timeout = timeout

    async def _wait(self, awaitable: Awaitable[T], operation: str) -> T:
        if not self.timeout:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise NetworkTimeoutError(
                f"Timed out during {operation}",
                details={"operation": operation, "timeout": self.timeout},
            ) from e

    def _take(self, n: int) -> bytes:
        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data

    async def read_exact(self, n: int) -> bytes:
        """Read exactly n bytes, looping over short deliveries.

        Raises:
            TransportError: If the connection closes first
        """
        if n < 0:
            raise ValueError(f"Cannot read a negative byte count: {n}")

        if len(self._buffer) >= n:
            return self._take(n)

        head = self._take(len(self._buffer))
        remaining = n - len(head)

        try:
            tail = await self._wait(self._reader.readexactly(remaining), "read")
        except asyncio.IncompleteReadError as e:
            raise TransportError(
                "Connection closed before the expected bytes arrived",
                details={"expected": n, "received": len(head) + len(e.partial)},
            ) from e
        except (ConnectionError, OSError) as e:
            raise TransportError(f"Failed to receive data: {e}") from e

        return head + tail

    async def peek(
        self,
        max_bytes: int = Limits.PEEK_SIZE,
        stop: Optional[Callable[[bytes], bool]] = None,
    ) -> bytes:
        """Return up to max_bytes of pending data without consuming it.

        Reads until ``stop`` accepts the buffered bytes or max_bytes bytes are
        buffered. Without ``stop`` one full line is enough.

        Raises:
            TransportError: If the connection is closed with nothing pending
        """
        if stop is None:
            stop = _has_line

        while len(self._buffer) < max_bytes and not stop(bytes(self._buffer)):
            try:
                chunk = await self._wait(
                    self._reader.read(max_bytes - len(self._buffer)), "peek"
                )
            except (ConnectionError, OSError) as e:
                raise TransportError(f"Failed to receive data: {e}") from e

            if not chunk:
                break
            self._buffer.extend(chunk)

        if not self._buffer:
            raise TransportError("Connection closed by server")

        return bytes(self._buffer[:max_bytes])

    async def readline(self) -> bytes:
        """Read through the next CRLF, which is included in the result.

        Raises:
            TransportError: If the connection closes before a full line
        """
        index = self._buffer.find(CRLF)
        if index >= 0:
            return self._take(index + len(CRLF))

        head = self._take(len(self._buffer))

        # A CR held back at the end of the buffer may pair with an LF on the wire
        if head.endswith(b"\r"):
            head += await self.read_exact(1)
            if head.endswith(CRLF):
                return head

        try:
            tail = await self._wait(self._reader.readuntil(CRLF), "readline")
        except asyncio.IncompleteReadError as e:
            raise TransportError(
                "Connection closed in the middle of a response line",
                details={"partial": (head + e.partial)[:80]},
            ) from e
        except asyncio.LimitOverrunError as e:
            raise TransportError(
                "Response line exceeds the stream buffer limit"
            ) from e
        except (ConnectionError, OSError) as e:
            raise TransportError(f"Failed to receive data: {e}") from e

        return head + tail

    async def send(self, data: bytes) -> None:
        """Write data and wait for it to be flushed.

        Raises:
            TransportError: If the write fails
        """
        try:
            self._writer.write(data)
            await self._wait(self._writer.drain(), "send")
        except (ConnectionError, OSError) as e:
            raise TransportError(f"Failed to send data: {e}") from e

    async def close(self) -> None:
        """Close the underlying stream."""
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Error while closing connection: {e}")
