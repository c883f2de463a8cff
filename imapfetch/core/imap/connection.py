"""IMAP connection management - handles connection setup and cleanup."""

import asyncio
import socket
import ssl
import time
from typing import Optional

from imapfetch.utils.config import AccountConfig
from imapfetch.utils.errors import ConnectionFailedError, NetworkTimeoutError
from imapfetch.utils.logging import async_log_call, get_logger

from .constants import Timeouts
from .transport import IMAPTransport

logger = get_logger(__name__)

# IPv6 first, then IPv4
ADDRESS_FAMILIES = (socket.AF_INET6, socket.AF_INET)


class IMAPConnection:
    """Manages an IMAP connection lifecycle."""

    def __init__(self, account: AccountConfig):
        """Initialize IMAP connection with account settings.

        Args:
            account: Account configuration (server, port, TLS, timeout)
        """
        self.account = account
        self._transport: Optional[IMAPTransport] = None

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        if not self.account.use_tls:
            return None
        return ssl.create_default_context()

    async def open(self) -> IMAPTransport:
        """Connect to the server, trying IPv6 before IPv4.

        Returns:
            Transport over the established connection

        Raises:
            ConnectionFailedError: If neither address family connects
        """
        host = self.account.server
        port = self.account.resolved_port
        ssl_context = self._ssl_context()
        start_time = time.time()
        errors = {}

        logger.info(
            "Connecting to IMAP server",
            extra={"server": host, "port": port, "use_tls": self.account.use_tls},
        )

        for family in ADDRESS_FAMILIES:
            try:
                reader, writer = await asyncio.wait_for(
                    asyncio.open_connection(
                        host,
                        port,
                        family=family,
                        ssl=ssl_context,
                        server_hostname=host if ssl_context else None,
                    ),
                    timeout=self.account.resolved_timeout or Timeouts.IMAP_CONNECT,
                )
            except (OSError, asyncio.TimeoutError, ssl.SSLError) as e:
                errors[family.name] = str(e) or e.__class__.__name__
                logger.debug(
                    f"Connection over {family.name} failed",
                    extra={"server": host, "error": str(e)},
                )
                continue

            self._transport = IMAPTransport(
                reader, writer, timeout=self.account.resolved_timeout
            )
            logger.info(
                "IMAP connection established",
                extra={
                    "server": host,
                    "family": family.name,
                    "duration_seconds": round(time.time() - start_time, 2),
                },
            )
            return self._transport

        raise ConnectionFailedError(
            "Failed to connect using both IPv6 and IPv4",
            details={"server": host, "port": port, "errors": errors},
        )

    @async_log_call
    async def close(self) -> None:
        """Close the IMAP connection."""
        if self._transport is None:
            return

        try:
            await asyncio.wait_for(self._transport.close(), timeout=Timeouts.IMAP_CLOSE)
            logger.debug("IMAP connection closed successfully")

        except (OSError, asyncio.TimeoutError, NetworkTimeoutError) as e:
            logger.debug(f"Error closing IMAP connection: {str(e)}")

        finally:
            self._transport = None

    ## Context Manager Helpers

    async def __aenter__(self) -> IMAPTransport:
        """Enter async context manager."""
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager."""
        await self.close()
