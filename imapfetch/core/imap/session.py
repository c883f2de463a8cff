"""IMAP session - tag generation and tagged command/response exchange."""

import re
from typing import Optional

from imapfetch.core.imap.constants import Commands, IMAPResponse
from imapfetch.core.imap.transport import IMAPTransport
from imapfetch.core.models import TaggedResponse
from imapfetch.utils.errors import (
    CommandFailedError,
    FolderNotFoundError,
    GreetingError,
    LiteralTooLargeError,
    LoginError,
)
from imapfetch.utils.logging import async_log_call, get_logger
from imapfetch.utils.text import decode_text, quote_imap_string

logger = get_logger(__name__)

# A response line that announces a literal ends with {N}CRLF
_LITERAL_SUFFIX = re.compile(rb"\{(\d+)\}\r\n\Z")


class IMAPSession:
    """One authenticated conversation over a transport."""

    def __init__(
        self, transport: IMAPTransport, max_literal_size: Optional[int] = None
    ):
        """Initialise the session.

        Args:
            transport: Connected transport, borrowed for the session's lifetime
            max_literal_size: Largest literal accepted while reading a
                response, None for no limit
        """
        self.transport = transport
        self.max_literal_size = max_literal_size
        self._tag_counter = 1

    def next_tag(self) -> str:
        """Return the next command tag (``A0001``, ``A0002``, ...)."""
        tag = f"A{self._tag_counter:04d}"
        self._tag_counter += 1
        return tag

    def check_literal_size(self, length: int) -> None:
        """Raise if an announced literal is larger than the configured limit."""
        if self.max_literal_size is not None and length > self.max_literal_size:
            raise LiteralTooLargeError(
                f"Server announced a {length} byte literal",
                details={"length": length, "limit": self.max_literal_size},
            )

    async def send_command(self, command: str, sensitive: bool = False) -> str:
        """Tag and send a command.

        Args:
            command: Command text without tag or line terminator
            sensitive: Keep the command arguments out of the logs

        Returns:
            The tag the command was sent with
        """
        tag = self.next_tag()
        logged = command.split(" ", 1)[0] + " [REDACTED]" if sensitive else command
        logger.debug("Sending IMAP command", extra={"tag": tag, "command": logged})

        await self.transport.send(f"{tag} {command}\r\n".encode("utf-8"))
        return tag

    async def read_response(self, tag: str) -> TaggedResponse:
        """Read lines up to and including the tagged completion line.

        The payload of any line that announces a literal is read by length,
        so CRLFs inside it are never taken as line ends.
        """
        data = bytearray()
        prefix = f"{tag} ".encode("ascii")

        while True:
            line = await self.transport.readline()

            if line.startswith(prefix):
                status, _, text = decode_text(line[len(prefix):]).strip().partition(" ")
                response = TaggedResponse(
                    tag=tag, status=status.upper(), text=text, data=bytes(data)
                )
                logger.debug(
                    "Command completed",
                    extra={"tag": tag, "status": response.status, "bytes": len(data)},
                )
                return response

            data.extend(line)

            match = _LITERAL_SUFFIX.search(line)
            if match:
                length = int(match.group(1))
                self.check_literal_size(length)
                data.extend(await self.transport.read_exact(length))

    async def finish(self, tag: str, operation: str) -> TaggedResponse:
        """Drain the rest of a response and require an OK completion.

        Raises:
            CommandFailedError: If the command completed with NO or BAD
        """
        response = await self.read_response(tag)
        if not response.ok:
            raise CommandFailedError(
                f"IMAP operation failed: {operation}",
                details={"tag": tag, "status": response.status, "response": response.text},
            )
        return response

    ## Session Setup

    async def check_greeting(self) -> None:
        """Require an untagged OK greeting from the server.

        Raises:
            GreetingError: If the server greets with anything else
        """
        line = await self.transport.readline()
        if not line.startswith(IMAPResponse.GREETING):
            raise GreetingError(
                "Connect failure",
                details={"greeting": decode_text(line).strip()},
            )
        logger.debug("Server greeting received", extra={"greeting": decode_text(line).strip()})

    @async_log_call
    async def login(self, username: str, password: str) -> None:
        """Authenticate with LOGIN.

        Raises:
            LoginError: If the server rejects the credentials
        """
        command = Commands.LOGIN.format(
            username=quote_imap_string(username),
            password=quote_imap_string(password),
        )
        tag = await self.send_command(command, sensitive=True)
        response = await self.read_response(tag)

        if not response.ok:
            raise LoginError(
                "Login failure",
                details={"username": username, "status": response.status},
            )
        logger.info("Logged in", extra={"username": username})

    @async_log_call
    async def select(self, folder: str) -> None:
        """Select the mailbox all later commands operate on.

        Raises:
            FolderNotFoundError: If the server rejects the folder
        """
        tag = await self.send_command(
            Commands.SELECT.format(folder=quote_imap_string(folder))
        )
        response = await self.read_response(tag)

        if not response.ok:
            raise FolderNotFoundError(
                "Folder not found",
                details={"folder": folder, "status": response.status},
            )
        logger.debug(f"Selected IMAP folder: {folder}")

    async def logout(self) -> None:
        """Send LOGOUT and read its completion."""
        tag = await self.send_command(Commands.LOGOUT)
        response = await self.read_response(tag)
        logger.debug("Logged out", extra={"status": response.status})
