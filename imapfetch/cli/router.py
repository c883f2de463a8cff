"""Routes CLI commands to protocol operations and renders their output."""

from typing import Awaitable, Callable, Dict, Optional

from rich.console import Console

from imapfetch.core.imap.protocol import IMAPProtocol
from imapfetch.utils.console import get_console, print_warning, write_output
from imapfetch.utils.errors import ExitCode, ValidationError
from imapfetch.utils.logging import async_log_call, get_logger

logger = get_logger(__name__)


class CommandRouter:
    """Routes commands to the matching retrieval operation."""

    def __init__(self, protocol: IMAPProtocol, console: Optional[Console] = None, stream=None):
        """Initialise the router.

        Args:
            protocol: Protocol bound to a selected mailbox
            console: Console for status messages (stderr)
            stream: Binary stream for message output, stdout by default
        """
        self.protocol = protocol
        self.console = console or get_console()
        self.stream = stream

    @async_log_call
    async def route(self, command: str, message_num: int) -> ExitCode:
        """Run a command and write its output.

        Args:
            command: One of retrieve, parse, mime, list
            message_num: Message sequence number (ignored by list)

        Returns:
            Exit code for the process

        Raises:
            ValidationError: If command is unknown
        """
        handler = self._get_handler(command)
        if handler is None:
            raise ValidationError(f"Unknown command: {command}", details={"command": command})

        return await handler(message_num)

    def _get_handler(self, command: str) -> Optional[Callable[[int], Awaitable[ExitCode]]]:
        handlers: Dict[str, Callable[[int], Awaitable[ExitCode]]] = {
            "retrieve": self._handle_retrieve,
            "parse": self._handle_parse,
            "mime": self._handle_mime,
            "list": self._handle_list,
        }
        return handlers.get(command)

    def _write(self, data: bytes | str) -> None:
        write_output(data, self.stream)

    async def _handle_retrieve(self, message_num: int) -> ExitCode:
        message = await self.protocol.fetch_raw_message(message_num)
        self._write(message if message.endswith(b"\n") else message + b"\n")
        return ExitCode.SUCCESS

    async def _handle_parse(self, message_num: int) -> ExitCode:
        for header in await self.protocol.fetch_header_fields(message_num):
            self._write(header.render() + "\n")
        return ExitCode.SUCCESS

    async def _handle_mime(self, message_num: int) -> ExitCode:
        message = await self.protocol.fetch_mime_text(message_num)
        self._write(message.plain_text.text)
        return ExitCode.SUCCESS

    async def _handle_list(self, message_num: int) -> ExitCode:
        listing = await self.protocol.list_subjects()
        if listing.is_empty:
            print_warning("Mailbox is empty", self.console)
            return ExitCode.SUCCESS

        self._write("".join(line + "\n" for line in listing.lines()))
        return ExitCode.SUCCESS
