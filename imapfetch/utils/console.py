"""Centralised console management module"""

import sys
from typing import BinaryIO, Optional

from rich.console import Console
from rich.markup import escape

_console: Optional[Console] = None


def get_console() -> Console:
    """Get the shared stderr Console instance used for status and errors"""
    global _console

    if _console is None:
        _console = Console(stderr=True)

    return _console


def reset_console() -> None:
    """Reset the shared Console instance (for testing purposes)"""
    global _console
    _console = None


## Convenience Print Functions

def print_error(message: str, console: Optional[Console] = None) -> None:
    """Print an error message to the console"""
    output_console = console or get_console()
    output_console.print(f"[red]{escape(message)}[/]", markup=True, highlight=False)

def print_warning(message: str, console: Optional[Console] = None) -> None:
    """Print a warning message to the console"""
    output_console = console or get_console()
    output_console.print(f"[yellow]{escape(message)}[/]", markup=True, highlight=False)


## Raw Output

def write_output(data: bytes | str, stream: Optional[BinaryIO] = None) -> None:
    """Write message content to stdout byte-for-byte.

    Rich rewrites control characters such as CR, so retrieved message data
    bypasses the console and goes straight to the binary stream.
    """
    out = stream if stream is not None else sys.stdout.buffer
    if isinstance(data, str):
        data = data.encode("utf-8", errors="replace")
    out.write(data)
    out.flush()
