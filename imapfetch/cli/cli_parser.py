"""Argument parser configuration for the imapfetch CLI"""

import argparse

from imapfetch import __version__

COMMANDS = ("retrieve", "parse", "mime", "list")


## Argument Adding Utilities

def add_account_arguments(parser: argparse.ArgumentParser) -> None:
    """Add login and mailbox arguments to the parser."""

    account_group = parser.add_argument_group("account", "Server login and mailbox")

    account_group.add_argument(
        "-u", "--username",
        help="IMAP username"
    )
    account_group.add_argument(
        "-p", "--password",
        help="IMAP password"
    )
    account_group.add_argument(
        "-f", "--folder",
        help="Folder to select (default: INBOX)"
    )
    account_group.add_argument(
        "-n", "--message-num",
        type=int,
        help="Message sequence number (default: 1)"
    )

def add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    """Add transport arguments to the parser."""

    connection_group = parser.add_argument_group("connection", "Transport settings")

    connection_group.add_argument(
        "-t", "--tls",
        action="store_true",
        default=None,
        help="Connect with TLS (port 993 unless --port is given)"
    )
    connection_group.add_argument(
        "--port",
        type=int,
        help="Server port (default: 143, or 993 with --tls)"
    )
    connection_group.add_argument(
        "--timeout",
        type=float,
        help="Network timeout in seconds, 0 to wait indefinitely (default: 30)"
    )


## Parser Setup

def setup_argument_parser() -> argparse.ArgumentParser:
    """Setup the main argument parser."""

    parser = argparse.ArgumentParser(
        prog="imapfetch",
        description="Retrieve a message, its headers, its text part or a subject listing from an IMAP mailbox",
    )

    add_account_arguments(parser)
    add_connection_arguments(parser)

    parser.add_argument(
        "-c", "--config",
        help="Path to a JSON config file (default: ~/.imapfetch/config.json)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log protocol activity to stderr"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "command",
        choices=COMMANDS,
        help="retrieve: raw message, parse: From/To/Date/Subject, "
             "mime: text/plain part, list: subjects of all messages"
    )
    parser.add_argument(
        "server",
        help="IMAP server host name or address"
    )

    return parser
