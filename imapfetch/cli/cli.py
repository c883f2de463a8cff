"""Main CLI entry point."""

import argparse
import asyncio
from typing import List, Optional

from rich.console import Console

from imapfetch.core.imap.connection import IMAPConnection
from imapfetch.core.imap.protocol import IMAPProtocol
from imapfetch.core.imap.session import IMAPSession
from imapfetch.utils.config import AppConfig, ConfigManager
from imapfetch.utils.console import get_console, print_error
from imapfetch.utils.errors import (
    ErrorHandler,
    ExitCode,
    ImapFetchError,
    MissingCredentialsError,
    exit_code_for,
    format_error_message,
)
from imapfetch.utils.logging import async_log_call, get_logger, init_logging

from .cli_parser import setup_argument_parser
from .router import CommandRouter

logger = get_logger(__name__)

# Flag name -> config key it overrides
CLI_OVERRIDES = {
    "server": "account.server",
    "username": "account.username",
    "password": "account.password",
    "folder": "account.folder",
    "message_num": "account.message_num",
    "tls": "account.use_tls",
    "port": "account.port",
    "timeout": "account.network_timeout",
}


def load_config(args: argparse.Namespace) -> AppConfig:
    """Load the config file and apply command line overrides.

    Raises:
        ConfigurationError: If the file or an override is invalid
        MissingCredentialsError: If no username or password is available
    """
    manager = ConfigManager(args.config)

    for flag, key_path in CLI_OVERRIDES.items():
        value = getattr(args, flag, None)
        if value is not None:
            manager.set_config(key_path, value)

    account = manager.config.account
    if not account.username or not account.password:
        raise MissingCredentialsError(details={"server": account.server})

    return manager.config


def configure_logging(config: AppConfig, verbose: bool = False) -> None:
    """Initialise logging from the loaded settings."""
    settings = config.logging
    init_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
        max_file_size=settings.max_file_size,
        backup_count=settings.backup_count,
        force=True,
    )


@async_log_call
async def run_command(command: str, config: AppConfig, console: Console) -> int:
    """Connect, authenticate, select the folder and run one command.

    Args:
        command: One of retrieve, parse, mime, list
        config: Loaded configuration with CLI overrides applied
        console: Console for status messages

    Returns:
        Exit code
    """
    account = config.account

    async with IMAPConnection(account) as transport:
        session = IMAPSession(transport, max_literal_size=config.limits.max_literal_size)

        await session.check_greeting()
        await session.login(account.username, account.password)
        await session.select(account.folder)

        protocol = IMAPProtocol(session, peek_size=config.limits.peek_size)
        router = CommandRouter(protocol, console)
        exit_code = await router.route(command, account.message_num)

        try:
            await session.logout()
        except ImapFetchError as e:
            # Output is already written; a failed LOGOUT does not change the result
            logger.debug(f"Logout failed: {e}")

        return int(exit_code)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code
    """
    console = get_console()

    parser = setup_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
        configure_logging(config, args.verbose)

        return asyncio.run(run_command(args.command, config, console))

    except KeyboardInterrupt:
        print_error("Interrupted by user", console)
        return int(ExitCode.INTERRUPTED)

    except Exception as e:
        ErrorHandler.handle(e, context=f"imapfetch {args.command}")
        print_error(format_error_message(e), console)
        return int(exit_code_for(e))


if __name__ == "__main__":
    exit(main())
