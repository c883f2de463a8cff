"""
Tests for IMAP connection establishment

Tests cover:
- Port selection
- IPv6 then IPv4 fallback
- Connection failure
- Closing
"""
import socket
from unittest.mock import AsyncMock, patch

import pytest

from imapfetch.core.imap.connection import IMAPConnection
from imapfetch.utils.config import AccountConfig
from imapfetch.utils.errors import ConnectionFailedError, ExitCode

from .test_helpers import FakeStreamWriter, TransportTestHelper


class TestPortSelection:
    """Tests for resolved ports"""

    def test_plain_default(self):
        """Test plain connections default to 143"""
        assert AccountConfig(server="h").resolved_port == 143

    def test_tls_default(self):
        """Test TLS connections default to 993"""
        assert AccountConfig(server="h", use_tls=True).resolved_port == 993

    def test_explicit_port(self):
        """Test an explicit port wins"""
        assert AccountConfig(server="h", use_tls=True, port=1993).resolved_port == 1993


class TestIMAPConnection:
    """Tests for IMAPConnection.open and close"""

    @pytest.mark.asyncio
    async def test_ipv6_first(self, account_config):
        """Test the first attempt uses IPv6"""
        streams = (TransportTestHelper.create_reader(), FakeStreamWriter())

        with patch(
            "imapfetch.core.imap.connection.asyncio.open_connection",
            new=AsyncMock(return_value=streams),
        ) as mock_open:
            connection = IMAPConnection(account_config)
            transport = await connection.open()

        assert transport is not None
        assert mock_open.await_count == 1
        assert mock_open.await_args.kwargs["family"] == socket.AF_INET6
        assert mock_open.await_args.args == ("imap.test.com", 143)
        assert mock_open.await_args.kwargs["ssl"] is None

    @pytest.mark.asyncio
    async def test_falls_back_to_ipv4(self, account_config):
        """Test IPv4 is tried when IPv6 fails"""
        streams = (TransportTestHelper.create_reader(), FakeStreamWriter())

        with patch(
            "imapfetch.core.imap.connection.asyncio.open_connection",
            new=AsyncMock(side_effect=[OSError("Network is unreachable"), streams]),
        ) as mock_open:
            transport = await IMAPConnection(account_config).open()

        assert transport is not None
        assert mock_open.await_count == 2
        assert mock_open.await_args.kwargs["family"] == socket.AF_INET

    @pytest.mark.asyncio
    async def test_both_families_fail(self, account_config):
        """Test a connection failure after both attempts"""
        with patch(
            "imapfetch.core.imap.connection.asyncio.open_connection",
            new=AsyncMock(side_effect=ConnectionRefusedError("refused")),
        ):
            with pytest.raises(ConnectionFailedError) as exc_info:
                await IMAPConnection(account_config).open()

        assert exc_info.value.exit_code == ExitCode.CONNECTION
        assert set(exc_info.value.details["errors"]) == {"AF_INET6", "AF_INET"}

    @pytest.mark.asyncio
    async def test_tls_uses_ssl_context(self, account_config):
        """Test TLS passes an SSL context and server name"""
        account = account_config.model_copy(update={"use_tls": True})
        streams = (TransportTestHelper.create_reader(), FakeStreamWriter())

        with patch(
            "imapfetch.core.imap.connection.asyncio.open_connection",
            new=AsyncMock(return_value=streams),
        ) as mock_open:
            await IMAPConnection(account).open()

        kwargs = mock_open.await_args.kwargs
        assert kwargs["ssl"] is not None
        assert kwargs["server_hostname"] == "imap.test.com"
        assert mock_open.await_args.args[1] == 993

    @pytest.mark.asyncio
    async def test_close(self, account_config):
        """Test close closes the writer and forgets the transport"""
        writer = FakeStreamWriter()

        with patch(
            "imapfetch.core.imap.connection.asyncio.open_connection",
            new=AsyncMock(return_value=(TransportTestHelper.create_reader(), writer)),
        ):
            async with IMAPConnection(account_config) as transport:
                assert transport is not None

        assert writer.closed

    @pytest.mark.asyncio
    async def test_close_without_open(self, account_config):
        """Test closing an unopened connection is a no-op"""
        connection = IMAPConnection(account_config)
        await connection.close()
