"""
Shared test fixtures and configuration for pytest
"""
import json

import pytest

from imapfetch.utils.config import AccountConfig
from imapfetch.utils.console import reset_console

from .test_helpers import FakeStreamWriter, TransportTestHelper


@pytest.fixture
def fake_writer():
    """Writer capturing the bytes a transport sends"""
    return FakeStreamWriter()


@pytest.fixture
def make_transport():
    """Factory for transports over scripted server bytes"""
    return TransportTestHelper.create_transport


@pytest.fixture
def account_config():
    """Account settings for a plain-text connection"""
    return AccountConfig(
        server="imap.test.com",
        username="alice",
        password="testpass",
    )


@pytest.fixture
def config_file(tmp_path):
    """Write a JSON config file and return its path"""

    def _write(data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def missing_config_path(tmp_path):
    """Config path that does not exist, so defaults are used"""
    return tmp_path / "absent" / "config.json"


@pytest.fixture(autouse=True)
def fresh_console():
    """Give every test its own stderr Console so captured streams are picked up"""
    reset_console()
    yield
    reset_console()
