"""Pytest configuration and shared fixtures for FTPS client tests."""

import pytest
from pathlib import Path
from typing import Generator
from unittest.mock import patch

from ftps_client.ftps.connection import FTPSConnectionConfig

from tests.fakes import FakeNetwork


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "s3cret-pass"


@pytest.fixture
def ftps_config() -> FTPSConnectionConfig:
    """Connection config pointing at the fake server."""
    return FTPSConnectionConfig(
        host=TEST_FTP_HOST,
        username=TEST_FTP_USER,
        password=TEST_FTP_PASS,
    )


@pytest.fixture
def fake_network() -> Generator[FakeNetwork, None, None]:
    """Route socket connects and TLS handshakes to scripted fakes."""
    network = FakeNetwork()
    with patch("socket.create_connection", side_effect=network.create_connection), \
            patch("ftps_client.ftps.tls.wrap_socket", side_effect=network.wrap_socket):
        yield network


@pytest.fixture
def fixtures_path() -> Path:
    """Return the path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Path:
    """Provide a temporary settings file path for testing."""
    return tmp_path / "settings.json"
