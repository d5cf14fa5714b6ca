"""Mock FTPS server for integration testing.

Uses pyftpdlib's TLS_FTPHandler (which needs pyOpenSSL) to run an
explicit-TLS server on a free local port, serving a temporary directory.
"""

import tempfile
import threading
import time
from pathlib import Path
from typing import Optional

import pytest

pytest.importorskip("OpenSSL")

from pyftpdlib.authorizers import DummyAuthorizer
from pyftpdlib.handlers import TLS_FTPHandler
from pyftpdlib.servers import FTPServer

CERT_FILE = Path(__file__).parent.parent / "fixtures" / "keycert.pem"


class MockFTPSServer:
    """
    Explicit-TLS FTP server backed by a temporary directory.

    Usage:
        with MockFTPSServer() as server:
            # Connect to server.host:server.port
            # server.root_dir contains the served filesystem
            pass
    """

    DEFAULT_USER = "testuser"
    DEFAULT_PASS = "testpass"

    def __init__(self, username: str = DEFAULT_USER, password: str = DEFAULT_PASS):
        """
        Initialize the mock FTPS server.

        Args:
            username: FTP username
            password: FTP password
        """
        self.username = username
        self.password = password

        self._server: Optional[FTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self._temp_dir: Optional[tempfile.TemporaryDirectory] = None
        self._root_dir: Optional[Path] = None

    @property
    def root_dir(self) -> Path:
        """Root directory of the served filesystem."""
        if self._root_dir is None:
            raise RuntimeError("Server not started")
        return self._root_dir

    @property
    def host(self) -> str:
        """Server host address."""
        return "127.0.0.1"

    @property
    def port(self) -> int:
        """Port picked by the OS at start."""
        if self._server is None:
            raise RuntimeError("Server not started")
        return self._server.address[1]

    def local_path(self, remote_path: str) -> Path:
        """Map a server path to the file on disk."""
        return self.root_dir / remote_path.lstrip("/")

    def start(self) -> None:
        """Start the FTPS server in a background thread."""
        self._temp_dir = tempfile.TemporaryDirectory(prefix="mock_ftps_")
        self._root_dir = Path(self._temp_dir.name)

        authorizer = DummyAuthorizer()
        authorizer.add_user(
            self.username,
            self.password,
            str(self._root_dir),
            perm="elradfmwMT"
        )

        # Fresh subclass so class attributes do not leak between servers
        handler = type("MockTLSHandler", (TLS_FTPHandler,), {})
        handler.authorizer = authorizer
        handler.certfile = str(CERT_FILE)
        handler.tls_control_required = True
        handler.tls_data_required = True
        handler.auth_failed_timeout = 0.1

        # Port 0: let the OS choose
        self._server = FTPServer((self.host, 0), handler)

        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"timeout": 0.1},
            daemon=True,
        )
        self._thread.start()

        # Give server time to start
        time.sleep(0.2)

    def stop(self) -> None:
        """Stop the server and clean up."""
        if self._server:
            self._server.close_all()
        if self._thread:
            self._thread.join(timeout=2)

        if self._temp_dir:
            self._temp_dir.cleanup()

        self._server = None
        self._thread = None
        self._temp_dir = None
        self._root_dir = None

    def __enter__(self) -> "MockFTPSServer":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.stop()
