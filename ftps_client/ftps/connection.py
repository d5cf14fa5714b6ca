"""FTPS control connection management.

Provides ConnectionState enum, FTPSConnectionConfig dataclass,
and ControlConnection, which lazily connects, upgrades to TLS and logs in
the first time a command needs the control channel.
"""

import logging
import socket
import ssl
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ftps_client.ftps import tls
from ftps_client.ftps.exceptions import CertificateError, ConfigurationError, FTPSConnectionError
from ftps_client.ftps.protocol import (
    AUTH_OK,
    COMMAND_OK,
    LOGGED_IN,
    SERVICE_READY,
    USER_OK,
    ControlStream,
    ExpectedCode,
)
from ftps_client.ftps.tls import TrustMode
from ftps_client.utils.validators import validate_host, validate_port

logger = logging.getLogger("ftps_client.connection")

DEFAULT_PORT = 21
PASSWORD_PLACEHOLDER = "****"


class ConnectionState(Enum):
    """Control channel state."""
    DISCONNECTED = "disconnected"
    PLAINTEXT_CONNECTED = "plaintext_connected"
    TLS_AUTHENTICATED = "tls_authenticated"


@dataclass(frozen=True)
class FTPSConnectionConfig:
    """FTPS connection configuration."""
    host: str
    port: Optional[Union[int, str]] = None
    username: str = ""
    password: str = field(default="", repr=False)
    trust_mode: TrustMode = TrustMode.VERIFY
    ca_file: Optional[str] = None
    timeout: Optional[float] = None
    encoding: str = "utf-8"

    def __post_init__(self):
        """Validate configuration and normalise host and port."""
        is_valid, error = validate_host(self.host)
        if not is_valid:
            raise ConfigurationError(error)
        object.__setattr__(self, "host", self.host.strip())

        port = self.port
        if port is None or (isinstance(port, str) and not port.strip()):
            port = DEFAULT_PORT
        is_valid, error = validate_port(port)
        if not is_valid:
            raise ConfigurationError(error)
        object.__setattr__(self, "port", int(port))

        if not self.username:
            raise ConfigurationError("Username is required")
        if not self.password:
            raise ConfigurationError("Password is required")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")

        if self.trust_mode == TrustMode.TRUST_ALL:
            logger.warning(
                f"Certificate verification disabled for {self.host}; "
                "any server certificate will be accepted"
            )


class ControlConnection:
    """Owns the control socket and its authentication state."""

    def __init__(self, config: FTPSConnectionConfig):
        """
        Initialize without connecting.

        Args:
            config: Connection configuration
        """
        self._config = config
        self._context: ssl.SSLContext = tls.create_context(config.trust_mode, config.ca_file)
        self._sock: Optional[socket.socket] = None
        self._stream: Optional[ControlStream] = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def config(self) -> FTPSConnectionConfig:
        """Connection configuration."""
        return self._config

    @property
    def state(self) -> ConnectionState:
        """Current control channel state."""
        return self._state

    @property
    def ssl_context(self) -> ssl.SSLContext:
        """SSL context shared with data channels."""
        return self._context

    @property
    def tls_session(self) -> Optional[ssl.SSLSession]:
        """TLS session of the control channel, for data channel resumption."""
        if isinstance(self._sock, ssl.SSLSocket):
            return self._sock.session
        return None

    @property
    def is_alive(self) -> bool:
        """True if the control socket exists and has not been closed."""
        return self._sock is not None and self._sock.fileno() != -1

    @property
    def is_authenticated(self) -> bool:
        """True if logged in over TLS on a live socket."""
        return self._state == ConnectionState.TLS_AUTHENTICATED and self.is_alive

    def ensure_connected(self) -> None:
        """
        Connect, upgrade to TLS and log in, unless already done.

        Raises:
            FTPSConnectionError: If the socket cannot be opened
            CertificateError: If the server certificate is rejected
            UnexpectedStatusError: If any step gets the wrong reply
        """
        if self.is_authenticated:
            return

        if self._sock is not None:
            # Stale or half-negotiated connection
            self.close()

        config = self._config
        logger.debug(f"Opening control connection to {config.host}:{config.port}")
        try:
            sock = socket.create_connection((config.host, config.port), timeout=config.timeout)
        except OSError as e:
            raise FTPSConnectionError(config.host, config.port, e)

        self._attach(sock)
        self._state = ConnectionState.PLAINTEXT_CONNECTED

        try:
            self._negotiate()
        except CertificateError:
            self._drop()
            raise
        except OSError as e:
            self._drop()
            raise FTPSConnectionError(config.host, config.port, e)

        self._state = ConnectionState.TLS_AUTHENTICATED
        logger.info(f"Logged in to {config.host}:{config.port} as {config.username}")

    def _negotiate(self) -> None:
        """Greeting, TLS upgrade and login on a freshly opened socket."""
        config = self._config
        self._stream.read_response(SERVICE_READY)
        self._stream.exchange("AUTH TLS", AUTH_OK)

        # Upgrade in place; the plaintext stream must not be used afterwards
        self._stream.close()
        tls_sock = tls.wrap_socket(self._sock, self._context, server_hostname=config.host)
        self._attach(tls_sock)

        self._stream.exchange("PBSZ 0", COMMAND_OK)
        self._stream.exchange("PROT P", COMMAND_OK)
        self._stream.exchange(f"USER {config.username}", USER_OK)
        self._stream.exchange(
            f"PASS {config.password}",
            LOGGED_IN,
            log_as=f"PASS {PASSWORD_PLACEHOLDER}",
        )
        # Servers without UTF-8 support reject this; the reply is ignored
        self._stream.exchange("OPTS UTF8 ON")
        self._stream.exchange("TYPE I", COMMAND_OK)

    def send_command(
        self,
        command: str,
        expected_code: ExpectedCode = None,
        log_as: Optional[str] = None
    ) -> str:
        """
        Send a command over the authenticated control channel.

        Args:
            command: Command line, e.g. "CWD /pub"
            expected_code: Required status prefix (None accepts any reply)
            log_as: Replacement text for diagnostics

        Returns:
            The reply line

        Raises:
            UnexpectedStatusError: If the reply does not match
            FTPSConnectionError: If the connection drops
        """
        self.ensure_connected()
        try:
            return self._stream.exchange(command, expected_code, log_as)
        except OSError as e:
            self._drop()
            raise FTPSConnectionError(self._config.host, self._config.port, e)

    def read_response(self, expected_code: ExpectedCode = None) -> str:
        """
        Read a reply without sending a command (e.g. 226 after a transfer).

        Raises:
            UnexpectedStatusError: If the reply does not match
            FTPSConnectionError: If not connected or the connection drops
        """
        if self._stream is None:
            raise FTPSConnectionError(
                self._config.host,
                self._config.port,
                ConnectionError("Control connection is not open"),
            )
        try:
            return self._stream.read_response(expected_code)
        except OSError as e:
            self._drop()
            raise FTPSConnectionError(self._config.host, self._config.port, e)

    def close(self) -> None:
        """Send QUIT if possible, then close everything."""
        if self._stream is not None and self.is_alive:
            try:
                self._stream.exchange("QUIT")
            except (OSError, ValueError) as e:
                logger.debug(f"QUIT failed: {e}")
        self._drop()
        logger.debug("Control connection closed")

    def _attach(self, sock: socket.socket) -> None:
        self._sock = sock
        self._stream = ControlStream(sock, self._config.encoding)

    def _drop(self) -> None:
        """Close stream and socket without talking to the server."""
        if self._stream is not None:
            self._stream.close()
        if self._sock is not None:
            try:
                self._sock.close()
            except OSError as e:
                logger.debug(f"Ignoring error closing control socket: {e}")
        self._stream = None
        self._sock = None
        self._state = ConnectionState.DISCONNECTED
