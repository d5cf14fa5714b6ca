"""Passive-mode data channel.

Each LIST/RETR/STOR gets its own data socket: PASV on the control
channel, a plain TCP connect to the advertised port, the transfer command,
and only then a TLS handshake on the data socket (the server starts its
handshake once it has accepted the command).
"""

import logging
import re
import socket
import ssl
from contextlib import contextmanager
from enum import Enum
from typing import BinaryIO, Callable, Iterator, List, Optional

from ftps_client.ftps import tls
from ftps_client.ftps.connection import ControlConnection
from ftps_client.ftps.exceptions import (
    CertificateError,
    FTPSConnectionError,
    FTPSError,
    PassiveReplyError,
    TransferIOError,
)
from ftps_client.ftps.protocol import PASSIVE_MODE, ExpectedCode

logger = logging.getLogger("ftps_client.data")

# h1,h2,h3,h4,p1,p2 anywhere in the reply, surrounding text ignored
_PASV_PATTERN = re.compile(r"(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")


class TransferMode(Enum):
    """Stream type of an open data channel."""
    BINARY = "binary"
    TEXT = "text"


def parse_pasv_reply(reply: str) -> int:
    """
    Extract the data port from a 227 reply.

    The four host octets are ignored; the control host is reused.

    Args:
        reply: e.g. "227 Entering Passive Mode (10,0,0,1,200,18)."

    Returns:
        Port number p1 * 256 + p2

    Raises:
        PassiveReplyError: If fewer than six numbers are present
    """
    match = _PASV_PATTERN.search(reply)
    if not match:
        raise PassiveReplyError(reply)
    p1, p2 = int(match.group(5)), int(match.group(6))
    port = (p1 << 8) + p2
    if not 0 < port <= 65535:
        raise PassiveReplyError(reply)
    return port


class DataChannel:
    """One data connection at a time, bound to a control connection."""

    # Block size for binary reads
    BLOCK_SIZE = 8192

    def __init__(self, control: ControlConnection):
        """
        Initialize the data channel.

        Args:
            control: Control connection used for PASV and transfer commands
        """
        self._control = control
        self._sock: Optional[socket.socket] = None
        self._reader: Optional[BinaryIO] = None
        self._writer: Optional[BinaryIO] = None
        self._mode: Optional[TransferMode] = None
        self._wrote = False

    @property
    def mode(self) -> Optional[TransferMode]:
        """Mode of the open channel, None when closed."""
        return self._mode

    @property
    def is_open(self) -> bool:
        """True while a transfer is in progress."""
        return self._mode is not None

    def open_transfer(self, binary: bool, command: str, expected_code: ExpectedCode) -> None:
        """
        Negotiate a passive data connection and start a transfer.

        Args:
            binary: BINARY byte streams if True, TEXT line streams otherwise
            command: Transfer command, e.g. "RETR /a.bin"
            expected_code: Reply required for the transfer command

        Raises:
            FTPSError: If a data channel is already open
            PassiveReplyError: If the PASV reply cannot be parsed
            UnexpectedStatusError: If PASV or the command is refused
            CertificateError: If the data channel certificate is rejected
            TransferIOError: If the data channel TLS handshake fails
            FTPSConnectionError: If the data socket cannot be opened
        """
        if self.is_open:
            raise FTPSError("A data channel is already open")

        control = self._control
        control.ensure_connected()
        config = control.config

        reply = control.send_command("PASV", PASSIVE_MODE)
        port = parse_pasv_reply(reply)
        logger.debug(f"Data port {port}")

        try:
            self._sock = socket.create_connection((config.host, port), timeout=config.timeout)
        except OSError as e:
            raise FTPSConnectionError(config.host, port, e)

        try:
            control.send_command(command, expected_code)
        except Exception:
            self.close_transfer()
            raise

        # The command was accepted, so a closing reply is owed from here on
        try:
            self._sock = tls.wrap_socket(
                self._sock,
                control.ssl_context,
                server_hostname=config.host,
                session=control.tls_session,
            )
        except CertificateError:
            self._abort()
            raise
        except OSError as e:
            logger.warning(f"Data channel handshake for '{command}' failed: {e}")
            self._abort()
            raise TransferIOError(command, e)

        self._reader = self._sock.makefile("rb")
        self._writer = self._sock.makefile("wb")
        self._mode = TransferMode.BINARY if binary else TransferMode.TEXT
        self._wrote = False

    def read(self, size: int = BLOCK_SIZE) -> bytes:
        """Read up to size bytes; b"" at end of stream."""
        self._require(TransferMode.BINARY)
        return self._reader.read(size)

    def write(self, data: bytes) -> None:
        """Write bytes to the data channel."""
        self._require(TransferMode.BINARY)
        self._wrote = True
        self._writer.write(data)

    def flush(self) -> None:
        """Flush buffered output."""
        if self._writer is not None:
            self._writer.flush()

    def lines(self) -> Iterator[str]:
        """
        Yield decoded lines until end of stream.

        Line terminators (CRLF or LF) are stripped.
        """
        self._require(TransferMode.TEXT)
        encoding = self._control.config.encoding
        for raw in self._reader:
            yield raw.decode(encoding, errors="replace").rstrip("\r\n")

    def close_transfer(self) -> None:
        """
        Close all data streams and the socket.

        Each close is attempted independently and its failure discarded,
        so an error already being raised is never replaced by a teardown
        error.
        """
        closers: List[Callable[[], object]] = []
        if self._writer is not None:
            closers.append(self._writer.close)
        if self._reader is not None:
            closers.append(self._reader.close)
        if self._sock is not None:
            if self._wrote and isinstance(self._sock, ssl.SSLSocket):
                closers.append(self._sock.unwrap)
            closers.append(self._sock.close)

        for close in closers:
            try:
                close()
            except (OSError, ValueError) as e:
                logger.debug(f"Ignoring error closing data channel: {e}")

        self._sock = None
        self._reader = None
        self._writer = None
        self._mode = None
        self._wrote = False
        logger.debug("Data channel closed")

    @contextmanager
    def transfer(self, binary: bool, command: str, expected_code: ExpectedCode) -> Iterator["DataChannel"]:
        """
        Open a transfer for the duration of a with-block.

        The channel is closed on exit whether or not the body raised. If
        the body raised, the server's closing reply is read and discarded
        so the control channel stays in step; OSError from the body is
        reported as TransferIOError.
        """
        self.open_transfer(binary, command, expected_code)
        try:
            yield self
            self.flush()
        except OSError as e:
            logger.warning(f"Transfer '{command}' failed: {e}")
            self._abort()
            raise TransferIOError(command, e)
        except Exception:
            self._abort()
            raise
        finally:
            self.close_transfer()

    def _abort(self) -> None:
        """Close the channel and consume the reply that ends the transfer."""
        self.close_transfer()
        try:
            reply = self._control.read_response()
            logger.debug(f"Discarded reply of aborted transfer: {reply}")
        except FTPSError as e:
            logger.debug(f"No closing reply after aborted transfer: {e}")

    def _require(self, mode: TransferMode) -> None:
        if self._mode != mode:
            raise FTPSError(f"Data channel is not open in {mode.value} mode")
