"""Command/response exchange on the FTPS control channel.

ControlStream writes CRLF-terminated commands and reads replies, checking
each reply against the status code the caller expects.
"""

import logging
import re
import socket
from typing import BinaryIO, Optional, Tuple, Union

from ftps_client.ftps.exceptions import UnexpectedStatusError

logger = logging.getLogger("ftps_client.protocol")


# Status codes (RFC 959, RFC 4217)
SERVICE_READY = "220"
AUTH_OK = "234"
COMMAND_OK = "200"
USER_OK = "331"
LOGGED_IN = "230"
PASSIVE_MODE = "227"
PATHNAME_CREATED = "257"
FILE_ACTION_OK = "250"
PENDING_FURTHER_INFO = "350"
TRANSFER_COMPLETE = "226"
# Preliminary reply before a data transfer; servers differ on which one they send
TRANSFER_STARTING = ("150", "125")

CRLF = "\r\n"

ExpectedCode = Union[str, Tuple[str, ...], None]

_MULTILINE_START = re.compile(r"^(\d{3})-")


class ControlStream:
    """Line-oriented reader/writer over a control socket."""

    def __init__(self, sock: socket.socket, encoding: str = "utf-8"):
        """
        Wrap a connected socket.

        Args:
            sock: Connected (plain or TLS) control socket
            encoding: Text encoding for commands and replies
        """
        self._encoding = encoding
        self._reader: BinaryIO = sock.makefile("rb")
        self._writer: BinaryIO = sock.makefile("wb")

    def send(self, command: str, log_as: Optional[str] = None) -> None:
        """
        Write one command followed by CRLF and flush.

        Args:
            command: Command line without terminator
            log_as: Text recorded in diagnostics instead of the command
        """
        logger.debug(f">>> {log_as if log_as is not None else command}")
        self._writer.write((command + CRLF).encode(self._encoding))
        self._writer.flush()

    def read_response(self, expected_code: ExpectedCode = None) -> str:
        """
        Read one reply and check its status code.

        A multi-line reply ("123-..." up to "123 ...") is consumed whole;
        its first line is returned.

        Args:
            expected_code: Required status prefix, a tuple of accepted
                prefixes, or None to accept anything

        Returns:
            The reply line

        Raises:
            UnexpectedStatusError: If the reply does not match
            ConnectionResetError: If the server closed the connection
        """
        response = self._read_line()
        logger.debug(f"<<< {response}")

        match = _MULTILINE_START.match(response)
        if match:
            terminator = match.group(1) + " "
            while True:
                line = self._read_line()
                logger.debug(f"<<< {line}")
                if line.startswith(terminator):
                    break

        if expected_code is None or response.startswith(expected_code):
            return response
        raise UnexpectedStatusError(expected_code, response)

    def exchange(
        self,
        command: str,
        expected_code: ExpectedCode = None,
        log_as: Optional[str] = None
    ) -> str:
        """Send a command and read its reply."""
        self.send(command, log_as)
        return self.read_response(expected_code)

    def _read_line(self) -> str:
        raw = self._reader.readline()
        if not raw:
            raise ConnectionResetError("Control connection closed by server")
        return raw.decode(self._encoding, errors="replace").rstrip("\r\n")

    def close(self) -> None:
        """Close reader and writer, ignoring individual failures."""
        for stream in (self._writer, self._reader):
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"Ignoring error closing control stream: {e}")
