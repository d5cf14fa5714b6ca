"""FTPS-specific exceptions.

Custom exception hierarchy for FTPS operations. Everything raised by the
client derives from FTPSError so callers can catch one type.
"""

from typing import Tuple, Union


class FTPSError(Exception):
    """Base exception for all FTPS-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class ConfigurationError(FTPSError, ValueError):
    """Invalid host, port or credentials supplied at construction."""


class FTPSConnectionError(FTPSError):
    """Failed to reach the server, or the control connection dropped."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Failed to connect to {host}:{port}"
        super().__init__(message, original_error)


class CertificateError(FTPSError):
    """Server certificate was rejected during the TLS handshake."""

    def __init__(self, host: str, original_error: Exception = None):
        self.host = host
        message = f"Certificate verification failed for '{host}'"
        super().__init__(message, original_error)


class UnexpectedStatusError(FTPSError):
    """Server replied with a status code other than the expected one."""

    def __init__(self, expected: Union[str, Tuple[str, ...]], actual: str):
        self.expected = expected
        self.actual = actual
        if isinstance(expected, tuple):
            expected_text = "/".join(expected)
        else:
            expected_text = expected
        message = f"Expected status {expected_text}, got '{actual}'"
        super().__init__(message)

    @property
    def code(self) -> str:
        """Three-digit status code of the actual reply."""
        return (self.actual or "")[:3]


class PassiveReplyError(FTPSError):
    """PASV reply did not carry a host/port tuple."""

    def __init__(self, reply: str):
        self.reply = reply
        message = f"Malformed PASV reply '{reply}'"
        super().__init__(message)


class TransferIOError(FTPSError):
    """Stream failure while moving data over the data channel."""

    def __init__(self, command: str, original_error: Exception = None):
        self.command = command
        message = f"Transfer failed during '{command}'"
        super().__init__(message, original_error)
