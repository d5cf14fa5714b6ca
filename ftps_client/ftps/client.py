"""FTPS operation layer.

FTPSClient exposes the verb set (cd, pwd, rename, ls, mkdir, rmdir,
rm_file, retrieve, store, recursive_delete). The control connection is
opened and authenticated on first use, so there is no explicit connect:

    with FTPSClient(FTPSConnectionConfig("nas.local", username="u", password="p")) as ftps:
        ftps.cd("/dir")
        ftps.store_file("report.csv", Path("report.csv"))
"""

import logging
import re
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from ftps_client.config.credentials import CredentialManager
from ftps_client.config.settings import ClientSettings
from ftps_client.ftps.connection import ConnectionState, ControlConnection, FTPSConnectionConfig
from ftps_client.ftps.data import DataChannel
from ftps_client.ftps.exceptions import ConfigurationError, UnexpectedStatusError
from ftps_client.ftps.listing import ListingEntry, parse_listing_line
from ftps_client.ftps.protocol import (
    COMMAND_OK,
    FILE_ACTION_OK,
    PATHNAME_CREATED,
    PENDING_FURTHER_INFO,
    TRANSFER_COMPLETE,
    TRANSFER_STARTING,
)
from ftps_client.utils.validators import validate_remote_path

logger = logging.getLogger("ftps_client.client")

_QUOTED_PATH = re.compile(r'"((?:[^"]|"")*)"')

# Replies refusing LIST because the directory is not there
_DIRECTORY_UNAVAILABLE = ("450", "550")


def _require_path(path: Optional[str], absolute: bool = False) -> None:
    is_valid, error = validate_remote_path(path, absolute=absolute)
    if not is_valid:
        raise ValueError(error)


class FTPSClient:
    """Explicit-TLS FTP client. Not thread-safe."""

    BLOCK_SIZE = DataChannel.BLOCK_SIZE

    def __init__(self, config: FTPSConnectionConfig):
        """
        Initialize the client without connecting.

        Args:
            config: Connection configuration
        """
        self._config = config
        self._control = ControlConnection(config)
        self._data = DataChannel(self._control)

    @classmethod
    def from_settings(cls, settings: ClientSettings, credentials: CredentialManager) -> "FTPSClient":
        """
        Build a client from a saved profile.

        Args:
            settings: ClientSettings with host, port and username
            credentials: CredentialManager holding the password

        Raises:
            ConfigurationError: If no password is stored for the profile
        """
        password = credentials.get_password(settings.host, settings.username)
        if not password:
            raise ConfigurationError(
                f"No saved password for {settings.username}@{settings.host}"
            )
        return cls(settings.to_connection_config(password))

    @property
    def config(self) -> FTPSConnectionConfig:
        """Connection configuration."""
        return self._config

    @property
    def state(self) -> ConnectionState:
        """Control channel state."""
        return self._control.state

    def cd(self, path: str) -> None:
        """Change the remote working directory."""
        _require_path(path)
        self._control.send_command(f"CWD {path}", FILE_ACTION_OK)

    def pwd(self) -> str:
        """
        Get the remote working directory.

        Returns:
            Directory from the quoted part of the 257 reply, or the whole
            reply if the server did not quote it
        """
        reply = self._control.send_command("PWD", PATHNAME_CREATED)
        match = _QUOTED_PATH.search(reply)
        if match:
            return match.group(1).replace('""', '"')
        return reply

    def rename(self, from_path: str, to_path: str) -> None:
        """
        Rename a remote file or directory.

        Not atomic: if RNTO fails the server is left waiting for one.
        """
        _require_path(from_path)
        _require_path(to_path)
        self._control.send_command(f"RNFR {from_path}", PENDING_FURTHER_INFO)
        self._control.send_command(f"RNTO {to_path}", FILE_ACTION_OK)

    def ls(self, path: Optional[str] = None) -> List[ListingEntry]:
        """
        List a remote directory.

        Args:
            path: Directory to list (current directory if None)

        Returns:
            One entry per line in server order, including '.' and '..' if
            sent; a blank line yields an entry with no kind and an empty name
        """
        command = f"LIST {path}" if path else "LIST"
        entries: List[ListingEntry] = []
        with self._data.transfer(False, command, TRANSFER_STARTING) as channel:
            for line in channel.lines():
                logger.debug(f"<<< [data] {line}")
                entries.append(parse_listing_line(line))
        self._control.read_response(TRANSFER_COMPLETE)
        return entries

    def mkdir(self, path: str) -> None:
        """Create a remote directory."""
        _require_path(path)
        self._control.send_command(f"MKD {path}", PATHNAME_CREATED)

    def rmdir(self, path: str) -> None:
        """Remove an empty remote directory."""
        _require_path(path)
        self._control.send_command(f"RMD {path}", FILE_ACTION_OK)

    def rm_file(self, path: str) -> None:
        """Delete a remote file."""
        _require_path(path)
        self._control.send_command(f"DELE {path}", FILE_ACTION_OK)

    def noop(self) -> None:
        """Send NOOP; raises if the server does not answer 200."""
        self._control.send_command("NOOP", COMMAND_OK)

    def file_exists(self, directory: str, file_name: str) -> bool:
        """
        Check whether a directory listing contains a name.

        Args:
            directory: Directory to list
            file_name: Entry name to look for

        Returns:
            True if listed; False if not listed or if the server refuses
            the LIST command because the directory is unavailable (450/550)

        Raises:
            FTPSError: On communication failures, including a transfer that
                started and then failed, so they are not mistaken for absence
        """
        self.noop()
        try:
            entries = self.ls(directory)
        except UnexpectedStatusError as e:
            if e.expected == TRANSFER_STARTING and e.code in _DIRECTORY_UNAVAILABLE:
                logger.debug(f"Listing {directory} refused: {e.actual}")
                return False
            raise
        return any(entry.name == file_name for entry in entries)

    def retrieve(self, remote_path: str, sink: BinaryIO) -> int:
        """
        Download a remote file into a binary sink.

        Args:
            remote_path: File to download
            sink: Object with write() (and optionally flush())

        Returns:
            Number of bytes received
        """
        _require_path(remote_path)
        logger.info(f"Download started: {remote_path}")
        received = 0
        with self._data.transfer(True, f"RETR {remote_path}", TRANSFER_STARTING) as channel:
            while True:
                block = channel.read(self.BLOCK_SIZE)
                if not block:
                    break
                sink.write(block)
                received += len(block)
            if hasattr(sink, "flush"):
                sink.flush()
        self._control.read_response(TRANSFER_COMPLETE)
        logger.info(f"Download finished: {remote_path} ({received} bytes)")
        return received

    def retrieve_file(self, remote_path: str, local_path: Union[str, Path]) -> int:
        """Download a remote file to a local path."""
        with open(local_path, "wb") as f:
            return self.retrieve(remote_path, f)

    def read_first_line(self, remote_path: str) -> Optional[str]:
        """
        Read the first line of a remote text file.

        Returns:
            The line without terminator, or None for an empty file
        """
        _require_path(remote_path)
        first: Optional[str] = None
        with self._data.transfer(False, f"RETR {remote_path}", TRANSFER_STARTING) as channel:
            for line in channel.lines():
                first = line
                break
        self._control.read_response(TRANSFER_COMPLETE)
        return first

    def store(self, remote_path: str, source: BinaryIO) -> int:
        """
        Upload the contents of a binary source.

        Args:
            remote_path: Destination file on the server
            source: Object with read(size) returning bytes

        Returns:
            Number of bytes sent
        """
        _require_path(remote_path)
        logger.info(f"Upload started: {remote_path}")
        sent = 0
        with self._data.transfer(True, f"STOR {remote_path}", TRANSFER_STARTING) as channel:
            while True:
                block = source.read(self.BLOCK_SIZE)
                if not block:
                    break
                channel.write(block)
                sent += len(block)
        self._control.read_response(TRANSFER_COMPLETE)
        logger.info(f"Upload finished: {remote_path} ({sent} bytes)")
        return sent

    def store_file(self, remote_path: str, local_path: Union[str, Path]) -> int:
        """Upload a local file."""
        with open(local_path, "rb") as f:
            return self.store(remote_path, f)

    def recursive_delete(self, full_path: str) -> None:
        """
        Delete a directory and everything below it.

        The root directory's contents are deleted but "/" itself is kept.
        There is no rollback: a failure stops the walk and leaves whatever
        was not yet deleted.

        Args:
            full_path: Absolute directory path

        Raises:
            ValueError: If the path is empty or not absolute
        """
        _require_path(full_path, absolute=True)

        self._delete_contents(full_path)
        if full_path != "/":
            self.rmdir(full_path)
        logger.info(f"Recursive delete finished: {full_path}")

    def _delete_contents(self, full_path: str) -> None:
        """Empty a directory depth-first; each subdirectory is removed by its parent."""
        self.cd(full_path)
        for entry in self.ls(full_path):
            if entry.is_directory:
                self._delete_contents(f"{full_path.rstrip('/')}/{entry.name}")
                self.cd(full_path)
                self.rmdir(entry.name)
            elif entry.is_file:
                self.rm_file(entry.name)

    def close(self) -> None:
        """Close the data channel and the control connection."""
        self._data.close_transfer()
        self._control.close()

    def __enter__(self) -> "FTPSClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
