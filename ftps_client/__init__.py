"""FTPS client for servers with non-standard behaviour.

Explicit-TLS FTP (RFC 4217) client that tolerates self-signed
certificates, quirky PASV replies and irregularly spaced LIST output.
"""

from ftps_client.ftps.client import FTPSClient
from ftps_client.ftps.connection import FTPSConnectionConfig, TrustMode
from ftps_client.ftps.listing import EntryKind, ListingEntry

__all__ = [
    "FTPSClient",
    "FTPSConnectionConfig",
    "TrustMode",
    "EntryKind",
    "ListingEntry",
]

__version__ = "1.0.0"
