"""TLS helpers shared by the control and data channels."""

import logging
import socket
import ssl
from enum import Enum
from typing import Optional

from ftps_client.ftps.exceptions import CertificateError

logger = logging.getLogger("ftps_client.tls")


class TrustMode(Enum):
    """How server certificates are checked."""
    VERIFY = "verify"
    TRUST_ALL = "trust_all"


def create_context(trust_mode: TrustMode, ca_file: Optional[str] = None) -> ssl.SSLContext:
    """
    Build a client-side SSL context.

    Args:
        trust_mode: VERIFY checks chain and hostname; TRUST_ALL accepts anything
        ca_file: Extra CA bundle (or a self-signed certificate) to trust

    Returns:
        Configured SSLContext
    """
    context = ssl.create_default_context(cafile=ca_file)
    if trust_mode == TrustMode.TRUST_ALL:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def wrap_socket(
    sock: socket.socket,
    context: ssl.SSLContext,
    server_hostname: str,
    session: Optional[ssl.SSLSession] = None
) -> ssl.SSLSocket:
    """
    Run a client handshake over an already connected socket.

    Args:
        sock: Connected plaintext socket
        context: Context from create_context()
        server_hostname: Name checked against the certificate
        session: TLS session to offer for resumption

    Returns:
        The TLS socket

    Raises:
        CertificateError: If certificate verification fails
    """
    try:
        return context.wrap_socket(
            sock,
            server_hostname=server_hostname,
            session=session,
        )
    except ssl.SSLCertVerificationError as e:
        logger.error(f"Certificate check failed for {server_hostname}: {e}")
        raise CertificateError(server_hostname, e)
