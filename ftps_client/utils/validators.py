"""Input validators for the FTPS client.

Each validator returns (is_valid, error_message).
"""

import re
from typing import Optional, Tuple, Union


# IPv4 address pattern
IPV4_PATTERN = re.compile(
    r'^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'
    r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
)

# Hostname pattern (simplified)
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}$)(?!-)[A-Za-z0-9_-]{1,63}(?<!-)(\.[A-Za-z0-9_-]{1,63})*\.?$'
)


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host (IPv4 address, IPv6 literal or hostname).

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    host = host.strip()

    if IPV4_PATTERN.match(host) or HOSTNAME_PATTERN.match(host):
        return True, None

    # IPv6 literal
    if ":" in host and re.fullmatch(r'[0-9A-Fa-f:.%]+', host):
        return True, None

    return False, f"Invalid host: {host}. Must be a valid IP address or hostname."


def validate_port(port: Union[int, str]) -> Tuple[bool, Optional[str]]:
    """
    Validate a port number.

    Args:
        port: Port as int or numeric string

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(port, bool):
        return False, "Port must be a number"
    if not isinstance(port, int):
        try:
            port = int(str(port).strip())
        except (ValueError, TypeError):
            return False, "Port must be a number"

    if port < 0 or port > 65535:
        return False, f"Port must be between 0 and 65535, got {port}"

    return True, None


def validate_remote_path(path: str, absolute: bool = False) -> Tuple[bool, Optional[str]]:
    """
    Validate a remote FTPS path.

    Args:
        path: Path to validate
        absolute: If True, path must start with '/'

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path or not path.strip():
        return False, "Remote path is required"

    if absolute and not path.startswith("/"):
        return False, "Remote path must be absolute (start with /)"

    return True, None
