"""Secure credential storage for the FTPS client.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) so FTPS passwords never land in settings.json.
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError


class CredentialManager:
    """Password storage keyed by host and username."""

    SERVICE_NAME = "ftps-client"

    def _make_key(self, host: str, username: str) -> str:
        return f"{host}:{username}"

    def save_password(self, host: str, username: str, password: str) -> bool:
        """
        Save a password.

        Returns:
            True if saved, False if the keyring rejected it
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(host, username), password)
            return True
        except KeyringError:
            return False

    def get_password(self, host: str, username: str) -> Optional[str]:
        """Retrieve a saved password, or None."""
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(host, username))
        except KeyringError:
            return None

    def delete_password(self, host: str, username: str) -> bool:
        """
        Remove a saved password.

        Returns:
            True if deleted, False if absent or the keyring failed
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(host, username))
            return True
        except KeyringError:
            return False

    def has_password(self, host: str, username: str) -> bool:
        """True if a password is saved for host and username."""
        return self.get_password(host, username) is not None
