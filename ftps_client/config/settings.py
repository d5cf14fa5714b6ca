"""Connection profile persistence for the FTPS client.

Provides ClientSettings dataclass and SettingsManager for persistence.
Passwords are never written here; see CredentialManager.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from ftps_client.config.paths import get_settings_path
from ftps_client.ftps.connection import FTPSConnectionConfig
from ftps_client.ftps.tls import TrustMode


@dataclass
class ClientSettings:
    """Connection settings that persist between sessions."""

    host: str = ""
    port: int = 21
    username: str = ""
    trust_all: bool = False
    ca_file: Optional[str] = None
    timeout: Optional[float] = None
    encoding: str = "utf-8"

    def to_dict(self) -> dict:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClientSettings":
        """Create settings from dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    def to_connection_config(self, password: str) -> FTPSConnectionConfig:
        """
        Build a connection config from these settings.

        Args:
            password: Password for the saved username

        Raises:
            ConfigurationError: If any setting is invalid
        """
        return FTPSConnectionConfig(
            host=self.host,
            port=self.port,
            username=self.username,
            password=password,
            trust_mode=TrustMode.TRUST_ALL if self.trust_all else TrustMode.VERIFY,
            ca_file=self.ca_file,
            timeout=self.timeout,
            encoding=self.encoding,
        )


class SettingsManager:
    """Manages settings persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_path: Optional custom path, defaults to platform standard
        """
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[ClientSettings] = None

    @property
    def config_path(self) -> Path:
        """Path to settings file."""
        return self._config_path

    def load(self) -> ClientSettings:
        """
        Load settings from disk.

        Returns:
            ClientSettings instance (defaults if file not found or unreadable)
        """
        if self._config_path.exists():
            try:
                with open(self._config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self._settings = ClientSettings.from_dict(data)
            except (json.JSONDecodeError, IOError):
                self._settings = ClientSettings()
        else:
            self._settings = ClientSettings()

        return self._settings

    def save(self, settings: ClientSettings) -> None:
        """Persist settings to disk."""
        self._settings = settings
        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)

    def reset(self) -> ClientSettings:
        """Delete the settings file and return defaults."""
        self._settings = ClientSettings()
        if self._config_path.exists():
            self._config_path.unlink()
        return self._settings

    def update(self, **kwargs) -> ClientSettings:
        """
        Update specific settings fields and save.

        Unknown field names are ignored.
        """
        if self._settings is None:
            self.load()

        for key, value in kwargs.items():
            if hasattr(self._settings, key):
                setattr(self._settings, key, value)

        self.save(self._settings)
        return self._settings
