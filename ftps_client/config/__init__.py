"""Configuration module for the FTPS client.

This module handles saved connection profiles and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure password storage via keyring
- Paths: Application data directories
- ClientSettings: Settings dataclass
"""
