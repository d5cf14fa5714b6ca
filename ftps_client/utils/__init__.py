"""Utility module for the FTPS client.

This module provides cross-cutting utilities:
- Logging: Configured logging with password redaction
- Validators: Input validation for host, port and remote paths
"""
