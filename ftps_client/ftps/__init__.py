"""FTPS protocol engine.

This module handles all FTPS-related functionality:
- ControlConnection: Lazily authenticated control channel
- ControlStream: Command/response exchange with status checking
- DataChannel: Passive-mode TLS data connections
- parse_listing_line: LIST output parser
- FTPSClient: Operation layer (cd, ls, retrieve, store, ...)
- Exceptions: FTPS-specific error types
"""
