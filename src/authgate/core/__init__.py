"""Core utilities for AuthGate: configuration, logging, errors and time."""

from authgate.core.config import Settings, get_settings
from authgate.core.errors import AuthError, ErrorKind
from authgate.core.logging import configure_logging, get_logger

__all__ = [
    "AuthError",
    "ErrorKind",
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
]
