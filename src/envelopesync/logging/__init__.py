"""Logging setup for envelopesync."""

from envelopesync.logging.config import LoggingConfig, setup_logging

__all__ = ["LoggingConfig", "setup_logging"]
