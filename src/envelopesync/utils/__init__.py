"""Utility functions for envelopesync."""

from envelopesync.utils.date_parser import parse_datetime, from_unix_seconds, to_unix_seconds
from envelopesync.utils.amount_parser import parse_amount, format_amount, minor_units_to_decimal

__all__ = [
    "parse_datetime",
    "from_unix_seconds",
    "to_unix_seconds",
    "parse_amount",
    "format_amount",
    "minor_units_to_decimal",
]
