"""Source adapters: external financial data to normalized import batches."""

from envelopesync.sources.simplefin import SimplefinClient, build_simplefin_batch
from envelopesync.sources.ynab import (
    parse_ynab_json,
    parse_ynab_csv,
    build_ynab_batch,
    build_ynab_csv_batch,
)
from envelopesync.sources.actual_budget import parse_actual_budget_json, build_actual_budget_batch

__all__ = [
    "SimplefinClient",
    "build_simplefin_batch",
    "parse_ynab_json",
    "parse_ynab_csv",
    "build_ynab_batch",
    "build_ynab_csv_batch",
    "parse_actual_budget_json",
    "build_actual_budget_batch",
]
