"""Actual Budget export parsing.

Actual Budget stores money as integer cents (amount x 100).
"""

from typing import Any

from envelopesync.domain.entities import (
    ImportBatch,
    NormalizedAccount,
    NormalizedCategory,
    NormalizedTransaction,
    UNKNOWN_PAYEE,
)
from envelopesync.domain.errors import ParseError
from envelopesync.sources.account_types import infer_account_type
from envelopesync.sources.ynab import load_json
from envelopesync.utils.amount_parser import minor_units_to_decimal
from envelopesync.utils.date_parser import parse_datetime

CENTS = 100


def cents_to_decimal(value: int) -> str:
    """Convert Actual Budget cents to a two-digit decimal string."""
    return minor_units_to_decimal(value, CENTS)


def parse_actual_budget_json(raw: Any) -> dict[str, Any]:
    """Return the budget data, unwrapping an optional ``{"data": ...}`` envelope.

    Raises:
        ParseError: If the payload is not a JSON object
    """
    data = load_json(raw)
    if not isinstance(data, dict):
        raise ParseError("Actual Budget data must be a JSON object")
    if isinstance(data.get("data"), dict):
        return data["data"]
    return data


def map_actual_account(actual_account: dict[str, Any]) -> NormalizedAccount:
    """Map an Actual Budget account to a normalized account."""
    name = actual_account.get("name") or ""
    return NormalizedAccount(
        external_id=str(actual_account["id"]),
        name=name,
        type=infer_account_type(name, actual_account.get("type")),
        balance=cents_to_decimal(actual_account.get("balance") or 0),
    )


def map_actual_category(actual_category: dict[str, Any]) -> NormalizedCategory:
    """Map an Actual Budget category.

    The budgeted amount is always reset to "0"; source budgets are not
    carried over for this source.
    """
    return NormalizedCategory(
        external_id=str(actual_category.get("id", "")),
        name=actual_category.get("name") or "",
        budgeted="0",
    )


def map_actual_transaction(actual_txn: dict[str, Any]) -> NormalizedTransaction:
    """Map an Actual Budget transaction to a normalized transaction."""
    return NormalizedTransaction(
        external_id=str(actual_txn.get("id", "")),
        external_account_id=str(actual_txn.get("account", "")),
        date=parse_datetime(actual_txn["date"]),
        payee=actual_txn.get("payee_name") or actual_txn.get("payee") or UNKNOWN_PAYEE,
        amount=cents_to_decimal(actual_txn["amount"]),
        notes=actual_txn.get("notes") or None,
    )


def build_actual_budget_batch(data: dict[str, Any]) -> ImportBatch:
    """Normalize Actual Budget data, skipping closed accounts and hidden categories.

    Raises:
        ParseError: If an entity is missing required fields or has bad values
    """
    try:
        accounts = tuple(
            map_actual_account(account)
            for account in data.get("accounts") or []
            if not account.get("closed")
        )
        categories = tuple(
            map_actual_category(category)
            for category in data.get("categories") or []
            if not category.get("hidden")
        )
        transactions = tuple(
            map_actual_transaction(txn) for txn in data.get("transactions") or []
        )
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise ParseError(f"Malformed Actual Budget data: {e}")

    return ImportBatch(accounts=accounts, transactions=transactions, categories=categories)
