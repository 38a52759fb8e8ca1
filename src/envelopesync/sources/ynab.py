"""YNAB budget export parsing (JSON budget export and register CSV).

YNAB stores money as integer milli-units (amount x 1000).
"""

import csv
import io
import json
from typing import Any

from envelopesync.domain.entities import (
    ImportBatch,
    NormalizedAccount,
    NormalizedCategory,
    NormalizedTransaction,
    UNKNOWN_PAYEE,
)
from envelopesync.domain.errors import ParseError
from envelopesync.sources.account_types import YNAB_EXACT_TYPES, infer_account_type
from envelopesync.utils.amount_parser import format_amount, minor_units_to_decimal, parse_amount
from envelopesync.utils.date_parser import parse_datetime

MILLIUNITS = 1000

CSV_ACCOUNT_ID = "ynab-csv-account"


def milliunits_to_decimal(value: int) -> str:
    """Convert YNAB milli-units to a two-digit decimal string.

    Rounds the exact quotient half-up, so 1005 becomes "1.01". Binary float
    formatting of 1.005 would give "1.00"; the exact result is kept on purpose.
    """
    return minor_units_to_decimal(value, MILLIUNITS)


def load_json(raw: Any) -> Any:
    """Accept an already decoded payload or a JSON string/bytes."""
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            return json.loads(raw)
        except ValueError as e:
            raise ParseError(f"Invalid JSON: {e}")
    return raw


def parse_ynab_json(raw: Any) -> dict[str, Any]:
    """Return the budget object from a YNAB JSON export.

    Accepts ``{"data": {"budget": ...}}`` (API response), ``{"budget": ...}``,
    or the budget object itself.

    Raises:
        ParseError: If the payload is not a JSON object
    """
    data = load_json(raw)
    if not isinstance(data, dict):
        raise ParseError("YNAB budget data must be a JSON object")

    envelope = data.get("data")
    if isinstance(envelope, dict) and isinstance(envelope.get("budget"), dict):
        return envelope["budget"]
    if isinstance(data.get("budget"), dict):
        return data["budget"]
    return data


def parse_ynab_csv(text: str) -> list[dict[str, str]]:
    """Parse a YNAB register CSV into rows keyed by column name.

    Headers and values are trimmed and blank lines skipped.

    Raises:
        ParseError: If the content has no header row or is not valid CSV
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    try:
        if not reader.fieldnames:
            raise ParseError("CSV content has no header row")
        rows = []
        for record in reader:
            row = {
                (key or "").strip(): (value or "").strip()
                for key, value in record.items()
                if key is not None
            }
            if any(row.values()):
                rows.append(row)
    except csv.Error as e:
        raise ParseError(f"Invalid CSV: {e}")
    return rows


def map_ynab_account(ynab_account: dict[str, Any]) -> NormalizedAccount:
    """Map a YNAB account to a normalized account."""
    name = ynab_account.get("name") or ""
    return NormalizedAccount(
        external_id=str(ynab_account["id"]),
        name=name,
        type=infer_account_type(name, ynab_account.get("type"), exact_types=YNAB_EXACT_TYPES),
        balance=milliunits_to_decimal(ynab_account.get("balance") or 0),
    )


def map_ynab_category(ynab_category: dict[str, Any]) -> NormalizedCategory:
    """Map a YNAB category; the budgeted amount is carried over."""
    budgeted = ynab_category.get("budgeted")
    return NormalizedCategory(
        external_id=str(ynab_category.get("id", "")),
        name=ynab_category.get("name") or "",
        budgeted=milliunits_to_decimal(budgeted) if budgeted else "0",
    )


def map_ynab_transaction(ynab_txn: dict[str, Any]) -> NormalizedTransaction:
    """Map a YNAB transaction to a normalized transaction."""
    return NormalizedTransaction(
        external_id=str(ynab_txn.get("id", "")),
        external_account_id=str(ynab_txn.get("account_id", "")),
        date=parse_datetime(ynab_txn["date"]),
        payee=ynab_txn.get("payee_name") or UNKNOWN_PAYEE,
        amount=milliunits_to_decimal(ynab_txn["amount"]),
        notes=ynab_txn.get("memo") or None,
    )


def map_ynab_csv_row(
    row: dict[str, str], external_account_id: str, external_id: str = ""
) -> NormalizedTransaction:
    """Map a YNAB register CSV row.

    Uses the signed ``Amount`` column when present, otherwise
    ``Inflow - Outflow`` with a missing side counted as zero.
    """
    if "Amount" in row:
        amount = parse_amount(row["Amount"])
    else:
        inflow = parse_amount(row["Inflow"]) if row.get("Inflow") else 0
        outflow = parse_amount(row["Outflow"]) if row.get("Outflow") else 0
        amount = inflow - outflow

    return NormalizedTransaction(
        external_id=external_id,
        external_account_id=external_account_id,
        date=parse_datetime(row.get("Date", "")),
        payee=row.get("Payee") or UNKNOWN_PAYEE,
        amount=format_amount(amount),
        notes=row.get("Memo") or None,
    )


def build_ynab_batch(budget: dict[str, Any]) -> ImportBatch:
    """Normalize a YNAB budget, skipping deleted, closed and hidden entities.

    Raises:
        ParseError: If an entity is missing required fields or has bad values
    """
    try:
        accounts = tuple(
            map_ynab_account(account)
            for account in budget.get("accounts") or []
            if not account.get("deleted") and not account.get("closed")
        )
        categories = tuple(
            map_ynab_category(category)
            for category in budget.get("categories") or []
            if not category.get("deleted") and not category.get("hidden")
        )
        transactions = tuple(
            map_ynab_transaction(txn)
            for txn in budget.get("transactions") or []
            if not txn.get("deleted")
        )
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise ParseError(f"Malformed YNAB budget data: {e}")

    return ImportBatch(accounts=accounts, transactions=transactions, categories=categories)


def build_ynab_csv_batch(
    rows: list[dict[str, str]], account_name: str, account_type: str = "checking"
) -> ImportBatch:
    """Normalize register rows as transactions of a single named account.

    Raises:
        ParseError: If a row has an unparseable date or amount
    """
    account = NormalizedAccount(
        external_id=CSV_ACCOUNT_ID, name=account_name, type=account_type, balance="0.00"
    )
    transactions = []
    for row_num, row in enumerate(rows, start=2):  # header is row 1
        try:
            transactions.append(map_ynab_csv_row(row, CSV_ACCOUNT_ID, f"row-{row_num}"))
        except ValueError as e:
            raise ParseError(f"Row {row_num}: {e}")
    return ImportBatch(accounts=(account,), transactions=tuple(transactions))
