"""Domain model entities for envelopesync.

Stored entities mirror what the persistent store hands back. Normalized
records are the source-agnostic shapes produced by the source adapters and
consumed by the reconciliation engine; they never reach the store verbatim.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

ACCOUNT_TYPES = ("checking", "savings", "credit", "investment", "other")

IMPORT_SOURCES = ("ynab_json", "ynab_csv", "actual_budget", "simplefin", "csv")

IMPORT_STATUSES = ("success", "failed", "partial")

UNKNOWN_PAYEE = "Unknown"


@dataclass(frozen=True)
class Account:
    """Budget account domain entity."""

    id: str
    owner_id: str
    name: str
    type: str
    balance: Decimal
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Category:
    """Budget category (envelope) domain entity."""

    id: str
    owner_id: str
    name: str
    budgeted: Decimal
    sort_order: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    owner_id: str
    account_id: str
    category_id: Optional[str]
    date: datetime
    payee: str
    amount: Decimal
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class SimplefinConnection:
    """SimpleFIN bank connection; the access URL is only ever stored encrypted."""

    id: str
    owner_id: str
    encrypted_access_url: str
    connection_name: str
    last_sync: Optional[datetime]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class ImportLog:
    """Immutable record of one import or sync run."""

    id: str
    owner_id: str
    source: str
    file_name: Optional[str]
    accounts_imported: int
    transactions_imported: int
    categories_imported: int
    status: str
    error_message: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class NormalizedAccount:
    """Source-agnostic account produced by an adapter."""

    external_id: str
    name: str
    type: str
    balance: str


@dataclass(frozen=True)
class NormalizedCategory:
    """Source-agnostic category produced by an adapter."""

    external_id: str
    name: str
    budgeted: str


@dataclass(frozen=True)
class NormalizedTransaction:
    """Source-agnostic transaction produced by an adapter.

    ``external_account_id`` must name an account in the same batch.
    """

    external_id: str
    external_account_id: str
    date: datetime
    amount: str
    payee: str = UNKNOWN_PAYEE
    notes: Optional[str] = None


@dataclass(frozen=True)
class ImportBatch:
    """Normalized output of one adapter call."""

    accounts: tuple[NormalizedAccount, ...] = ()
    transactions: tuple[NormalizedTransaction, ...] = ()
    categories: tuple[NormalizedCategory, ...] = ()
