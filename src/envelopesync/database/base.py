"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from envelopesync.domain.entities import (
    Account,
    Category,
    Transaction,
    SimplefinConnection,
    ImportLog,
)


class Database(ABC):
    """Abstract persistent store for envelopesync.

    Every collection is scoped by owner identity. Implementations are chosen
    by the bootstrap layer (see ``database.factories``) and injected into the
    domain services.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group writes into one unit of work.

        Writes made inside the block are visible to reads inside the block,
        committed when it exits normally and discarded if it raises.
        """
        pass

    # Account operations
    @abstractmethod
    def list_accounts(self, owner_id: str) -> list[Account]:
        """List the owner's accounts."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID regardless of owner."""
        pass

    @abstractmethod
    def create_account(self, owner_id: str, name: str, type: str, balance: Decimal) -> str:
        """Create an account. Returns account ID."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: str,
        owner_id: str,
        balance: Optional[Decimal] = None,
        name: Optional[str] = None,
        type: Optional[str] = None,
    ) -> Optional[Account]:
        """Patch an owner's account. Returns None if it does not exist for the owner."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, owner_id: str, name: str, budgeted: Decimal, sort_order: Decimal = Decimal("0")
    ) -> str:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID regardless of owner."""
        pass

    @abstractmethod
    def list_categories(self, owner_id: str) -> list[Category]:
        """List the owner's categories."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        owner_id: str,
        account_id: str,
        date: datetime,
        payee: str,
        amount: Decimal,
        notes: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> str:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def list_transactions(
        self, owner_id: str, account_id: Optional[str] = None
    ) -> list[Transaction]:
        """List the owner's transactions, optionally for one account."""
        pass

    @abstractmethod
    def transaction_exists(
        self, account_id: str, date: datetime, amount: Decimal, payee: str
    ) -> bool:
        """Check for a transaction on the account with exactly this date, amount and payee."""
        pass

    # SimpleFIN connection operations
    @abstractmethod
    def create_connection(
        self, owner_id: str, encrypted_access_url: str, connection_name: str
    ) -> str:
        """Store a SimpleFIN connection. Returns connection ID."""
        pass

    @abstractmethod
    def get_connection(self, connection_id: str, owner_id: str) -> Optional[SimplefinConnection]:
        """Get an owner's connection by ID."""
        pass

    @abstractmethod
    def list_connections(self, owner_id: str) -> list[SimplefinConnection]:
        """List the owner's connections."""
        pass

    @abstractmethod
    def update_connection(
        self,
        connection_id: str,
        owner_id: str,
        last_sync: Optional[datetime] = None,
        is_active: Optional[bool] = None,
        connection_name: Optional[str] = None,
    ) -> Optional[SimplefinConnection]:
        """Patch an owner's connection. Returns None if it does not exist for the owner."""
        pass

    @abstractmethod
    def delete_connection(self, connection_id: str, owner_id: str) -> bool:
        """Delete an owner's connection. Returns False if it did not exist."""
        pass

    # Import log operations
    @abstractmethod
    def append_import_log(
        self,
        owner_id: str,
        source: str,
        status: str,
        accounts_imported: int = 0,
        transactions_imported: int = 0,
        categories_imported: int = 0,
        file_name: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> ImportLog:
        """Append an import log entry and return it."""
        pass

    @abstractmethod
    def list_import_logs(self, owner_id: str) -> list[ImportLog]:
        """List the owner's import log entries, newest first."""
        pass
