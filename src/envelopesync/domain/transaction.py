"""Transaction domain service."""

from typing import Optional
from datetime import datetime
from decimal import Decimal
from envelopesync.database.base import Database
from envelopesync.domain.entities import Transaction as TransactionEntity, UNKNOWN_PAYEE
from envelopesync.domain.errors import (
    NotFoundError,
    OwnershipError,
    account_not_found,
    category_not_found,
    owner_mismatch,
)
from envelopesync.utils.amount_parser import format_amount


class TransactionService:
    """Service for directly entered transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        owner_id: str,
        account_id: str,
        date: datetime,
        amount: Decimal,
        payee: Optional[str] = None,
        notes: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> str:
        """Create a transaction.

        Unlike imports, which silently drop unresolvable references, direct
        entry treats a foreign or missing account or category as an error.

        Args:
            owner_id: Owner creating the transaction
            account_id: Account ID
            date: Transaction date
            amount: Transaction amount
            payee: Optional payee (defaults to "Unknown")
            notes: Optional notes
            category_id: Optional category ID

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If the account or category doesn't exist
            OwnershipError: If the account or category belongs to another owner
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if account.owner_id != owner_id:
            raise OwnershipError(owner_mismatch("account", account_id))

        if category_id is not None:
            category = self.db.get_category(category_id)
            if category is None:
                raise NotFoundError(category_not_found(category_id))
            if category.owner_id != owner_id:
                raise OwnershipError(owner_mismatch("category", category_id))

        return self.db.create_transaction(
            owner_id=owner_id,
            account_id=account_id,
            date=date,
            payee=payee or UNKNOWN_PAYEE,
            amount=Decimal(format_amount(amount)),
            notes=notes,
            category_id=category_id,
        )

    def list_transactions(
        self, owner_id: str, account_id: Optional[str] = None
    ) -> list[TransactionEntity]:
        """List the owner's transactions, newest first."""
        return self.db.list_transactions(owner_id, account_id=account_id)
