"""Reconciliation of normalized import batches into the persistent store.

Records are processed one at a time, accounts first, so every transaction
can be resolved against the accounts of its own batch and duplicate checks
see rows inserted earlier in the same run.

Two runs against the same owner and connection are not serialized here;
callers must not start a sync for a connection while another is in flight.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from envelopesync.database.base import Database
from envelopesync.domain.entities import ImportBatch, NormalizedAccount

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationPolicy:
    """How a batch is merged into existing data.

    Attributes:
        dedupe: Skip transactions whose (date, amount, payee) already exists
            on the same account
        match_existing_accounts: Reuse an owner account with the same
            (name, type) and update its balance instead of creating one
    """

    dedupe: bool
    match_existing_accounts: bool


# Repeatable bank sync: must not duplicate anything on re-runs.
SYNC_POLICY = ReconciliationPolicy(dedupe=True, match_existing_accounts=True)

# One-shot import of a whole exported budget.
IMPORT_POLICY = ReconciliationPolicy(dedupe=False, match_existing_accounts=False)


@dataclass
class ReconciliationResult:
    """Counts accumulated by one reconciliation run."""

    accounts_imported: int = 0
    accounts_updated: int = 0
    transactions_imported: int = 0
    transactions_skipped: int = 0
    transactions_dropped: int = 0
    categories_imported: int = 0
    account_id_map: dict[str, str] = field(default_factory=dict)


class ReconciliationEngine:
    """Applies normalized batches to the store for one owner."""

    def __init__(self, db: Database):
        """Initialize reconciliation engine.

        Args:
            db: Database instance
        """
        self.db = db

    def reconcile(
        self,
        owner_id: str,
        batch: ImportBatch,
        policy: ReconciliationPolicy,
        resolved_accounts: Optional[dict[str, str]] = None,
    ) -> ReconciliationResult:
        """Apply a batch and return the counts.

        Args:
            owner_id: Owner identity all records are written for
            batch: Normalized accounts, categories and transactions
            policy: Account matching and duplicate detection policy
            resolved_accounts: External account IDs already mapped to local
                account IDs by the caller; those accounts are neither created
                nor updated

        Returns:
            ReconciliationResult with counts and the external-to-local account map
        """
        result = ReconciliationResult()
        result.account_id_map.update(resolved_accounts or {})

        for account in batch.accounts:
            if account.external_id in result.account_id_map:
                continue
            result.account_id_map[account.external_id] = self._resolve_account(
                owner_id, account, policy, result
            )

        for category in batch.categories:
            self.db.create_category(
                owner_id=owner_id, name=category.name, budgeted=Decimal(category.budgeted)
            )
            result.categories_imported += 1

        owned_accounts: dict[str, bool] = {}
        for txn in batch.transactions:
            account_id = result.account_id_map.get(txn.external_account_id)
            if account_id is None:
                logger.debug(
                    f"Dropping transaction {txn.external_id!r}: "
                    f"account {txn.external_account_id!r} is not in this batch"
                )
                result.transactions_dropped += 1
                continue

            if account_id not in owned_accounts:
                owned_accounts[account_id] = self._is_owned(account_id, owner_id)
            if not owned_accounts[account_id]:
                logger.warning(
                    f"Dropping transaction {txn.external_id!r}: "
                    f"account {account_id} belongs to another owner"
                )
                result.transactions_dropped += 1
                continue

            amount = Decimal(txn.amount)
            if policy.dedupe and self.db.transaction_exists(
                account_id=account_id, date=txn.date, amount=amount, payee=txn.payee
            ):
                result.transactions_skipped += 1
                continue

            self.db.create_transaction(
                owner_id=owner_id,
                account_id=account_id,
                date=txn.date,
                payee=txn.payee,
                amount=amount,
                notes=txn.notes,
            )
            result.transactions_imported += 1

        logger.debug(
            f"Reconciled batch for {owner_id}: "
            f"{result.transactions_skipped} duplicate(s), "
            f"{result.transactions_dropped} dropped"
        )
        return result

    def _resolve_account(
        self,
        owner_id: str,
        account: NormalizedAccount,
        policy: ReconciliationPolicy,
        result: ReconciliationResult,
    ) -> str:
        """Return the local account ID for a normalized account, creating it if needed."""
        balance = Decimal(account.balance)
        if policy.match_existing_accounts:
            for existing in self.db.list_accounts(owner_id):
                if existing.name == account.name and existing.type == account.type:
                    self.db.update_account(existing.id, owner_id, balance=balance)
                    result.accounts_updated += 1
                    return existing.id

        account_id = self.db.create_account(
            owner_id=owner_id, name=account.name, type=account.type, balance=balance
        )
        result.accounts_imported += 1
        return account_id

    def _is_owned(self, account_id: str, owner_id: str) -> bool:
        account = self.db.get_account(account_id)
        return account is not None and account.owner_id == owner_id
