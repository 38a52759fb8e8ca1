"""Import and sync orchestration.

Each public import method is one run: adapter, reconciliation, and exactly
one import ledger entry whether the run succeeds or fails. A run's writes are
grouped in ``db.atomic()``, so a failing run leaves no partial data behind;
the failure entry is written after the rollback and the error re-raised.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from envelopesync.database.base import Database
from envelopesync.domain.entities import ImportLog, SimplefinConnection
from envelopesync.domain.errors import (
    ConfigurationError,
    NotFoundError,
    ValidationError,
    connection_not_found,
)
from envelopesync.domain.import_ledger import ImportLedger
from envelopesync.domain.reconciliation import (
    IMPORT_POLICY,
    SYNC_POLICY,
    ReconciliationEngine,
    ReconciliationPolicy,
    ReconciliationResult,
)
from envelopesync.domain.vault import CredentialVault
from envelopesync.sources import actual_budget, simplefin, ynab
from envelopesync.utils.date_parser import days_ago, utcnow

logger = logging.getLogger(__name__)

DEFAULT_POLICIES: dict[str, ReconciliationPolicy] = {
    "simplefin": SYNC_POLICY,
    "ynab_json": IMPORT_POLICY,
    "ynab_csv": IMPORT_POLICY,
    "actual_budget": IMPORT_POLICY,
}

DEFAULT_CONNECTION_NAME = "My Bank"
DEFAULT_SYNC_DAYS = 60

DEFAULT_FILE_NAMES = {
    "ynab_json": "ynab-import.json",
    "ynab_csv": "ynab-import.csv",
    "actual_budget": "actual-budget-import.json",
}


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of a successful run, as returned to the caller."""

    source: str
    accounts_imported: int
    transactions_imported: int
    categories_imported: Optional[int] = None
    success: bool = True

    def as_dict(self) -> dict[str, Any]:
        """Render the response body shape used by the request layer."""
        body: dict[str, Any] = {
            "success": self.success,
            "accountsImported": self.accounts_imported,
            "transactionsImported": self.transactions_imported,
        }
        if self.categories_imported is not None:
            body["categoriesImported"] = self.categories_imported
        return body


class ImportService:
    """Service for SimpleFIN sync and YNAB / Actual Budget imports."""

    def __init__(
        self,
        db: Database,
        vault: Optional[CredentialVault] = None,
        simplefin_client: Optional[simplefin.SimplefinClient] = None,
        policies: Optional[dict[str, ReconciliationPolicy]] = None,
    ):
        """Initialize import service.

        Args:
            db: Database instance
            vault: Credential vault; required for SimpleFIN operations unless
                a client is supplied
            simplefin_client: Optional preconfigured SimpleFIN client
            policies: Per-source reconciliation policy overrides
        """
        self.db = db
        self.vault = vault
        self._simplefin_client = simplefin_client
        self.policies = {**DEFAULT_POLICIES, **(policies or {})}
        self.engine = ReconciliationEngine(db)
        self.ledger = ImportLedger(db)

    @property
    def simplefin_client(self) -> simplefin.SimplefinClient:
        if self._simplefin_client is None:
            if self.vault is None:
                raise ConfigurationError("A credential vault is required for SimpleFIN")
            self._simplefin_client = simplefin.SimplefinClient(self.vault)
        return self._simplefin_client

    # SimpleFIN connections
    def connect_simplefin(
        self, owner_id: str, setup_token: str, connection_name: Optional[str] = None
    ) -> SimplefinConnection:
        """Claim a setup token and store the encrypted access URL as a connection.

        Raises:
            UntrustedSetupTokenError: If the token fails validation
            UpstreamError: If the claim request fails
        """
        if not setup_token or not isinstance(setup_token, str):
            raise ValidationError("Setup token is required")

        encrypted_access_url = self.simplefin_client.claim_setup_token(setup_token)
        connection_id = self.db.create_connection(
            owner_id=owner_id,
            encrypted_access_url=encrypted_access_url,
            connection_name=connection_name or DEFAULT_CONNECTION_NAME,
        )
        logger.info(f"Created SimpleFIN connection {connection_id} for owner {owner_id}")
        return self.db.get_connection(connection_id, owner_id)

    def list_simplefin_connections(self, owner_id: str) -> list[SimplefinConnection]:
        """List the owner's SimpleFIN connections."""
        return self.db.list_connections(owner_id)

    def delete_simplefin_connection(self, owner_id: str, connection_id: str) -> None:
        """Remove one of the owner's SimpleFIN connections.

        Raises:
            NotFoundError: If the connection does not exist for the owner
        """
        if not self.db.delete_connection(connection_id, owner_id):
            raise NotFoundError(connection_not_found(connection_id))
        logger.info(f"Deleted SimpleFIN connection {connection_id} for owner {owner_id}")

    def sync_simplefin(
        self,
        owner_id: str,
        connection_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> ImportSummary:
        """Fetch recent bank data for a connection and merge it without duplicates.

        Args:
            owner_id: Owner of the connection
            connection_id: SimpleFIN connection ID
            start_date: Lower bound of the fetch window (default: 60 days ago)
            end_date: Optional upper bound of the fetch window

        Raises:
            NotFoundError: If the connection does not exist for the owner
            MalformedAccessUrlError, UpstreamError, ParseError, VaultError:
                Adapter failures; recorded in the ledger and re-raised
        """
        connection = self.db.get_connection(connection_id, owner_id)
        if connection is None:
            raise NotFoundError(connection_not_found(connection_id))
        if start_date is None:
            start_date = days_ago(DEFAULT_SYNC_DAYS)

        def work() -> ReconciliationResult:
            batch = self.simplefin_client.fetch_batch(
                connection.encrypted_access_url, start_date, end_date
            )
            result = self.engine.reconcile(owner_id, batch, self.policies["simplefin"])
            self.db.update_connection(connection_id, owner_id, last_sync=utcnow())
            return result

        return self._run(owner_id, "simplefin", None, work, with_categories=False)

    # File imports
    def import_ynab_json(
        self, owner_id: str, budget_data: Any, file_name: Optional[str] = None
    ) -> ImportSummary:
        """Import a whole YNAB budget export (JSON).

        Raises:
            ValidationError: If no budget data is given
            ParseError: If the data is malformed; recorded in the ledger and re-raised
        """
        if not budget_data:
            raise ValidationError("Budget data is required")

        def work() -> ReconciliationResult:
            budget = ynab.parse_ynab_json(budget_data)
            batch = ynab.build_ynab_batch(budget)
            return self.engine.reconcile(owner_id, batch, self.policies["ynab_json"])

        return self._run(
            owner_id, "ynab_json", file_name or DEFAULT_FILE_NAMES["ynab_json"], work
        )

    def import_ynab_csv(
        self,
        owner_id: str,
        csv_content: str,
        account_name: str,
        file_name: Optional[str] = None,
    ) -> ImportSummary:
        """Import a YNAB register CSV into one named account.

        An existing account of the owner with the same name is reused;
        otherwise a checking account is created.

        Raises:
            ValidationError: If CSV content or account name is missing
            ParseError: If the CSV is malformed; recorded in the ledger and re-raised
        """
        if not csv_content or not account_name:
            raise ValidationError("CSV content and account name are required")

        def work() -> ReconciliationResult:
            rows = ynab.parse_ynab_csv(csv_content)
            batch = ynab.build_ynab_csv_batch(rows, account_name)
            resolved = {}
            for account in self.db.list_accounts(owner_id):
                if account.name == account_name:
                    resolved[ynab.CSV_ACCOUNT_ID] = account.id
                    break
            return self.engine.reconcile(
                owner_id, batch, self.policies["ynab_csv"], resolved_accounts=resolved
            )

        return self._run(
            owner_id,
            "ynab_csv",
            file_name or DEFAULT_FILE_NAMES["ynab_csv"],
            work,
            with_categories=False,
        )

    def import_actual_budget(
        self, owner_id: str, budget_data: Any, file_name: Optional[str] = None
    ) -> ImportSummary:
        """Import an Actual Budget export (JSON).

        Raises:
            ValidationError: If no budget data is given
            ParseError: If the data is malformed; recorded in the ledger and re-raised
        """
        if not budget_data:
            raise ValidationError("Budget data is required")

        def work() -> ReconciliationResult:
            data = actual_budget.parse_actual_budget_json(budget_data)
            batch = actual_budget.build_actual_budget_batch(data)
            return self.engine.reconcile(owner_id, batch, self.policies["actual_budget"])

        return self._run(
            owner_id,
            "actual_budget",
            file_name or DEFAULT_FILE_NAMES["actual_budget"],
            work,
        )

    def list_import_logs(self, owner_id: str) -> list[ImportLog]:
        """Return the owner's import history, newest first."""
        return self.ledger.list(owner_id)

    def _run(
        self,
        owner_id: str,
        source: str,
        file_name: Optional[str],
        work: Callable[[], ReconciliationResult],
        with_categories: bool = True,
    ) -> ImportSummary:
        """Execute one run and write its single ledger entry."""
        logger.info(f"Starting {source} import for owner {owner_id}")
        try:
            with self.db.atomic():
                result = work()
        except Exception as e:
            logger.exception(f"{source} import failed for owner {owner_id}")
            self.ledger.record(
                owner_id=owner_id,
                source=source,
                status="failed",
                file_name=file_name,
                error_message=str(e) or type(e).__name__,
            )
            raise

        self.ledger.record(
            owner_id=owner_id,
            source=source,
            status="success",
            accounts_imported=result.accounts_imported,
            transactions_imported=result.transactions_imported,
            categories_imported=result.categories_imported,
            file_name=file_name,
        )
        logger.info(
            f"Finished {source} import for owner {owner_id}: "
            f"{result.accounts_imported} account(s), "
            f"{result.transactions_imported} transaction(s), "
            f"{result.categories_imported} categor{'y' if result.categories_imported == 1 else 'ies'}"
        )
        return ImportSummary(
            source=source,
            accounts_imported=result.accounts_imported,
            transactions_imported=result.transactions_imported,
            categories_imported=result.categories_imported if with_categories else None,
        )
