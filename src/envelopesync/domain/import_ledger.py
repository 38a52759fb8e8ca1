"""Import ledger: append-only history of import and sync runs."""

from typing import Optional
from envelopesync.database.base import Database
from envelopesync.domain.entities import IMPORT_SOURCES, IMPORT_STATUSES, ImportLog
from envelopesync.domain.errors import ValidationError, invalid_choice


class ImportLedger:
    """Records the outcome of every import or sync run."""

    def __init__(self, db: Database):
        """Initialize import ledger.

        Args:
            db: Database instance
        """
        self.db = db

    def record(
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
        """Append one ledger entry.

        Raises:
            ValidationError: If source or status is not a known value
        """
        if source not in IMPORT_SOURCES:
            raise ValidationError(invalid_choice("import source", source, IMPORT_SOURCES))
        if status not in IMPORT_STATUSES:
            raise ValidationError(invalid_choice("import status", status, IMPORT_STATUSES))

        return self.db.append_import_log(
            owner_id=owner_id,
            source=source,
            status=status,
            accounts_imported=accounts_imported,
            transactions_imported=transactions_imported,
            categories_imported=categories_imported,
            file_name=file_name,
            error_message=error_message,
        )

    def list(self, owner_id: str) -> list[ImportLog]:
        """Return the owner's entries, newest first."""
        return self.db.list_import_logs(owner_id)
