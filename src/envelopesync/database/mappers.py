"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the domain entities stay stable
when the table layout changes.
"""

from envelopesync.domain import entities as domain
from envelopesync.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    SimplefinConnection as ORMSimplefinConnection,
    ImportLog as ORMImportLog,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        owner_id=orm_account.owner_id,
        name=orm_account.name,
        type=orm_account.type,
        balance=orm_account.balance,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        name=orm_category.name,
        budgeted=orm_category.budgeted,
        sort_order=orm_category.sort_order,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        owner_id=orm_transaction.owner_id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        date=orm_transaction.date,
        payee=orm_transaction.payee,
        amount=orm_transaction.amount,
        notes=orm_transaction.notes,
        created_at=orm_transaction.created_at,
    )


def connection_to_domain(orm_connection: ORMSimplefinConnection) -> domain.SimplefinConnection:
    """Convert SQLAlchemy SimplefinConnection model to domain entity."""
    return domain.SimplefinConnection(
        id=orm_connection.id,
        owner_id=orm_connection.owner_id,
        encrypted_access_url=orm_connection.access_url,
        connection_name=orm_connection.connection_name,
        last_sync=orm_connection.last_sync,
        is_active=orm_connection.is_active,
        created_at=orm_connection.created_at,
    )


def import_log_to_domain(orm_log: ORMImportLog) -> domain.ImportLog:
    """Convert SQLAlchemy ImportLog model to domain ImportLog entity."""
    return domain.ImportLog(
        id=orm_log.id,
        owner_id=orm_log.owner_id,
        source=orm_log.source,
        file_name=orm_log.file_name,
        accounts_imported=orm_log.accounts_imported,
        transactions_imported=orm_log.transactions_imported,
        categories_imported=orm_log.categories_imported,
        status=orm_log.status,
        error_message=orm_log.error_message,
        created_at=orm_log.created_at,
    )
