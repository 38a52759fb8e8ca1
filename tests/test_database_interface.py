"""Tests for Database interface returning domain models."""

import pytest
from datetime import datetime
from decimal import Decimal

from conftest import OTHER_OWNER, OWNER
from envelopesync.database.factories import create_database, create_sqlite_database
from envelopesync.domain import entities


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_account_returns_domain_model(self, temp_db):
        """Test that get_account returns a domain Account entity."""
        account_id = temp_db.create_account(
            owner_id=OWNER, name="Checking", type="checking", balance=Decimal("150.00")
        )

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.id == account_id
        assert account.owner_id == OWNER
        assert account.balance == Decimal("150.00")
        assert isinstance(account.created_at, datetime)

    def test_list_accounts_scoped_to_owner(self, temp_db):
        """Test that list_accounts only returns the owner's accounts."""
        temp_db.create_account(owner_id=OWNER, name="A", type="checking", balance=Decimal("1"))
        temp_db.create_account(owner_id=OTHER_OWNER, name="B", type="savings", balance=Decimal("2"))

        accounts = temp_db.list_accounts(OWNER)

        assert [a.name for a in accounts] == ["A"]
        assert all(isinstance(a, entities.Account) for a in accounts)

    def test_update_account(self, temp_db, sample_account):
        """Test patching balance and type."""
        updated = temp_db.update_account(
            sample_account.id, OWNER, balance=Decimal("5.50"), type="savings"
        )

        assert updated.balance == Decimal("5.50")
        assert updated.type == "savings"
        assert updated.name == sample_account.name

    def test_update_account_wrong_owner(self, temp_db, sample_account):
        """Test that another owner cannot patch the account."""
        assert temp_db.update_account(sample_account.id, OTHER_OWNER, balance=Decimal("0")) is None
        assert temp_db.get_account(sample_account.id).balance == Decimal("100.00")

    def test_categories(self, temp_db):
        """Test creating and listing categories."""
        category_id = temp_db.create_category(
            owner_id=OWNER, name="Groceries", budgeted=Decimal("400.00")
        )

        category = temp_db.get_category(category_id)
        assert isinstance(category, entities.Category)
        assert category.budgeted == Decimal("400.00")
        assert temp_db.list_categories(OWNER) == [category]
        assert temp_db.list_categories(OTHER_OWNER) == []

    def test_transactions_newest_first(self, temp_db, sample_account):
        """Test listing transactions by date descending."""
        temp_db.create_transaction(
            owner_id=OWNER,
            account_id=sample_account.id,
            date=datetime(2024, 1, 1),
            payee="Old",
            amount=Decimal("-1.00"),
        )
        temp_db.create_transaction(
            owner_id=OWNER,
            account_id=sample_account.id,
            date=datetime(2024, 2, 1),
            payee="New",
            amount=Decimal("-2.00"),
        )

        transactions = temp_db.list_transactions(OWNER)

        assert [t.payee for t in transactions] == ["New", "Old"]
        assert all(isinstance(t, entities.Transaction) for t in transactions)

    def test_transaction_exists(self, temp_db, sample_account):
        """Test exact (date, amount, payee) matching."""
        temp_db.create_transaction(
            owner_id=OWNER,
            account_id=sample_account.id,
            date=datetime(2024, 1, 15),
            payee="Shop",
            amount=Decimal("-25.00"),
        )

        assert temp_db.transaction_exists(
            sample_account.id, datetime(2024, 1, 15), Decimal("-25"), "Shop"
        )
        assert not temp_db.transaction_exists(
            sample_account.id, datetime(2024, 1, 15), Decimal("-25.01"), "Shop"
        )
        assert not temp_db.transaction_exists(
            sample_account.id, datetime(2024, 1, 16), Decimal("-25.00"), "Shop"
        )
        assert not temp_db.transaction_exists(
            sample_account.id, datetime(2024, 1, 15), Decimal("-25.00"), "shop"
        )

    def test_connections(self, temp_db):
        """Test the connection lifecycle."""
        connection_id = temp_db.create_connection(
            owner_id=OWNER, encrypted_access_url="aa:bb:cc", connection_name="Bank"
        )

        connection = temp_db.get_connection(connection_id, OWNER)
        assert isinstance(connection, entities.SimplefinConnection)
        assert connection.encrypted_access_url == "aa:bb:cc"
        assert connection.is_active is True
        assert temp_db.get_connection(connection_id, OTHER_OWNER) is None

        synced_at = datetime(2024, 3, 1, 12, 0)
        updated = temp_db.update_connection(connection_id, OWNER, last_sync=synced_at)
        assert updated.last_sync == synced_at

        assert temp_db.delete_connection(connection_id, OTHER_OWNER) is False
        assert temp_db.delete_connection(connection_id, OWNER) is True
        assert temp_db.list_connections(OWNER) == []

    def test_atomic_rolls_back(self, temp_db):
        """Test that an exception inside atomic discards every write."""
        with pytest.raises(RuntimeError):
            with temp_db.atomic():
                temp_db.create_account(
                    owner_id=OWNER, name="Temp", type="other", balance=Decimal("0")
                )
                temp_db.create_category(owner_id=OWNER, name="Temp", budgeted=Decimal("0"))
                raise RuntimeError("abort")

        assert temp_db.list_accounts(OWNER) == []
        assert temp_db.list_categories(OWNER) == []

    def test_atomic_commits(self, temp_db):
        """Test that writes inside atomic are visible to a second connection afterwards."""
        with temp_db.atomic():
            temp_db.create_account(owner_id=OWNER, name="Kept", type="other", balance=Decimal("0"))

        other = create_sqlite_database(database_path=temp_db.database_path)
        try:
            assert [a.name for a in other.list_accounts(OWNER)] == ["Kept"]
        finally:
            other.disconnect()

    def test_import_log_round_trip(self, temp_db):
        """Test appending and listing import log entries."""
        entry = temp_db.append_import_log(
            owner_id=OWNER, source="csv", status="partial", transactions_imported=3
        )

        assert isinstance(entry, entities.ImportLog)
        assert temp_db.list_import_logs(OWNER) == [entry]


def test_create_database_prefers_explicit_path(tmp_path, monkeypatch):
    """Test backend selection order in the factory."""
    monkeypatch.setenv("ENVELOPESYNC_DATABASE_URL", "sqlite:///" + str(tmp_path / "from-env.db"))

    db = create_database(database_path=str(tmp_path / "explicit.db"))
    assert db.database_url.endswith("explicit.db")

    db = create_database()
    assert db.database_url.endswith("from-env.db")
