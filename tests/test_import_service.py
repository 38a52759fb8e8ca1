"""Tests for import and sync orchestration."""

import json
import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import requests

from conftest import OTHER_OWNER, OWNER, make_response, make_setup_token
from envelopesync.domain.errors import (
    ConfigurationError,
    NotFoundError,
    ParseError,
    UntrustedSetupTokenError,
    UpstreamError,
    ValidationError,
)
from envelopesync.domain.import_service import ImportService, ImportSummary
from envelopesync.domain.reconciliation import ReconciliationPolicy

SIMPLEFIN_PAYLOAD = {
    "errors": [],
    "accounts": [
        {
            "id": "sf-1",
            "name": "Premier Checking",
            "balance": "1523.45",
            "transactions": [
                {"id": "x1", "posted": 1705312800, "amount": "-42.10", "description": "COFFEE"},
                {"id": "x2", "posted": 1705399200, "amount": "2500.00", "description": "PAYROLL"},
            ],
        }
    ],
}

SCENARIO_BUDGET = {
    "budget": {
        "accounts": [{"id": "acc-1", "name": "Checking", "type": "checking", "balance": 150000}],
        "transactions": [
            {"id": "t-1", "account_id": "acc-1", "date": "2024-01-15", "amount": -25000}
        ],
    }
}


class TestYnabJsonImport:
    """Tests for YNAB JSON imports."""

    def test_end_to_end_scenario(self, import_service, temp_db):
        """Test one account and one transaction in milli-units."""
        summary = import_service.import_ynab_json(OWNER, SCENARIO_BUDGET)

        assert summary.accounts_imported == 1
        assert summary.transactions_imported == 1
        assert summary.categories_imported == 0

        (account,) = temp_db.list_accounts(OWNER)
        assert str(account.balance) == "150.00"
        (txn,) = temp_db.list_transactions(OWNER)
        assert str(txn.amount) == "-25.00"
        assert txn.account_id == account.id

        (log,) = import_service.list_import_logs(OWNER)
        assert log.status == "success"
        assert log.source == "ynab_json"
        assert log.accounts_imported == 1
        assert log.transactions_imported == 1
        assert log.file_name == "ynab-import.json"

    def test_fixture_budget(self, import_service, temp_db, fixtures_dir):
        """Test a realistic export with skipped and dangling records."""
        raw = (fixtures_dir / "ynab_budget.json").read_text()

        summary = import_service.import_ynab_json(OWNER, raw, file_name="budget.json")

        assert summary.as_dict() == {
            "success": True,
            "accountsImported": 2,
            "transactionsImported": 2,
            "categoriesImported": 2,
        }
        names = sorted(c.name for c in temp_db.list_categories(OWNER))
        assert names == ["Groceries", "Rent"]
        assert import_service.list_import_logs(OWNER)[0].file_name == "budget.json"

    def test_missing_data(self, import_service):
        """Test that empty input is rejected before a run starts."""
        with pytest.raises(ValidationError):
            import_service.import_ynab_json(OWNER, None)
        assert import_service.list_import_logs(OWNER) == []

    def test_malformed_data_is_logged(self, import_service, temp_db):
        """Test that a parse failure writes one failed entry and no data."""
        with pytest.raises(ParseError):
            import_service.import_ynab_json(OWNER, "{broken")

        (log,) = import_service.list_import_logs(OWNER)
        assert log.status == "failed"
        assert log.error_message
        assert log.accounts_imported == 0
        assert temp_db.list_accounts(OWNER) == []

    def test_failure_rolls_back_partial_writes(self, import_service, temp_db):
        """Test that a failure mid-run leaves no accounts or transactions behind."""
        with patch.object(
            temp_db, "create_transaction", side_effect=RuntimeError("disk full")
        ):
            with pytest.raises(RuntimeError):
                import_service.import_ynab_json(OWNER, SCENARIO_BUDGET)

        assert temp_db.list_accounts(OWNER) == []
        assert temp_db.list_transactions(OWNER) == []
        (log,) = import_service.list_import_logs(OWNER)
        assert log.status == "failed"
        assert log.error_message == "disk full"


class TestYnabCsvImport:
    """Tests for YNAB register CSV imports."""

    def test_import_creates_account(self, import_service, temp_db, fixtures_dir):
        """Test a CSV import into a new account."""
        csv_content = (fixtures_dir / "ynab_register.csv").read_text(encoding="utf-8")

        summary = import_service.import_ynab_csv(OWNER, csv_content, "Checking")

        assert summary.as_dict() == {
            "success": True,
            "accountsImported": 1,
            "transactionsImported": 3,
        }
        (account,) = temp_db.list_accounts(OWNER)
        assert account.name == "Checking"
        assert account.type == "checking"
        assert account.balance == Decimal("0.00")
        assert import_service.list_import_logs(OWNER)[0].source == "ynab_csv"

    def test_import_reuses_named_account(self, import_service, temp_db, fixtures_dir, sample_account):
        """Test that an existing account with the same name is reused."""
        csv_content = (fixtures_dir / "ynab_register.csv").read_text(encoding="utf-8")

        summary = import_service.import_ynab_csv(OWNER, csv_content, sample_account.name)

        assert summary.accounts_imported == 0
        assert summary.transactions_imported == 3
        assert len(temp_db.list_accounts(OWNER)) == 1
        assert temp_db.get_account(sample_account.id).balance == Decimal("100.00")
        assert len(temp_db.list_transactions(OWNER, account_id=sample_account.id)) == 3

    def test_requires_account_name(self, import_service):
        """Test that the account name is required."""
        with pytest.raises(ValidationError):
            import_service.import_ynab_csv(OWNER, "Date,Payee,Amount\n", "")

    def test_bad_row_fails_run(self, import_service, temp_db):
        """Test that a bad row fails the whole run with one ledger entry."""
        with pytest.raises(ParseError):
            import_service.import_ynab_csv(
                OWNER, "Date,Payee,Amount\n2024-01-01,A,1\nbad,B,2\n", "Wallet"
            )

        assert temp_db.list_accounts(OWNER) == []
        (log,) = import_service.list_import_logs(OWNER)
        assert log.status == "failed"
        assert "Row 3" in log.error_message


class TestActualBudgetImport:
    """Tests for Actual Budget imports."""

    def test_import(self, import_service, temp_db, fixtures_dir):
        """Test an Actual Budget export with a dangling transaction."""
        raw = (fixtures_dir / "actual_budget.json").read_text()

        summary = import_service.import_actual_budget(OWNER, raw)

        assert summary.accounts_imported == 2
        assert summary.categories_imported == 2
        assert summary.transactions_imported == 3
        assert all(c.budgeted == Decimal("0") for c in temp_db.list_categories(OWNER))
        (log,) = import_service.list_import_logs(OWNER)
        assert log.source == "actual_budget"
        assert log.status == "success"
        assert log.file_name == "actual-budget-import.json"


class TestSimplefin:
    """Tests for SimpleFIN connections and sync."""

    def test_connect(self, import_service, http_session, vault):
        """Test claiming a token and storing an encrypted connection."""
        http_session.request.return_value = make_response(
            text="https://u:p@bridge.simplefin.org/simplefin"
        )
        token = make_setup_token("https://bridge.simplefin.org/simplefin/claim/abc")

        connection = import_service.connect_simplefin(OWNER, token)

        assert connection.connection_name == "My Bank"
        assert connection.is_active is True
        assert connection.last_sync is None
        assert "u:p" not in connection.encrypted_access_url
        assert vault.decrypt(connection.encrypted_access_url) == (
            "https://u:p@bridge.simplefin.org/simplefin"
        )
        assert import_service.list_simplefin_connections(OWNER) == [connection]

    def test_connect_untrusted_token(self, import_service, http_session):
        """Test that untrusted tokens create nothing."""
        token = make_setup_token("https://evil.com/simplefin/claim/abc")

        with pytest.raises(UntrustedSetupTokenError):
            import_service.connect_simplefin(OWNER, token, connection_name="Evil")
        assert import_service.list_simplefin_connections(OWNER) == []
        http_session.request.assert_not_called()

    def test_sync(self, import_service, http_session, sample_connection, temp_db):
        """Test a first sync creates accounts and transactions."""
        http_session.request.return_value = make_response(json_data=SIMPLEFIN_PAYLOAD)

        summary = import_service.sync_simplefin(OWNER, sample_connection.id)

        assert summary.as_dict() == {
            "success": True,
            "accountsImported": 1,
            "transactionsImported": 2,
        }
        params = http_session.request.call_args.kwargs["params"]
        assert "start-date" in params
        assert "end-date" not in params
        assert temp_db.get_connection(sample_connection.id, OWNER).last_sync is not None
        (log,) = import_service.list_import_logs(OWNER)
        assert log.source == "simplefin"
        assert log.file_name is None

    def test_sync_is_idempotent(self, import_service, http_session, sample_connection, temp_db):
        """Test that an identical second sync imports nothing new."""
        http_session.request.return_value = make_response(json_data=SIMPLEFIN_PAYLOAD)

        import_service.sync_simplefin(OWNER, sample_connection.id)
        second = import_service.sync_simplefin(OWNER, sample_connection.id)

        assert second.accounts_imported == 0
        assert second.transactions_imported == 0
        assert len(temp_db.list_accounts(OWNER)) == 1
        assert len(temp_db.list_transactions(OWNER)) == 2
        assert [log.status for log in import_service.list_import_logs(OWNER)] == [
            "success",
            "success",
        ]

    def test_sync_updates_balance(self, import_service, http_session, sample_connection, temp_db):
        """Test that a re-sync updates the existing account balance."""
        http_session.request.return_value = make_response(json_data=SIMPLEFIN_PAYLOAD)
        import_service.sync_simplefin(OWNER, sample_connection.id)

        updated = json.loads(json.dumps(SIMPLEFIN_PAYLOAD))
        updated["accounts"][0]["balance"] = "99.99"
        http_session.request.return_value = make_response(json_data=updated)
        import_service.sync_simplefin(OWNER, sample_connection.id)

        (account,) = temp_db.list_accounts(OWNER)
        assert account.balance == Decimal("99.99")

    def test_sync_explicit_window(self, import_service, http_session, sample_connection):
        """Test that explicit bounds are sent as Unix seconds."""
        http_session.request.return_value = make_response(json_data={"accounts": []})

        import_service.sync_simplefin(
            OWNER,
            sample_connection.id,
            start_date=datetime(2024, 1, 15, 10, 0),
            end_date=datetime(2024, 1, 16, 10, 0),
        )

        assert http_session.request.call_args.kwargs["params"] == {
            "start-date": "1705312800",
            "end-date": "1705399200",
        }

    def test_sync_unknown_connection(self, import_service, http_session):
        """Test that a missing connection is not found and not logged."""
        with pytest.raises(NotFoundError):
            import_service.sync_simplefin(OWNER, "does-not-exist")
        http_session.request.assert_not_called()
        assert import_service.list_import_logs(OWNER) == []

    def test_sync_other_owners_connection(self, import_service, sample_connection):
        """Test that connections are scoped to their owner."""
        with pytest.raises(NotFoundError):
            import_service.sync_simplefin(OTHER_OWNER, sample_connection.id)

    def test_sync_upstream_failure(self, import_service, http_session, sample_connection, temp_db):
        """Test that upstream failures are logged and re-raised."""
        http_session.request.return_value = make_response(status_code=402, reason="Payment Required")

        with pytest.raises(UpstreamError):
            import_service.sync_simplefin(OWNER, sample_connection.id)

        (log,) = import_service.list_import_logs(OWNER)
        assert log.status == "failed"
        assert "Payment Required" in log.error_message
        assert temp_db.get_connection(sample_connection.id, OWNER).last_sync is None

    def test_sync_timeout(self, import_service, http_session, sample_connection):
        """Test that timeouts are logged as failed runs."""
        http_session.request.side_effect = requests.Timeout()

        with pytest.raises(UpstreamError):
            import_service.sync_simplefin(OWNER, sample_connection.id)
        assert import_service.list_import_logs(OWNER)[0].status == "failed"

    def test_sync_dedupe_can_be_disabled(self, temp_db, vault, simplefin_client, http_session, sample_connection):
        """Test a per-source policy override."""
        service = ImportService(
            temp_db,
            vault=vault,
            simplefin_client=simplefin_client,
            policies={"simplefin": ReconciliationPolicy(dedupe=False, match_existing_accounts=True)},
        )
        http_session.request.return_value = make_response(json_data=SIMPLEFIN_PAYLOAD)

        service.sync_simplefin(OWNER, sample_connection.id)
        second = service.sync_simplefin(OWNER, sample_connection.id)

        assert second.accounts_imported == 0
        assert second.transactions_imported == 2

    def test_delete_connection(self, import_service, sample_connection):
        """Test removing a connection."""
        import_service.delete_simplefin_connection(OWNER, sample_connection.id)
        assert import_service.list_simplefin_connections(OWNER) == []

        with pytest.raises(NotFoundError):
            import_service.delete_simplefin_connection(OWNER, sample_connection.id)

    def test_requires_vault(self, temp_db):
        """Test that SimpleFIN operations need a vault."""
        service = ImportService(temp_db)
        token = make_setup_token("https://bridge.simplefin.org/simplefin/claim/abc")

        with pytest.raises(ConfigurationError):
            service.connect_simplefin(OWNER, token)


def test_summary_as_dict_omits_categories_for_sync():
    """Test the response shape for runs without categories."""
    summary = ImportSummary(source="simplefin", accounts_imported=1, transactions_imported=4)
    assert summary.as_dict() == {"success": True, "accountsImported": 1, "transactionsImported": 4}
