"""End-to-end tests for the command line interface."""

from datetime import date, timedelta
from decimal import Decimal

from budgetflow.cli.main import cli
from budgetflow.providers.base import SyncPage

STATEMENT = (
    "Date,Description,Amount\n"
    "01/10/2024,STARBUCKS STORE #123,5.75\n"
    "01/11/2024,WHOLE FOODS MARKET,82.10\n"
)


def run(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def test_help_does_not_need_database(cli_runner):
    """Showing help works without a database."""
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Budgetflow" in result.output


def test_init_categories_is_idempotent(cli_runner, temp_db):
    """Seeding twice creates the defaults once."""
    result = run(cli_runner, temp_db, "init-categories")
    assert result.exit_code == 0
    assert "Dining" in result.output

    result = run(cli_runner, temp_db, "init-categories")
    assert result.exit_code == 0
    assert "already exist" in result.output


def test_account_create_and_list(cli_runner, temp_db):
    """Accounts created from the CLI show up in the listing."""
    result = run(cli_runner, temp_db, "account", "create", "Chase Checking", "--institution", "Chase")
    assert result.exit_code == 0
    assert "ID:" in result.output

    result = run(cli_runner, temp_db, "account", "list")
    assert result.exit_code == 0
    assert "Chase Checking" in result.output
    assert "manual" in result.output


def test_duplicate_account_name_fails(cli_runner, temp_db, sample_account):
    """A second account with the same name is rejected."""
    result = run(cli_runner, temp_db, "account", "create", sample_account.name)
    assert result.exit_code == 1
    assert "Error" in result.output


def test_preview_then_import(cli_runner, temp_db, sample_account, sample_categories, write_csv):
    """Preview writes nothing; import stores the rows and a batch."""
    path = write_csv(STATEMENT)

    result = run(cli_runner, temp_db, "preview", str(path), "--account", sample_account.name)
    assert result.exit_code == 0
    assert "2 new, 0 duplicates" in result.output
    assert "Starbucks" in result.output
    assert temp_db.list_transactions(sample_account.id) == []

    result = run(cli_runner, temp_db, "import", str(path), "--account", sample_account.name)
    assert result.exit_code == 0
    assert "Imported: 2 transactions" in result.output

    result = run(cli_runner, temp_db, "import", str(path), "--account", sample_account.name)
    assert result.exit_code == 0
    assert "Imported: 0 transactions" in result.output
    assert "Skipped: 2 duplicates" in result.output

    result = run(cli_runner, temp_db, "imports", "list", "--account", sample_account.name)
    assert result.exit_code == 0
    assert "statement.csv" in result.output
    assert "2 transactions" in result.output


def test_import_unknown_account(cli_runner, temp_db, write_csv):
    """Importing into a missing account fails cleanly."""
    path = write_csv(STATEMENT)
    result = run(cli_runner, temp_db, "import", str(path), "--account", "Nope")
    assert result.exit_code == 1
    assert "Error" in result.output


def test_delete_import(cli_runner, temp_db, sample_account, import_service):
    """Deleting a batch removes its transactions."""
    result = import_service.import_csv(sample_account.id, STATEMENT.encode("utf-8"), "jan.csv")

    cli_result = run(cli_runner, temp_db, "imports", "delete", result["import_id"], "--yes")

    assert cli_result.exit_code == 0
    assert "2 transactions" in cli_result.output
    assert temp_db.list_transactions(sample_account.id) == []


def test_transaction_list_and_edit(cli_runner, temp_db, sample_categories, insert_transaction):
    """Review items can be listed and corrected by category name."""
    txn_id = insert_transaction(merchant_name="ZQXJ 123", merchant_display_name="Zqxj", needs_review=True)

    result = run(cli_runner, temp_db, "transaction", "list", "--needs-review")
    assert result.exit_code == 0
    assert txn_id in result.output
    assert "[review]" in result.output

    result = run(cli_runner, temp_db, "transaction", "edit", txn_id, "--category", "Groceries")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "transaction", "list", "--needs-review")
    assert "No transactions found." in result.output


def test_edit_unknown_category(cli_runner, temp_db, sample_categories, insert_transaction):
    """An unknown category name is reported as an error."""
    txn_id = insert_transaction()
    result = run(cli_runner, temp_db, "transaction", "edit", txn_id, "--category", "Nope")
    assert result.exit_code == 1


def test_transaction_recurring_flag(cli_runner, temp_db, insert_transaction):
    """Flagging from the CLI records a recurring charge."""
    txn_id = insert_transaction(merchant_name="GYM", merchant_display_name="Gym")

    result = run(cli_runner, temp_db, "transaction", "recurring", txn_id, "--amount", "29.99")
    assert result.exit_code == 0

    result = run(cli_runner, temp_db, "recurring", "list")
    assert "Gym" in result.output
    assert "29.99" in result.output


def test_recurring_detect(cli_runner, temp_db, insert_transaction):
    """Monthly charges in the last year are detected."""
    today = date.today()
    for days_ago in (60, 30, 0):
        insert_transaction(
            date=today - timedelta(days=days_ago),
            amount=Decimal("15.49"),
            merchant_name="NETFLIX.COM",
            merchant_display_name="Netflix",
        )

    result = run(cli_runner, temp_db, "recurring", "detect")

    assert result.exit_code == 0
    assert "Netflix" in result.output
    assert "monthly" in result.output


def test_sync_with_injected_client(cli_runner, temp_db, linked_account, fake_client, provider_txn):
    """The sync command pulls pages from the aggregation client."""
    fake_client.pages["access-token-1"] = [
        SyncPage(added=[provider_txn("p1", "5.75", name="STARBUCKS STORE #123")], next_cursor="c1")
    ]

    result = run(cli_runner, temp_db, "sync", obj={"client": fake_client})

    assert result.exit_code == 0
    assert "+1 added" in result.output
    assert temp_db.get_transaction_by_provider_id("p1") is not None


def test_sync_failure_exits_nonzero(cli_runner, temp_db, linked_account, fake_client):
    """A failing account makes the command exit with status 1."""
    from budgetflow.domain.errors import ProviderError

    fake_client.pages["access-token-1"] = [ProviderError("down")]

    result = run(cli_runner, temp_db, "sync", obj={"client": fake_client})

    assert result.exit_code == 1
    assert "failed: down" in result.output
