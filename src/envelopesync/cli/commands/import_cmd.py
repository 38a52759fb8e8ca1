"""Budget export import commands."""

import json
from pathlib import Path

import click
from envelopesync.cli.error_handling import handle_domain_error
from envelopesync.domain.errors import DomainError
from envelopesync.domain.import_service import ImportService, ImportSummary


def _echo_summary(summary: ImportSummary) -> None:
    click.echo(f"\nImport complete:")
    click.echo(f"  Accounts imported: {summary.accounts_imported}")
    click.echo(f"  Transactions imported: {summary.transactions_imported}")
    if summary.categories_imported is not None:
        click.echo(f"  Categories imported: {summary.categories_imported}")


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8-sig")


@click.group()
def import_group():
    """Import YNAB and Actual Budget exports."""
    pass


@import_group.command("ynab-json")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_ynab_json(ctx, json_file: str):
    """Import a YNAB budget export (JSON).

    Examples:
        envelopesync import ynab-json budget.json
    """
    service = ImportService(ctx.obj["db"])
    try:
        summary = service.import_ynab_json(
            ctx.obj["owner"], _read_text(json_file), file_name=Path(json_file).name
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    _echo_summary(summary)


@import_group.command("ynab-csv")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", "account_name", required=True, help="Account to import into")
@click.pass_context
def import_ynab_csv(ctx, csv_file: str, account_name: str):
    """Import a YNAB register CSV into one account.

    An existing account with the same name is reused; otherwise a checking
    account is created.

    Examples:
        envelopesync import ynab-csv register.csv --account "Checking"
    """
    service = ImportService(ctx.obj["db"])
    try:
        summary = service.import_ynab_csv(
            ctx.obj["owner"],
            _read_text(csv_file),
            account_name,
            file_name=Path(csv_file).name,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    _echo_summary(summary)


@import_group.command("actual-budget")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_actual_budget(ctx, json_file: str):
    """Import an Actual Budget export (JSON).

    Examples:
        envelopesync import actual-budget actual-export.json
    """
    service = ImportService(ctx.obj["db"])
    try:
        summary = service.import_actual_budget(
            ctx.obj["owner"], _read_text(json_file), file_name=Path(json_file).name
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    _echo_summary(summary)


@import_group.command("logs")
@click.option("--json", "as_json", is_flag=True, help="Print entries as JSON")
@click.pass_context
def list_logs(ctx, as_json: bool):
    """Show import history, newest first."""
    service = ImportService(ctx.obj["db"])
    logs = service.list_import_logs(ctx.obj["owner"])

    if as_json:
        entries = [
            {
                "id": log.id,
                "source": log.source,
                "fileName": log.file_name,
                "accountsImported": log.accounts_imported,
                "transactionsImported": log.transactions_imported,
                "categoriesImported": log.categories_imported,
                "status": log.status,
                "errorMessage": log.error_message,
                "createdAt": log.created_at.isoformat() if log.created_at else None,
            }
            for log in logs
        ]
        click.echo(json.dumps(entries, indent=2))
        return

    if not logs:
        click.echo("No imports found.")
        return

    click.echo("\nImport history:")
    click.echo("-" * 80)
    for log in logs:
        created = log.created_at.strftime("%Y-%m-%d %H:%M:%S") if log.created_at else ""
        line = (
            f"{created} | {log.source:13s} | {log.status:7s} | "
            f"{log.accounts_imported} acct, {log.transactions_imported} txn, "
            f"{log.categories_imported} cat"
        )
        if log.file_name:
            line += f" | {log.file_name}"
        click.echo(line)
        if log.error_message:
            click.echo(f"    {log.error_message}")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
