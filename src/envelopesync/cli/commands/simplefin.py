"""SimpleFIN connection and sync commands."""

import click
from envelopesync.cli.error_handling import handle_domain_error
from envelopesync.domain.errors import DomainError
from envelopesync.domain.import_service import DEFAULT_SYNC_DAYS, ImportService
from envelopesync.domain.vault import CredentialVault
from envelopesync.utils.date_parser import days_ago


def _import_service(ctx) -> ImportService:
    """Build the import service with a vault keyed from the environment."""
    return ImportService(ctx.obj["db"], vault=CredentialVault.from_environment())


@click.group()
def simplefin_group():
    """Manage SimpleFIN bank connections."""
    pass


@simplefin_group.command("connect")
@click.argument("setup_token", metavar="SETUP_TOKEN")
@click.option("--name", help="Connection name (defaults to 'My Bank')")
@click.pass_context
def connect(ctx, setup_token: str, name: str | None):
    """Claim a SimpleFIN setup token and store the connection.

    SETUP_TOKEN is the base64 token issued by the SimpleFIN bridge.
    The claimed access URL is stored encrypted; an encryption secret must
    be set in ENVELOPESYNC_ENCRYPTION_KEY, ENCRYPTION_KEY or SESSION_SECRET.

    Examples:
        envelopesync simplefin connect aHR0cHM6Ly9icmlkZ2Uuc2ltcGxlZmluLm9yZy9zaW1wbGVmaW4vY2xhaW0vMTIz
        envelopesync simplefin connect TOKEN --name "Credit Union"
    """
    owner = ctx.obj["owner"]
    try:
        connection = _import_service(ctx).connect_simplefin(
            owner, setup_token, connection_name=name
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Connected '{connection.connection_name}' (ID: {connection.id})")


@simplefin_group.command("list")
@click.pass_context
def list_connections(ctx):
    """List SimpleFIN connections."""
    service = ImportService(ctx.obj["db"])
    connections = service.list_simplefin_connections(ctx.obj["owner"])
    if not connections:
        click.echo("No SimpleFIN connections found.")
        return

    click.echo("\nSimpleFIN connections:")
    click.echo("-" * 80)
    for conn in connections:
        last_sync = conn.last_sync.strftime("%Y-%m-%d %H:%M") if conn.last_sync else "never"
        status = "active" if conn.is_active else "inactive"
        click.echo(
            f"ID: {conn.id} | {conn.connection_name:20s} | {status:8s} | Last sync: {last_sync}"
        )


@simplefin_group.command("sync")
@click.argument("connection_id", metavar="CONNECTION_ID")
@click.option(
    "--days",
    type=click.IntRange(min=1),
    default=DEFAULT_SYNC_DAYS,
    show_default=True,
    help="Number of days of history to fetch",
)
@click.pass_context
def sync(ctx, connection_id: str, days: int):
    """Fetch recent accounts and transactions for a connection.

    Re-running a sync does not duplicate accounts or transactions.

    Examples:
        envelopesync simplefin sync 6f1c2d7e-0c1a-4a43-9a54-1c1e5b9b7b1a
        envelopesync simplefin sync 6f1c2d7e-0c1a-4a43-9a54-1c1e5b9b7b1a --days 7
    """
    owner = ctx.obj["owner"]
    try:
        summary = _import_service(ctx).sync_simplefin(
            owner, connection_id, start_date=days_ago(days)
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nSync complete:")
    click.echo(f"  Accounts imported: {summary.accounts_imported}")
    click.echo(f"  Transactions imported: {summary.transactions_imported}")


@simplefin_group.command("remove")
@click.argument("connection_id", metavar="CONNECTION_ID")
@click.pass_context
def remove(ctx, connection_id: str):
    """Remove a SimpleFIN connection.

    Accounts and transactions already synced are kept.
    """
    service = ImportService(ctx.obj["db"])
    try:
        service.delete_simplefin_connection(ctx.obj["owner"], connection_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Removed SimpleFIN connection {connection_id}")


def register_commands(cli):
    """Register SimpleFIN commands with main CLI."""
    cli.add_command(simplefin_group, name="simplefin")
