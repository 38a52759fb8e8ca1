"""Main CLI entry point."""

import click
from envelopesync.database.factories import create_database
from envelopesync.logging import setup_logging

# Import and register all commands at module level
from envelopesync.cli.commands import import_cmd, simplefin

DEFAULT_OWNER = "local"


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=(
        "Path to SQLite database file (overrides ENVELOPESYNC_DATABASE_URL and "
        "ENVELOPESYNC_DB_PATH environment variables)"
    ),
)
@click.option(
    "--owner",
    default=DEFAULT_OWNER,
    show_default=True,
    help="Owner identity all records are read and written for",
    envvar="ENVELOPESYNC_OWNER",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, owner: str, verbose: bool):
    """Envelopesync - Budget data import and bank sync.

    Pull bank data from SimpleFIN and import YNAB or Actual Budget exports
    into a single envelope-budgeting store.
    """
    ctx.ensure_object(dict)
    ctx.obj["owner"] = owner

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        setup_logging(cli_mode=True, verbose=verbose)
        db = create_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
simplefin.register_commands(cli)
import_cmd.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
