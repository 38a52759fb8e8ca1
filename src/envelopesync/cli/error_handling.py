"""CLI error handling helpers."""

import click

from envelopesync.domain.errors import DomainError, UpstreamError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, UpstreamError) and error.status_code is not None:
        click.echo(f"Upstream status: {error.status_code}", err=True)
    ctx.exit(1)
