"""CLI error handling helpers."""

import click

from dreboard.domain.errors import DomainError
from dreboard.logging_config import get_logger

logger = get_logger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print a domain error to stderr and exit with status 1."""
    logger.debug(
        "command_failed",
        extra={"command": ctx.command_path, "error_type": type(error).__name__},
    )
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
