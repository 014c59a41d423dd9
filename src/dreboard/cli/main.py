"""Main CLI entry point."""

import click
from dreboard.database.factories import create_sqlite_database
from dreboard.logging_config import configure_logging

# Import and register all commands at module level
from dreboard.cli.commands import (
    company,
    catalog,
    fact,
    dashboard,
    dre,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides DREBOARD_DB_PATH environment variable)",
    envvar="DREBOARD_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity (overrides DREBOARD_LOG_LEVEL environment variable)",
    envvar="DREBOARD_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Dreboard - Financial dashboard and income statement (DRE) engine.

    Record monthly facts per company, configure dashboard cards and a DRE
    account tree, and valuate them for any month.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
catalog.register_commands(cli)
fact.register_commands(cli)
dashboard.register_commands(cli)
dre.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
