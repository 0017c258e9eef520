"""Main CLI entry point."""

import logging

import click

from budgetflow.config import DB_PATH_ENV, log_level
from budgetflow.database.factories import create_sqlite_database

# Import and register all commands at module level
from budgetflow.cli.commands import (
    account,
    category,
    import_cmd,
    recurring,
    sync,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Budgetflow - transaction ingestion and classification.

    Import bank CSV exports or sync linked accounts, then review the
    detected types, categories and recurring charges.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=log_level(verbose),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
import_cmd.register_commands(cli)
sync.register_commands(cli)
recurring.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
