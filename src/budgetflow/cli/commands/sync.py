"""Provider sync command."""

import click

from budgetflow.cli.error_handling import handle_domain_error
from budgetflow.domain.account import AccountService
from budgetflow.domain.errors import DomainError
from budgetflow.domain.sync import ProviderSyncService
from budgetflow.providers.plaid_client import PlaidClient


def _client(ctx):
    """Return the aggregation client from ctx.obj, or a Plaid client built from the environment."""
    client = ctx.obj.get("client")
    if client is None:
        client = PlaidClient.from_env()
    return client


@click.command("sync")
@click.option("--account", help="Account name or ID (default: every linked account)")
@click.pass_context
def sync_transactions(ctx, account: str | None):
    """Pull new, changed and removed transactions from linked accounts."""
    db = ctx.obj["db"]

    try:
        service = ProviderSyncService(db, _client(ctx))
        if account is not None:
            account_obj = AccountService(db).resolve_account(account)
            result = service.sync_account(account_obj.id)
            click.echo(
                f"Synced '{account_obj.name}': +{result['added']} added, "
                f"~{result['modified']} modified, -{result['removed']} removed"
            )
            for error in result["errors"]:
                click.echo(f"  {error}", err=True)
            return

        summary = service.sync_all_accounts()
    except DomainError as e:
        handle_domain_error(ctx, e)

    for account_id, result in summary["results"].items():
        click.echo(
            f"{account_id}: +{result['added']} added, "
            f"~{result['modified']} modified, -{result['removed']} removed"
        )
    for account_id in summary["skipped"]:
        click.echo(f"{account_id}: skipped (additional consent required)")
    for account_id, message in summary["failed"].items():
        click.echo(f"{account_id}: failed: {message}", err=True)
    if summary["failed"]:
        ctx.exit(1)


def register_commands(cli):
    """Register sync command with main CLI."""
    cli.add_command(sync_transactions)
