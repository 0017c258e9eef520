"""Account management commands."""

import click

from budgetflow.cli.error_handling import handle_domain_error
from budgetflow.domain.account import AccountService
from budgetflow.domain.errors import DomainError


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--institution", help="Institution name (defaults to account name if not provided)")
@click.pass_context
def create_account(ctx, name: str, institution: str | None):
    """Create a new account.

    Examples:
        budgetflow account create "Chase Checking"
        budgetflow account create "Brokerage" --institution "Fidelity"
    """
    service = AccountService(ctx.obj["db"])
    institution_name = institution if institution is not None else name

    try:
        account_id = service.create_account(name=name, institution_name=institution_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        linked = "linked" if acc.is_linked else "manual"
        click.echo(f"{acc.id} | {acc.name:20s} | {acc.institution_name:20s} | {linked}")


@account_group.command("link")
@click.argument("account", metavar="ACCOUNT")
@click.option("--access-token", required=True, help="Provider access token for the item")
@click.option("--item-id", required=True, help="Provider item ID")
@click.option("--provider-account-id", help="Provider account ID within the item")
@click.pass_context
def link_account(ctx, account: str, access_token: str, item_id: str, provider_account_id: str | None):
    """Store provider credentials for an account.

    ACCOUNT can be an account name or ID. The access token comes from the
    provider's own link flow.
    """
    service = AccountService(ctx.obj["db"])

    try:
        account_obj = service.resolve_account(account)
        service.link_account(account_obj.id, access_token, item_id, provider_account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Linked account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
