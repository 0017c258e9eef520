"""Transaction management commands."""

import click

from budgetflow.cli.error_handling import handle_domain_error
from budgetflow.domain.account import AccountService
from budgetflow.domain.category import CategoryService
from budgetflow.domain.entities import TransactionType
from budgetflow.domain.errors import DomainError, category_name_not_found
from budgetflow.domain.transaction import TransactionService
from budgetflow.utils.amount_parser import parse_amount


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--needs-review", is_flag=True, help="Only show transactions flagged for review")
@click.pass_context
def list_transactions(ctx, account: str | None, needs_review: bool):
    """List transactions, newest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_names = {cat.id: cat.name for cat in CategoryService(db).list_categories()}

    try:
        account_id = AccountService(db).resolve_account(account).id if account else None
        transactions = service.list_transactions(
            account_id=account_id, needs_review=True if needs_review else None
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        flags = ""
        if txn.needs_review:
            flags += " [review]"
        if txn.is_recurring:
            flags += " [recurring]"
        category = category_names.get(txn.category_id, "-") if txn.category_id else "-"
        click.echo(
            f"{txn.id} | {txn.date.isoformat()} | {txn.amount:>10,.2f} | "
            f"{(txn.merchant_display_name or txn.merchant_name):30s} | "
            f"{txn.transaction_type.value:10s} | {category}{flags}"
        )


@transaction_group.command("edit")
@click.argument("transaction_id")
@click.option("--category", help="Category name")
@click.option("--display-name", help="Merchant display name")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice([t.value for t in TransactionType]),
    help="Transaction type",
)
@click.option("--apply-to-all", is_flag=True, help="Apply to every transaction from the same merchant")
@click.pass_context
def edit_transaction(
    ctx,
    transaction_id: str,
    category: str | None,
    display_name: str | None,
    transaction_type: str | None,
    apply_to_all: bool,
):
    """Correct a transaction's category, display name or type.

    Category and display-name edits are remembered for the merchant and
    applied to future imports.

    Examples:
        budgetflow transaction edit <ID> --category Dining
        budgetflow transaction edit <ID> --display-name "Blue Bottle" --apply-to-all
        budgetflow transaction edit <ID> --type transfer
    """
    db = ctx.obj["db"]

    category_id = None
    if category is not None:
        category_obj = CategoryService(db).get_category_by_name(category)
        if category_obj is None:
            click.echo(f"Error: {category_name_not_found(category)}", err=True)
            ctx.exit(1)
        category_id = category_obj.id

    try:
        TransactionService(db).update_transaction(
            transaction_id,
            category_id=category_id,
            merchant_display_name=display_name,
            transaction_type=TransactionType(transaction_type) if transaction_type else None,
            apply_to_all=apply_to_all,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("recurring")
@click.argument("transaction_id")
@click.option("--off", is_flag=True, help="Unflag instead of flag")
@click.option("--amount", help="Recurring amount to record instead of the average")
@click.option("--apply-to-all", is_flag=True, help="Flag every transaction from the same merchant")
@click.pass_context
def flag_recurring(ctx, transaction_id: str, off: bool, amount: str | None, apply_to_all: bool):
    """Flag or unflag a transaction as a recurring charge."""
    try:
        TransactionService(ctx.obj["db"]).set_recurring(
            transaction_id,
            is_recurring=not off,
            amount_override=parse_amount(amount) if amount else None,
            apply_to_all=apply_to_all,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    state = "no longer recurring" if off else "recurring"
    click.echo(f"Marked transaction {transaction_id} as {state}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
