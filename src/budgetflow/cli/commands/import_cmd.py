"""CSV preview, import and backfill commands."""

from pathlib import Path

import click

from budgetflow.cli.error_handling import handle_domain_error
from budgetflow.domain.account import AccountService
from budgetflow.domain.csv_import import CSVImportService
from budgetflow.domain.errors import DomainError


def _resolve_account_id(ctx, account: str) -> str:
    try:
        return AccountService(ctx.obj["db"]).resolve_account(account).id
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.command("preview")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID")
@click.pass_context
def preview_csv(ctx, csv_file: str, account: str):
    """Show how a CSV file would be imported without saving anything."""
    account_id = _resolve_account_id(ctx, account)
    service = CSVImportService(ctx.obj["db"])

    try:
        result = service.preview_csv(account_id, Path(csv_file).read_bytes())
    except DomainError as e:
        handle_domain_error(ctx, e)

    for txn in result["transactions"]:
        marker = "DUP" if txn.is_duplicate else "NEW"
        review = " (review)" if txn.needs_review else ""
        click.echo(
            f"{marker} {txn.date.isoformat()} {txn.amount:>10,.2f} "
            f"{txn.merchant_display_name:30s} {txn.transaction_type.value:10s} "
            f"{txn.category_name or '-'}{review}"
        )
    click.echo(f"\n{result['new_count']} new, {result['duplicate_count']} duplicates")
    for error in result["errors"]:
        click.echo(f"  {error}", err=True)


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID")
@click.option("--keep-duplicates", is_flag=True, help="Import rows flagged as duplicates too")
@click.pass_context
def import_csv(ctx, csv_file: str, account: str, keep_duplicates: bool):
    """Import transactions from a CSV file."""
    account_id = _resolve_account_id(ctx, account)
    service = CSVImportService(ctx.obj["db"])
    path = Path(csv_file)

    try:
        result = service.import_csv(
            account_id,
            path.read_bytes(),
            file_name=path.name,
            skip_duplicates=not keep_duplicates,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nImport complete:")
    click.echo(f"  Imported: {result['imported']} transactions")
    click.echo(f"  Skipped: {result['skipped']} duplicates")
    if result["import_id"]:
        click.echo(f"  Import ID: {result['import_id']}")
    if result["errors"]:
        click.echo(f"  Errors: {result['error_count']}")
        for error in result["errors"]:
            click.echo(f"    {error}", err=True)


@click.group("imports")
def imports_group():
    """Manage CSV import batches."""
    pass


@imports_group.command("list")
@click.option("--account", required=True, help="Account name or ID")
@click.pass_context
def list_imports(ctx, account: str):
    """List CSV imports for an account."""
    account_id = _resolve_account_id(ctx, account)
    batches = CSVImportService(ctx.obj["db"]).list_imports(account_id)
    if not batches:
        click.echo("No imports found.")
        return

    for batch in batches:
        created = batch.created_at.strftime("%Y-%m-%d %H:%M") if batch.created_at else ""
        click.echo(f"{batch.id} | {created} | {batch.file_name:30s} | {batch.transaction_count} transactions")


@imports_group.command("delete")
@click.argument("import_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_import(ctx, import_id: str, yes: bool):
    """Delete an import batch and every transaction it created."""
    if not yes and not click.confirm(f"Delete import {import_id} and its transactions?"):
        click.echo("Deletion cancelled.")
        return

    try:
        count = CSVImportService(ctx.obj["db"]).delete_import(import_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted import {import_id} ({count} transactions)")


@click.command("backfill")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID")
@click.pass_context
def backfill_references(ctx, csv_file: str, account: str):
    """Attach references from a CSV file to already-stored transactions."""
    account_id = _resolve_account_id(ctx, account)

    try:
        result = CSVImportService(ctx.obj["db"]).backfill_references(
            account_id, Path(csv_file).read_bytes()
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Backfill complete: {result['updated']} updated, {result['skipped']} skipped of {result['total']}")


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(preview_csv)
    cli.add_command(import_csv)
    cli.add_command(imports_group)
    cli.add_command(backfill_references)
