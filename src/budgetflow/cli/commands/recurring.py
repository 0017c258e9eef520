"""Recurring charge commands."""

import click

from budgetflow.domain.recurring import RecurringService


def _echo_recurring(items) -> None:
    if not items:
        click.echo("No recurring charges found.")
        return
    for item in items:
        status = "" if item.is_active else " (inactive)"
        click.echo(
            f"{item.merchant_display_name:30s} {item.average_amount:>10,.2f} "
            f"{item.frequency.value:8s} last seen {item.last_seen_date.isoformat()}{status}"
        )


@click.group("recurring")
def recurring_group():
    """Detect and list recurring charges."""
    pass


@recurring_group.command("detect")
@click.pass_context
def detect_recurring(ctx):
    """Scan the last twelve months of expenses for recurring charges."""
    _echo_recurring(RecurringService(ctx.obj["db"]).detect_recurring())


@recurring_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive charges")
@click.pass_context
def list_recurring(ctx, include_inactive: bool):
    """List recurring charges, largest first."""
    _echo_recurring(RecurringService(ctx.obj["db"]).list_recurring(include_inactive=include_inactive))


def register_commands(cli):
    """Register recurring commands with main CLI."""
    cli.add_command(recurring_group)
