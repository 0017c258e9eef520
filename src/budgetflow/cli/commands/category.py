"""Category commands."""

import click

from budgetflow.domain.category import CategoryService


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default spending categories that do not exist yet."""
    service = CategoryService(ctx.obj["db"])

    created = service.ensure_default_categories()
    if created:
        click.echo(f"Created {len(created)} categories: {', '.join(created)}")
    else:
        click.echo("All default categories already exist.")


@click.command("categories")
@click.pass_context
def list_categories(ctx):
    """List categories."""
    categories = CategoryService(ctx.obj["db"]).list_categories()
    if not categories:
        click.echo("No categories found. Run 'budgetflow init-categories' first.")
        return
    for cat in categories:
        click.echo(f"{cat.id} | {cat.name}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(init_categories)
    cli.add_command(list_categories)
