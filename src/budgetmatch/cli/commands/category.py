"""Category management commands."""

import click
from budgetmatch.cli.error_handling import handle_domain_error
from budgetmatch.domain.category import CategoryService
from budgetmatch.domain.entities import EntryType
from budgetmatch.domain.errors import DomainError

TYPE_CHOICE = click.Choice([t.value for t in EntryType], case_sensitive=False)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="Only show this type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories, children indented under their parent."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(ctx.obj["user_id"], category_type=category_type)
    if not categories:
        click.echo("No categories found. Run 'category init' to create default categories.")
        return

    children: dict[int | None, list] = {}
    for cat in categories:
        children.setdefault(cat.parent_id, []).append(cat)
    known_ids = {cat.id for cat in categories}

    def print_tree(parent_id, indent: int) -> None:
        for cat in children.get(parent_id, []):
            click.echo(f"{'  ' * indent}{cat.name} [{cat.category_type.value}] (ID: {cat.id})")
            print_tree(cat.id, indent + 1)

    click.echo("\nCategories:")
    # Roots are categories whose parent is absent from the filtered listing
    for parent_id in children:
        if parent_id is None or parent_id not in known_ids:
            print_tree(parent_id, 0)


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Parent category name")
@click.option("--type", "category_type", type=TYPE_CHOICE, default="expense", help="Category type (default: expense)")
@click.pass_context
def create_category(ctx, name: str, parent: str | None, category_type: str):
    """Create a new category."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(
            user_id=ctx.obj["user_id"],
            name=name,
            category_type=category_type.lower(),
            parent_name=parent,
        )
        parent_str = f" under '{parent}'" if parent else ""
        click.echo(f"Created category '{name}'{parent_str} (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default income and expense categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    created = service.seed_default_categories(ctx.obj["user_id"])
    if not created:
        click.echo("Default categories already exist.")
        return
    click.echo(f"Created {len(created)} default categories.")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
