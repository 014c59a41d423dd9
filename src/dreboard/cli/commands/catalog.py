"""Category and indicator catalog commands."""

import click
from dreboard.cli.error_handling import handle_domain_error
from dreboard.domain.catalog import CatalogService
from dreboard.domain.entities import CategoryType, ReferenceKind
from dreboard.domain.errors import DomainError


def print_references(references) -> None:
    for ref in references:
        code = f"[{ref.code}] " if ref.code else ""
        suffix = f" ({ref.category_type.value})" if ref.category_type is not None else ""
        click.echo(f"ID: {ref.id:3d} | {code}{ref.name}{suffix}")


def _delete(ctx, kind: ReferenceKind, reference_id: int) -> None:
    service = CatalogService(ctx.obj["db"])
    try:
        service.delete_reference(kind, reference_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted {kind.label.lower()} {reference_id}")


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice([t.value for t in CategoryType], case_sensitive=False),
    default=CategoryType.EXPENSE.value,
    help="Category type (default: expense). Expense facts are negated when summed.",
)
@click.option("--code", help="Unique category code (e.g., '3.1.01')")
@click.pass_context
def create_category(ctx, name: str, category_type: str, code: str | None):
    """Create a new category."""
    service = CatalogService(ctx.obj["db"])
    try:
        category_id = service.create_category(
            name=name, category_type=CategoryType(category_type.lower()), code=code
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created category '{name}' (ID: {category_id})")


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    service = CatalogService(ctx.obj["db"])
    categories = service.list_references(ReferenceKind.CATEGORY)
    if not categories:
        click.echo("No categories found.")
        return
    click.echo("\nCategories:")
    print_references(categories)


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.pass_context
def delete_category(ctx, category_id: int):
    """Delete a category that has no facts or DRE components."""
    _delete(ctx, ReferenceKind.CATEGORY, category_id)


@click.group()
def indicator_group():
    """Manage indicators."""
    pass


@indicator_group.command("create")
@click.argument("name")
@click.option("--code", help="Unique indicator code (e.g., 'HEADCOUNT')")
@click.pass_context
def create_indicator(ctx, name: str, code: str | None):
    """Create a new indicator."""
    service = CatalogService(ctx.obj["db"])
    try:
        indicator_id = service.create_indicator(name=name, code=code)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created indicator '{name}' (ID: {indicator_id})")


@indicator_group.command("list")
@click.pass_context
def list_indicators(ctx):
    """List all indicators."""
    service = CatalogService(ctx.obj["db"])
    indicators = service.list_references(ReferenceKind.INDICATOR)
    if not indicators:
        click.echo("No indicators found.")
        return
    click.echo("\nIndicators:")
    print_references(indicators)


@indicator_group.command("delete")
@click.argument("indicator_id", type=int)
@click.pass_context
def delete_indicator(ctx, indicator_id: int):
    """Delete an indicator that has no facts or DRE components."""
    _delete(ctx, ReferenceKind.INDICATOR, indicator_id)


def register_commands(cli):
    """Register catalog commands with main CLI."""
    cli.add_command(category_group, name="category")
    cli.add_command(indicator_group, name="indicator")
