"""Dashboard configuration and valuation commands."""

import click
from dreboard.cli.error_handling import handle_domain_error
from dreboard.cli.period_options import period_options, resolve_cli_period
from dreboard.cli.reference_resolution import resolve_company_or_exit, resolve_references_or_exit
from dreboard.domain.catalog import CatalogService
from dreboard.domain.dashboard import DashboardService, DashboardValuationService
from dreboard.domain.entities import (
    ChartType,
    DashboardItemType,
    ItemValuation,
    ResultColor,
    ValuationStatus,
)
from dreboard.domain.errors import DomainError
from dreboard.utils.periods import format_period

COLORS = {"green": ResultColor.GREEN, "red": ResultColor.RED}


def _format_variation(valuation: ItemValuation) -> str:
    if valuation.variation is None:
        return ""
    sign = "+" if valuation.variation.is_positive else "-"
    return f"{sign}{valuation.variation.percentage}% (prior {valuation.prior_value:,.2f})"


def print_valuation(valuation: ItemValuation) -> None:
    """Render one valuated dashboard item."""
    item = valuation.item
    header = f"[{item.order}] {item.title}"
    if valuation.status is ValuationStatus.FAILED:
        click.echo(f"{header:<40} FAILED: {valuation.error}")
        return

    marker = " (incomplete)" if valuation.status is ValuationStatus.UNIMPLEMENTED else ""
    click.echo(f"{header:<40} {valuation.value:>16,.2f}  {_format_variation(valuation)}{marker}")

    for row in valuation.rows:
        click.echo(f"    {row.name:<36} {row.value:>16,.2f}")
    for series in valuation.series:
        click.echo(f"    {series.name}:")
        for point in series.points:
            click.echo(f"        {format_period(point.period):<20} {point.value:>16,.2f}")


@click.group()
def dashboard_group():
    """Configure and show company dashboards."""
    pass


@dashboard_group.command("add")
@click.argument("company")
@click.argument("title")
@click.option(
    "--type",
    "item_type",
    type=click.Choice([t.value for t in DashboardItemType]),
    required=True,
    help="Item type",
)
@click.option(
    "--ref",
    "refs",
    multiple=True,
    help="Linked reference as KIND:ID or KIND:CODE (repeatable, e.g., --ref category:3 --ref dre:1)",
)
@click.option("--color", type=click.Choice(list(COLORS)), default="green", help="Result color (default: green)")
@click.option("--chart-type", type=click.Choice([t.value for t in ChartType]), help="Chart type (charts only)")
@click.option("--top-limit", type=int, help="Rows to show (lists only, 1-20, default 5)")
@click.option("--inactive", is_flag=True, help="Save the item without showing it")
@click.pass_context
def add_item(
    ctx,
    company: str,
    title: str,
    item_type: str,
    refs: tuple[str, ...],
    color: str,
    chart_type: str | None,
    top_limit: int | None,
    inactive: bool,
):
    """Append an item to a company's dashboard.

    Examples:
        dreboard dashboard add "Loja Centro" "Receita" --type categoria --ref category:1
        dreboard dashboard add 1 "Maiores despesas" --type lista --ref cat:2 --ref cat:3 --top-limit 3
    """
    db = ctx.obj["db"]
    catalog = CatalogService(db)
    company_id = resolve_company_or_exit(ctx, catalog, company)
    references = resolve_references_or_exit(ctx, catalog, refs)

    service = DashboardService(db)
    try:
        item_id = service.add_item(
            company_id=company_id,
            title=title,
            item_type=DashboardItemType(item_type),
            references=references,
            result_color=COLORS[color],
            chart_type=ChartType(chart_type) if chart_type else None,
            top_limit=top_limit,
            is_active=not inactive,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Added dashboard item '{title}' (ID: {item_id})")


@dashboard_group.command("list")
@click.argument("company")
@click.pass_context
def list_items(ctx, company: str):
    """List a company's dashboard items in display order."""
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, CatalogService(db), company)

    items = DashboardService(db).list_items(company_id)
    if not items:
        click.echo("No dashboard items found.")
        return

    click.echo("\nDashboard items:")
    click.echo("-" * 60)
    for item in items:
        status = "" if item.is_active else " (inactive)"
        refs = ", ".join(ref.name or f"{ref.kind.value}:{ref.reference_id}" for ref in item.references)
        click.echo(f"{item.order:2d}. ID: {item.id:3d} | {item.title} [{item.item_type.value}]{status}")
        click.echo(f"              {refs}")


@dashboard_group.command("remove")
@click.argument("item_id", type=int)
@click.pass_context
def remove_item(ctx, item_id: int):
    """Remove a dashboard item."""
    try:
        DashboardService(ctx.obj["db"]).remove_item(item_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Removed dashboard item {item_id}")


@dashboard_group.command("move")
@click.argument("company")
@click.argument("from_index", type=int)
@click.argument("to_index", type=int)
@click.pass_context
def move_item(ctx, company: str, from_index: int, to_index: int):
    """Move the item at FROM_INDEX to TO_INDEX (0-based positions)."""
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, CatalogService(db), company)
    try:
        items = DashboardService(db).move_item(company_id, from_index, to_index)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    for item in items:
        click.echo(f"{item.order:2d}. {item.title}")


@dashboard_group.command("show")
@click.argument("company")
@period_options
@click.pass_context
def show_dashboard(ctx, company: str, year: int | None, month: str | None):
    """Valuate a company's dashboard for a month.

    Each item is compared with the month before.
    """
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, CatalogService(db), company)
    period = resolve_cli_period(ctx, year=year, month=month)

    try:
        valuations = DashboardValuationService(db).valuate_dashboard(company_id, period)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not valuations:
        click.echo("No active dashboard items found.")
        return

    click.echo(f"\nDashboard - {format_period(period)}")
    click.echo("-" * 80)
    for valuation in valuations:
        print_valuation(valuation)


def register_commands(cli):
    """Register dashboard commands with main CLI."""
    cli.add_command(dashboard_group, name="dashboard")
