"""Raw fact commands."""

import click
from dreboard.cli.error_handling import handle_domain_error
from dreboard.cli.period_options import period_options, resolve_cli_period
from dreboard.cli.reference_resolution import resolve_company_or_exit, resolve_references_or_exit
from dreboard.domain.catalog import CatalogService
from dreboard.domain.entities import Period, ReferenceKind
from dreboard.domain.errors import DomainError
from dreboard.utils.amount_parser import parse_amount


@click.group()
def fact_group():
    """Record and list raw facts."""
    pass


@fact_group.command("add")
@click.argument("company")
@click.argument("reference")
@click.argument("amount")
@period_options
@click.pass_context
def add_fact(ctx, company: str, reference: str, amount: str, year: int | None, month: str | None):
    """Record an amount for a category or indicator.

    COMPANY can be a trading name or ID. REFERENCE is KIND:ID or KIND:CODE.
    Amounts are stored as entered; expense categories are negated when summed.

    Examples:
        dreboard fact add "Loja Centro" category:3 "1.234,56" --year 2024 --month março
        dreboard fact add 1 indicador:HEADCOUNT 12 --year 2024 --month 3
    """
    service = CatalogService(ctx.obj["db"])
    company_id = resolve_company_or_exit(ctx, service, company)
    (ref,) = resolve_references_or_exit(ctx, service, (reference,))
    period = resolve_cli_period(ctx, year=year, month=month)

    try:
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)
        return

    try:
        fact_id = service.record_fact(
            company_id=company_id,
            period=period,
            amount=value,
            reference_kind=ref.kind,
            reference_id=ref.reference_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Recorded {value:,.2f} for '{ref.name}' in {period} (ID: {fact_id})")


@fact_group.command("list")
@click.argument("company")
@click.option("--year", type=int, help="Only list facts for this year (requires --month)")
@click.option("--month", help="Only list facts for this month")
@click.pass_context
def list_facts(ctx, company: str, year: int | None, month: str | None):
    """List recorded facts for a company."""
    service = CatalogService(ctx.obj["db"])
    company_id = resolve_company_or_exit(ctx, service, company)

    period: Period | None = None
    if year is not None or month is not None:
        period = resolve_cli_period(ctx, year=year, month=month)

    facts = service.list_facts(company_id, period)
    if not facts:
        click.echo("No facts found.")
        return

    names = {ref.key: ref.name for ref in service.list_references()}
    click.echo(f"\n{'ID':>4}  {'Period':<8}  {'Kind':<10}  {'Reference':<30}  {'Amount':>14}")
    click.echo("-" * 74)
    for fact in facts:
        kind = "category" if fact.reference_kind is ReferenceKind.CATEGORY else "indicator"
        name = names.get(fact.reference_key, f"#{fact.reference_id}")
        click.echo(
            f"{fact.id:>4}  {str(fact.period):<8}  {kind:<10}  {name[:30]:<30}  {fact.amount:>14,.2f}"
        )


def register_commands(cli):
    """Register fact commands with main CLI."""
    cli.add_command(fact_group, name="fact")
