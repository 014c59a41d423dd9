"""DRE (income statement) model and statement commands."""

import click
from dreboard.cli.error_handling import handle_domain_error
from dreboard.cli.period_options import period_options, resolve_cli_period
from dreboard.cli.reference_resolution import resolve_company_or_exit, resolve_references_or_exit
from dreboard.domain.catalog import CatalogService
from dreboard.domain.dashboard import DashboardValuationService
from dreboard.domain.dre import DreModelService
from dreboard.domain.entities import AccountSymbol, AccountType, ReferenceKind, ValuationStatus
from dreboard.domain.errors import DomainError
from dreboard.utils.amount_parser import parse_weight
from dreboard.utils.periods import format_period

SYMBOLS = {"plus": AccountSymbol.ADD, "minus": AccountSymbol.SUBTRACT, "result": AccountSymbol.RESULT}

INDENT_SIZE = 4

UNIMPLEMENTED_NOTE = "* Account type not supported yet; valued as zero."


def _component_label(component, names) -> str:
    name = component.display_name or names.get(component.reference_key, f"#{component.reference_id}")
    kind = "category" if component.reference_kind is ReferenceKind.CATEGORY else "indicator"
    weight = "" if component.weight == 1 else f" x{component.weight.normalize()}"
    return f"{name} ({kind} {component.reference_id}){weight}"


def print_dre_tree(forest, names, valuation=None) -> None:
    """Print principal accounts with their secondary accounts and components.

    With a valuation, each account line ends with its value; accounts that
    could not be computed are marked with an asterisk.
    """
    for account in forest:
        symbol = account.symbol.value if account.symbol is not None else " "
        hidden = " (hidden)" if not account.visible else ""
        line = f"{symbol} {account.name} (ID: {account.id}, {account.account_type.value}){hidden}"
        if valuation is not None:
            marker = " *" if valuation.is_incomplete(account.id) else ""
            line = f"{line:<60} {valuation.value_of(account.id):>16,.2f}{marker}"
        click.echo(line)

        pad = " " * INDENT_SIZE
        for component in account.components:
            click.echo(f"{pad}- {_component_label(component, names)} [component {component.id}]")
        for secondary in account.secondary_accounts:
            scope = ""
            if secondary.company_ids:
                scope = f" companies: {', '.join(str(cid) for cid in secondary.company_ids)}"
            click.echo(f"{pad}{secondary.name} (ID: {secondary.id}){scope}")
            for component in secondary.components:
                click.echo(f"{pad * 2}- {_component_label(component, names)} [component {component.id}]")


@click.group()
def dre_group():
    """Manage the DRE account tree and show income statements."""
    pass


@dre_group.group("account")
def account_group():
    """Manage principal DRE accounts."""
    pass


@account_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType]),
    default=AccountType.SIMPLE.value,
    help="Account type (default: simples)",
)
@click.option(
    "--symbol",
    type=click.Choice(list(SYMBOLS) + ["none"]),
    default="plus",
    help="How the account rolls into the statement (default: plus)",
)
@click.option("--order", "default_order", type=int, default=0, help="Statement position")
@click.option("--hidden", is_flag=True, help="Hide the account from the statement display")
@click.pass_context
def create_account(ctx, name: str, account_type: str, symbol: str, default_order: int, hidden: bool):
    """Create a principal DRE account."""
    service = DreModelService(ctx.obj["db"])
    try:
        account_id = service.create_account(
            name=name,
            account_type=AccountType(account_type),
            symbol=SYMBOLS.get(symbol),
            default_order=default_order,
            visible=not hidden,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created DRE account '{name}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List principal DRE accounts in statement order."""
    forest = DreModelService(ctx.obj["db"]).get_forest()
    if not forest:
        click.echo("No DRE accounts found.")
        return
    for account in forest:
        symbol = account.symbol.value if account.symbol is not None else " "
        click.echo(f"{account.default_order:3d} {symbol} ID: {account.id:3d} | {account.name}")


@account_group.command("delete")
@click.argument("account_id", type=int)
@click.pass_context
def delete_account(ctx, account_id: int):
    """Delete a principal account with its secondary accounts and components."""
    try:
        DreModelService(ctx.obj["db"]).delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted DRE account {account_id}")


@dre_group.group("secondary")
def secondary_group():
    """Manage secondary DRE accounts."""
    pass


@secondary_group.command("create")
@click.argument("account_id", type=int)
@click.argument("name")
@click.option("--order", type=int, default=0, help="Position among siblings")
@click.option("--company", "companies", multiple=True, help="Restrict to a company (repeatable)")
@click.pass_context
def create_secondary(ctx, account_id: int, name: str, order: int, companies: tuple[str, ...]):
    """Create a secondary account under ACCOUNT_ID."""
    db = ctx.obj["db"]
    catalog = CatalogService(db)
    company_ids = [resolve_company_or_exit(ctx, catalog, company) for company in companies]
    try:
        secondary_id = DreModelService(db).create_secondary_account(
            account_id=account_id, name=name, order=order, company_ids=company_ids
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created secondary account '{name}' (ID: {secondary_id})")


@secondary_group.command("delete")
@click.argument("secondary_id", type=int)
@click.pass_context
def delete_secondary(ctx, secondary_id: int):
    """Delete a secondary account and its components."""
    try:
        DreModelService(ctx.obj["db"]).delete_secondary_account(secondary_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted secondary account {secondary_id}")


@dre_group.group("component")
def component_group():
    """Manage DRE components."""
    pass


@component_group.command("create")
@click.argument("account_id", type=int)
@click.argument("reference")
@click.option("--weight", default="1", help="Multiplier applied to the reference total (default: 1)")
@click.option("--order", type=int, default=0, help="Position among siblings")
@click.option("--name", "display_name", help="Display name override")
@click.option("--secondary", "secondary_account_id", type=int, help="Secondary account of ACCOUNT_ID")
@click.pass_context
def create_component(
    ctx,
    account_id: int,
    reference: str,
    weight: str,
    order: int,
    display_name: str | None,
    secondary_account_id: int | None,
):
    """Link a category or indicator to a DRE account.

    REFERENCE is KIND:ID or KIND:CODE, e.g. category:3 or indicador:HEADCOUNT.
    """
    db = ctx.obj["db"]
    (ref,) = resolve_references_or_exit(ctx, CatalogService(db), (reference,))
    try:
        parsed_weight = parse_weight(weight)
    except ValueError as e:
        click.echo(f"Error: Invalid weight: {e}", err=True)
        ctx.exit(1)
        return

    try:
        component_id = DreModelService(db).create_component(
            account_id=account_id,
            reference_kind=ref.kind,
            reference_id=ref.reference_id,
            weight=parsed_weight,
            order=order,
            display_name=display_name,
            secondary_account_id=secondary_account_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created component for '{ref.name}' (ID: {component_id})")


@component_group.command("delete")
@click.argument("component_id", type=int)
@click.pass_context
def delete_component(ctx, component_id: int):
    """Delete a DRE component."""
    try:
        DreModelService(ctx.obj["db"]).delete_component(component_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted component {component_id}")


@dre_group.command("tree")
@click.option("--company", help="Show the tree as seen by a company, with account values")
@period_options
@click.pass_context
def show_tree(ctx, company: str | None, year: int | None, month: str | None):
    """Show the DRE account tree."""
    db = ctx.obj["db"]
    catalog = CatalogService(db)
    company_id = resolve_company_or_exit(ctx, catalog, company) if company else None

    try:
        forest = DreModelService(db).get_forest(company_id)
        valuation = None
        if company_id is not None:
            period = resolve_cli_period(ctx, year=year, month=month)
            valuation = DashboardValuationService(db).valuate_dre_tree(company_id, period)
            click.echo(f"\nDRE - {format_period(period)}")
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not forest:
        click.echo("No DRE accounts found.")
        return

    names = {ref.key: ref.name for ref in catalog.list_references()}
    print_dre_tree(forest, names, valuation)
    if valuation is not None and not valuation.is_complete:
        click.echo(UNIMPLEMENTED_NOTE)


@dre_group.command("statement")
@click.argument("company")
@period_options
@click.option("--all", "show_hidden", is_flag=True, help="Include hidden accounts")
@click.pass_context
def show_statement(ctx, company: str, year: int | None, month: str | None, show_hidden: bool):
    """Show the income statement of a company for a month."""
    db = ctx.obj["db"]
    company_id = resolve_company_or_exit(ctx, CatalogService(db), company)
    period = resolve_cli_period(ctx, year=year, month=month)

    try:
        statement = DashboardValuationService(db).build_statement(company_id, period)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not statement.lines:
        click.echo("No DRE accounts found.")
        return

    click.echo(f"\nDRE - {format_period(period)}")
    click.echo("-" * 70)
    for line in statement.lines:
        if not line.account.visible and not show_hidden:
            continue
        marker = " *" if line.status is ValuationStatus.UNIMPLEMENTED else ""
        if line.subtotal is not None:
            click.echo(f"= {line.account.name:<48} {line.subtotal:>16,.2f}{marker}")
        else:
            symbol = line.account.symbol.value if line.account.symbol is not None else " "
            click.echo(f"{symbol} {line.account.name:<48} {line.value:>16,.2f}{marker}")
    click.echo("-" * 70)
    click.echo(f"  {'Total':<48} {statement.total:>16,.2f}")
    if not statement.is_complete:
        click.echo(UNIMPLEMENTED_NOTE)


def register_commands(cli):
    """Register DRE commands with main CLI."""
    cli.add_command(dre_group, name="dre")
