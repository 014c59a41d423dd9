"""Company management commands."""

import click
from dreboard.cli.error_handling import handle_domain_error
from dreboard.domain.catalog import CatalogService
from dreboard.domain.errors import DomainError


@click.group()
def company_group():
    """Manage companies."""
    pass


@company_group.command("create")
@click.argument("name", metavar="TRADING_NAME")
@click.option("--inactive", is_flag=True, help="Create the company as inactive")
@click.pass_context
def create_company(ctx, name: str, inactive: bool):
    """Create a new company.

    Examples:
        dreboard company create "Loja Centro"
        dreboard company create "Filial Antiga" --inactive
    """
    service = CatalogService(ctx.obj["db"])
    try:
        company_id = service.create_company(trading_name=name, is_active=not inactive)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created company '{name}' (ID: {company_id})")


@company_group.command("list")
@click.option("--active-only", is_flag=True, help="Only list active companies")
@click.pass_context
def list_companies(ctx, active_only: bool):
    """List all companies."""
    service = CatalogService(ctx.obj["db"])

    companies = service.list_companies(active_only=active_only)
    if not companies:
        click.echo("No companies found.")
        return

    click.echo("\nCompanies:")
    click.echo("-" * 60)
    for company in companies:
        status = "" if company.is_active else " (inactive)"
        click.echo(f"ID: {company.id:3d} | {company.trading_name}{status}")


def register_commands(cli):
    """Register company commands with main CLI."""
    cli.add_command(company_group, name="company")
