"""CLI helpers for reference resolution."""

from __future__ import annotations

import click

from dreboard.domain.catalog import CatalogService
from dreboard.domain.entities import ItemReference
from dreboard.utils.reference_resolver import resolve_company, resolve_reference


def resolve_references_or_exit(
    ctx: click.Context, catalog: CatalogService, tokens: tuple[str, ...]
) -> list[ItemReference]:
    """Resolve reference tokens, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    references = []
    for token in tokens:
        try:
            references.append(resolve_reference(catalog, token))
        except ValueError as exc:
            click.echo(f"Error: {exc}", err=True)
            ctx.exit(1)
    return references


def resolve_company_or_exit(ctx: click.Context, catalog: CatalogService, company: str | int) -> int:
    """Resolve company name or ID, or exit with a CLI error."""
    try:
        return resolve_company(catalog, company)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
