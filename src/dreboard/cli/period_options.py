"""CLI helpers for period (year/month) resolution."""

from datetime import date

import click

from dreboard.domain.entities import Period
from dreboard.utils.periods import parse_month, period_from_date


def period_options(func):
    """Attach ``--year`` and ``--month`` options to a command."""
    func = click.option(
        "--month",
        help="Month number or Portuguese name (e.g., 3, 'Março', 'mar'). Defaults to the current month.",
    )(func)
    func = click.option("--year", type=int, help="Year (defaults to the current year)")(func)
    return func


def resolve_cli_period(
    ctx: click.Context,
    *,
    year: int | None,
    month: str | None,
    today: date | None = None,
) -> Period:
    """Resolve CLI year/month options to a period, or exit with a CLI error."""
    current = period_from_date(today or date.today())

    resolved_month = current.month
    if month is not None:
        try:
            resolved_month = parse_month(month)
        except ValueError as e:
            click.echo(f"Error: Invalid month: {e}", err=True)
            ctx.exit(1)

    resolved_year = current.year if year is None else year
    if not 1 <= resolved_year <= 9999:
        click.echo(f"Error: Invalid year: {resolved_year}", err=True)
        ctx.exit(1)

    return Period(resolved_year, resolved_month)
