"""Tests for CLI period option helper."""

from datetime import date

import click
import pytest

from dreboard.cli.period_options import resolve_cli_period
from dreboard.domain.entities import Period


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_defaults_to_current_month():
    period = resolve_cli_period(_ctx(), year=None, month=None, today=date(2024, 3, 15))
    assert period == Period(2024, 3)


def test_month_name_and_year():
    assert resolve_cli_period(_ctx(), year=2023, month="dezembro") == Period(2023, 12)


def test_invalid_month_exits(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_period(_ctx(), year=2024, month="smarch")
    assert excinfo.value.exit_code == 1
    assert "Invalid month" in capsys.readouterr().err


def test_invalid_year_exits(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_period(_ctx(), year=0, month="3")
    assert "Invalid year" in capsys.readouterr().err
