"""Tests for period arithmetic and month parsing."""

import pytest
from datetime import date
from dreboard.domain.entities import Period
from dreboard.utils.periods import (
    format_period,
    month_name,
    parse_month,
    period_from_date,
    previous_period,
    shift_period,
    twelve_month_window,
)


def test_previous_period_same_year():
    """Test the month before March is February."""
    assert previous_period(Period(2024, 3)) == Period(2024, 2)


def test_previous_period_rolls_over_january():
    """Test January rolls back to December of the prior year."""
    assert previous_period(Period(2024, 1)) == Period(2023, 12)


def test_shift_period_forward():
    assert shift_period(Period(2023, 11), 3) == Period(2024, 2)


def test_twelve_month_window_ending_march():
    """Test the window ending Março/2024 starts at Abril/2023."""
    window = twelve_month_window(Period(2024, 3))
    assert len(window) == 12
    assert window[0] == Period(2023, 4)
    assert window[-1] == Period(2024, 3)
    assert len(set(window)) == 12
    assert window == sorted(window)


def test_twelve_month_window_ending_december_stays_in_year():
    window = twelve_month_window(Period(2023, 12))
    assert window[0] == Period(2023, 1)
    assert all(p.year == 2023 for p in window)


def test_period_from_date():
    assert period_from_date(date(2024, 2, 29)) == Period(2024, 2)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("3", 3),
        (3, 3),
        ("Março", 3),
        ("marco", 3),
        ("MARÇO", 3),
        ("mar", 3),
        ("dez", 12),
        (" Janeiro ", 1),
        ("fev", 2),
    ],
)
def test_parse_month(value, expected):
    """Test month numbers, names and prefixes are accepted."""
    assert parse_month(value) == expected


@pytest.mark.parametrize("value", ["13", "0", "ju", "xyz", ""])
def test_parse_month_invalid(value):
    """Test invalid and ambiguous months are rejected."""
    with pytest.raises(ValueError):
        parse_month(value)


def test_parse_month_ambiguous_prefix():
    """'ju' matches both Junho and Julho and is too short anyway; 'jun' is unique."""
    assert parse_month("jun") == 6
    assert parse_month("jul") == 7


def test_month_name():
    assert month_name(3) == "Março"
    with pytest.raises(ValueError):
        month_name(13)


def test_format_period():
    assert format_period(Period(2024, 3)) == "Março/2024"
