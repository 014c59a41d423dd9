"""Utility functions for dreboard."""

from dreboard.utils.amount_parser import parse_amount, parse_weight
from dreboard.utils.periods import parse_month, previous_period, twelve_month_window

__all__ = [
    "parse_amount",
    "parse_weight",
    "parse_month",
    "previous_period",
    "twelve_month_window",
]
