"""Parsing helpers for command-line input."""

from budgetmatch.utils.date_parser import parse_date, parse_month
from budgetmatch.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_month", "parse_amount"]
