"""Utility functions for budgetflow."""

from budgetflow.utils.date_parser import parse_date
from budgetflow.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
