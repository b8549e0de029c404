"""Utility functions for the invoice dashboard."""

from .activity import add_activity, log_activity
from .formatting import format_currency, format_date_to_local, generate_y_axis
from .pagination import generate_pagination

__all__ = [
    "log_activity",
    "add_activity",
    "format_currency",
    "format_date_to_local",
    "generate_y_axis",
    "generate_pagination",
]
