"""Presentation helpers turning stored values into display strings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List, Mapping, Union

from babel.dates import format_skeleton
from babel.numbers import format_currency as _babel_format_currency

from invoice_dashboard.utils.numeric import from_minor_units

Y_AXIS_STEP = 1000


@dataclass(frozen=True)
class YAxis:
    y_axis_labels: List[str]
    top_label: int


def _babel_locale(locale: str) -> str:
    return locale.replace("-", "_")


def format_currency(amount: int) -> str:
    """Format an amount stored in cents as US dollars, e.g. ``"$1,234.56"``."""

    return _babel_format_currency(
        from_minor_units(amount), "USD", locale="en_US"
    )


def format_date_to_local(
    date_str: Union[str, date, datetime], locale: str = "en-US"
) -> str:
    """Render a date as short month, numeric day and year for ``locale``.

    ``"2023-09-15"`` becomes ``"Sep 15, 2023"`` in the default locale and
    ``"15. Sept. 2023"`` in ``de-DE``.
    """

    if isinstance(date_str, datetime):
        value = date_str.date()
    elif isinstance(date_str, date):
        value = date_str
    else:
        value = date.fromisoformat(str(date_str)[:10])
    return format_skeleton("yMMMd", value, locale=_babel_locale(locale))


def generate_y_axis(income: Iterable[Mapping[str, Union[int, float, Decimal]]]) -> YAxis:
    """Return chart labels from the highest income rounded up to a thousand.

    Raises :class:`ValueError` when ``income`` is empty.
    """

    values = [record["income"] for record in income]
    if not values:
        raise ValueError("generate_y_axis requires at least one income record")

    top_label = math.ceil(max(values) / Y_AXIS_STEP) * Y_AXIS_STEP
    labels = [
        f"${value // Y_AXIS_STEP}K"
        for value in range(top_label, -1, -Y_AXIS_STEP)
    ]
    return YAxis(y_axis_labels=labels, top_label=top_label)
