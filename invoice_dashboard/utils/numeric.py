"""Utility helpers for parsing monetary input."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CENTS_PER_UNIT = 100
# Upper bound of a 32-bit signed INTEGER column
MAX_AMOUNT_IN_CENTS = 2**31 - 1
_CURRENCY_SYMBOLS = "$€£¥₽₩₹₺"


def _normalize_number_string(raw: str) -> str:
    """Strip presentation characters so :class:`Decimal` can parse ``raw``.

    Users frequently enter values such as ``"1,234.50"`` or ``"$1 234,50"``.
    Currency symbols, accounting parentheses and thousands separators are
    removed, and a trailing comma with one or two digits is treated as the
    decimal separator.
    """

    cleaned = raw.replace("\u00a0", " ").strip()

    negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1].strip()

    sign = ""
    if cleaned and cleaned[0] in "+-":
        sign, cleaned = cleaned[0], cleaned[1:].lstrip()

    while cleaned and cleaned[0] in _CURRENCY_SYMBOLS:
        cleaned = cleaned[1:].lstrip()
    while cleaned and cleaned[-1] in _CURRENCY_SYMBOLS:
        cleaned = cleaned[:-1].rstrip()

    cleaned = cleaned.replace("_", "").replace(" ", "")

    decimal_is_comma = False
    if "," in cleaned and "." in cleaned:
        decimal_is_comma = cleaned.rfind(".") < cleaned.rfind(",")
    elif "," in cleaned:
        fractional_length = len(cleaned) - cleaned.rfind(",") - 1
        decimal_is_comma = 0 < fractional_length <= 2

    if decimal_is_comma:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    if negative:
        sign = "-"
    return sign + cleaned


def coerce_decimal(
    raw_value: Any, *, default: Optional[Decimal] = None
) -> Optional[Decimal]:
    """Best-effort conversion of user-provided values to :class:`Decimal`.

    ``default`` is returned if the value is empty, cannot be parsed or is not
    a finite number.
    """

    if raw_value is None or isinstance(raw_value, bool):
        return default

    if isinstance(raw_value, Decimal):
        value = raw_value
    elif isinstance(raw_value, (int, float)):
        value = Decimal(str(raw_value))
    else:
        text = str(raw_value).strip()
        if not text:
            return default
        try:
            value = Decimal(_normalize_number_string(text))
        except (InvalidOperation, ValueError):
            return default

    if not value.is_finite():
        return default
    return value


def to_minor_units(amount: Decimal) -> int:
    """Return ``amount`` in whole cents, rounding half up.

    Raises :class:`ValueError` when the amount has too many digits to be
    represented exactly.
    """

    try:
        cents = (Decimal(amount) * CENTS_PER_UNIT).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    except InvalidOperation as exc:
        raise ValueError(f"Amount {amount!r} cannot be stored in cents") from exc
    return int(cents)


def from_minor_units(amount_in_cents: int) -> Decimal:
    """Return a cent amount as a major unit :class:`Decimal`."""

    return Decimal(int(amount_in_cents)) / CENTS_PER_UNIT
