"""Currency amount parsing shared by the CSV readers."""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a currency amount.

    Currency symbols and thousands separators are stripped, and
    accounting-style ``(12.50)`` is negative.

    Returns:
        The amount, or None when the text is blank or not a finite number
    """
    if value is None:
        return None

    text = str(value).replace("$", "").replace(",", "").strip()
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1].strip()

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None

    if not amount.is_finite():
        return None

    return -amount if negative else amount
