"""Calendar-date normalization shared by the parser, matcher and exports."""

from datetime import date, datetime
from typing import Any, Optional

import pandas as pd


def normalize_date(value: Any, date_format: Optional[str] = None) -> Optional[date]:
    """
    Reduce a date-like value to a plain calendar date.

    Time-of-day and timezone are discarded without conversion, so
    ``2024-03-15T23:59:00Z`` and ``2024-03-15T00:00:00-08:00`` both become
    ``2024-03-15``.

    Args:
        value: date, datetime, pandas Timestamp or string
        date_format: Optional strptime format tried before the pandas parser

    Returns:
        The calendar date, or None when the value is empty or unparseable
    """
    if value is None:
        return None

    # datetime is a date subclass, check it first
    if isinstance(value, datetime):
        return None if pd.isna(value) else value.date()
    if isinstance(value, date):
        return value

    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return None
        except (TypeError, ValueError):
            pass

    text = str(value).strip()
    if not text:
        return None

    if date_format:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            pass

    try:
        parsed = pd.Timestamp(text)
    except (ValueError, TypeError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()
