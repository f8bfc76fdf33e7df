"""Matching engine and predicates."""

from .matcher import ReconciliationMatcher
from .predicates import (
    dates_match,
    amounts_match,
    text_overlaps,
    is_match,
)

__all__ = [
    "ReconciliationMatcher",
    "dates_match",
    "amounts_match",
    "text_overlaps",
    "is_match",
]
