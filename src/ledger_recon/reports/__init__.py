"""Reconciliation reports and ledger exports."""

from .excel_generator import ExcelReportGenerator
from .ledger_export import (
    LedgerExporter,
    filter_transactions,
    spend_by_category,
    format_export_date,
)

__all__ = [
    "ExcelReportGenerator",
    "LedgerExporter",
    "filter_transactions",
    "spend_by_category",
    "format_export_date",
]
