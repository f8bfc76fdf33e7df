"""
Ledger export.
Filters ledger transactions by date range and property and writes them
as CSV or Excel.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional
import logging

import pandas as pd
from openpyxl import Workbook

from ..config import ReconConfig
from ..models.transaction import ExportFilter, LedgerTransaction
from ..utils.exceptions import ReportGenerationError
from .excel_generator import THIN_BORDER, auto_fit_columns, write_header_row

logger = logging.getLogger(__name__)

EXPORT_HEADERS = ["Date", "Vendor", "Amount", "Category", "Property", "Unit", "Card Used"]


def format_export_date(value: date, date_format: Optional[str] = None) -> str:
    """Render a date for export, ``May 1, 2024`` unless a format is configured."""
    if date_format:
        return value.strftime(date_format)
    return f"{value:%b} {value.day}, {value.year}"


def filter_transactions(
    transactions: list[LedgerTransaction],
    export_filter: ExportFilter,
) -> list[LedgerTransaction]:
    """
    Apply an export filter and order the result newest first.

    Date bounds are inclusive; the property filter is a case-insensitive
    substring match.
    """
    selected = [t for t in transactions if export_filter.accepts(t)]
    selected.sort(key=lambda t: t.date, reverse=True)
    return selected


def spend_by_category(transactions: list[LedgerTransaction]) -> dict[str, Decimal]:
    """Total amount per category, largest first."""
    totals: dict[str, Decimal] = {}
    for txn in transactions:
        category = txn.category or "Uncategorized"
        totals[category] = totals.get(category, Decimal("0")) + txn.amount
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


class LedgerExporter:
    """Writes filtered ledger transactions to CSV or Excel."""

    def __init__(self, config: ReconConfig):
        self.config = config
        self.date_format = config.export.date_format

    def to_rows(self, transactions: list[LedgerTransaction]) -> list[list[str]]:
        return [
            [
                format_export_date(t.date, self.date_format),
                t.vendor,
                f"{t.amount:.2f}",
                t.category,
                t.property,
                t.unit,
                t.card_used,
            ]
            for t in transactions
        ]

    def default_filename(self, extension: str) -> str:
        return self.config.export.filename_template.format(
            date=date.today().isoformat(), ext=extension
        )

    def export_csv(self, transactions: list[LedgerTransaction], output_path: Path) -> Path:
        """
        Write transactions as CSV.

        Raises:
            ReportGenerationError: If the file cannot be written
        """
        df = pd.DataFrame(self.to_rows(transactions), columns=EXPORT_HEADERS)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(output_path, index=False)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write CSV export {output_path}: {e}") from e

        logger.info(f"Exported {len(df)} transactions to {output_path}")
        return output_path

    def export_excel(self, transactions: list[LedgerTransaction], output_path: Path) -> Path:
        """
        Write transactions as a single-sheet Excel workbook.

        Raises:
            ReportGenerationError: If the file cannot be written
        """
        wb = Workbook()
        ws = wb.active
        ws.title = "Transactions"

        write_header_row(ws, EXPORT_HEADERS)
        for row_num, txn in enumerate(transactions, start=2):
            row_data = [
                txn.date,
                txn.vendor,
                float(txn.amount),
                txn.category,
                txn.property,
                txn.unit,
                txn.card_used,
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
            ws.cell(row=row_num, column=3).number_format = "#,##0.00"

        auto_fit_columns(ws)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write Excel export {output_path}: {e}") from e

        logger.info(f"Exported {len(transactions)} transactions to {output_path}")
        return output_path
