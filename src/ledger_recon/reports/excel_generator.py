"""
Excel report generator for reconciliation results.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..models.transaction import MatchResult, ReconciliationSummary
from ..config import ReconConfig
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def write_header_row(ws: Worksheet, headers: list[str], row: int = 1) -> None:
    """Write a styled header row."""
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER


def auto_fit_columns(ws: Worksheet) -> None:
    """Auto-fit column widths based on content."""
    for column_cells in ws.columns:
        max_length = max(
            (len(str(cell.value)) for cell in column_cells if cell.value is not None),
            default=0,
        )
        ws.column_dimensions[column_cells[0].column_letter].width = min(max_length + 2, 50)


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(
        self,
        summary: ReconciliationSummary,
        results: list[MatchResult],
        output_path: Path,
    ) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            summary: Reconciliation summary
            results: Match results in statement order
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        if self.sheet_config.summary.enabled:
            self._create_summary_sheet(wb, summary)

        if self.sheet_config.matched.enabled:
            self._create_matched_sheet(wb, [r for r in results if r.matched])

        if self.sheet_config.unmatched.enabled:
            self._create_unmatched_sheet(wb, [r for r in results if not r.matched])

        if self.sheet_config.audit_trail.enabled:
            self._create_audit_trail_sheet(wb, summary, results)

        # openpyxl refuses to save a workbook without sheets
        if not wb.sheetnames:
            wb.create_sheet(self.sheet_config.summary.name)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(self, wb: Workbook, summary: ReconciliationSummary) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Bank Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        ws["A3"] = "Statement"
        ws["A3"].font = Font(bold=True)

        period = "-"
        if summary.statement_period_start:
            period = f"{summary.statement_period_start} to {summary.statement_period_end}"

        info = [
            ("Statement File:", summary.statement_filename or "-"),
            ("Reconciliation Date:", summary.reconciliation_date.strftime("%Y-%m-%d %H:%M:%S")),
            ("Statement Period:", period),
        ]
        for i, (label, value) in enumerate(info, start=4):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = str(value)

        ws["A8"] = "Counts"
        ws["A8"].font = Font(bold=True)

        counts = [
            ("Bank Lines:", summary.total_bank_lines),
            ("Ledger Transactions:", summary.total_ledger_transactions),
            ("Matched:", summary.matched_count),
            ("Unmatched:", summary.unmatched_count),
            ("Match Rate:", f"{summary.match_rate:.1f}%"),
        ]
        for i, (label, value) in enumerate(counts, start=9):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        ws["A15"] = "Amounts"
        ws["A15"].font = Font(bold=True)
        ws["A16"] = "Statement Total:"
        ws["B16"] = f"${summary.bank_total:,.2f}"
        ws["A17"] = "Unmatched Total:"
        ws["B17"] = f"${summary.unmatched_total:,.2f}"

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(self, wb: Workbook, matched: list[MatchResult]) -> None:
        ws = wb.create_sheet(self.sheet_config.matched.name)

        write_header_row(
            ws,
            [
                "Row",
                "Bank Date",
                "Bank Description",
                "Bank Amount",
                "Ledger ID",
                "Ledger Date",
                "Ledger Vendor",
                "Ledger Amount",
                "Category",
                "Property",
                "Amount Delta",
            ],
        )

        for row_num, result in enumerate(matched, start=2):
            line = result.bank_line
            txn = result.matched_transaction
            row_data = [
                line.row_number or "",
                line.date,
                line.description,
                float(line.amount),
                txn.id,
                txn.date,
                txn.vendor,
                float(txn.amount),
                txn.category,
                txn.property,
                float(result.amount_delta),
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = MATCH_FILL

        auto_fit_columns(ws)

    def _create_unmatched_sheet(self, wb: Workbook, unmatched: list[MatchResult]) -> None:
        ws = wb.create_sheet(self.sheet_config.unmatched.name)

        write_header_row(ws, ["Row", "Date", "Description", "Amount"])

        for row_num, result in enumerate(unmatched, start=2):
            line = result.bank_line
            row_data = [line.row_number or "", line.date, line.description, float(line.amount)]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL

        auto_fit_columns(ws)

    def _create_audit_trail_sheet(
        self, wb: Workbook, summary: ReconciliationSummary, results: list[MatchResult]
    ) -> None:
        ws = wb.create_sheet(self.sheet_config.audit_trail.name)

        ws["A1"] = "Reconciliation Audit Trail"
        ws["A1"].font = Font(size=14, bold=True)

        audit_info = [
            ("Generated At:", datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
            ("Config File:", summary.config_file_used or "Default"),
            ("Tie-break Policy:", self.config.matching.tie_break.value),
            ("Amount Tolerance:", str(self.config.matching.amount_tolerance)),
            ("Processing Time:", f"{summary.processing_time_seconds:.2f} seconds"),
        ]

        row = 3
        for label, value in audit_info:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = value
            row += 1

        row += 1
        ws[f"A{row}"] = "Match Log"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1

        write_header_row(ws, ["Row", "Bank Date", "Description", "Amount", "Status", "Ledger ID"], row)
        row += 1

        for result in results:
            line = result.bank_line
            log_data = [
                line.row_number or "",
                line.date,
                line.description,
                float(line.amount),
                "Matched" if result.matched else "Unmatched",
                result.matched_ledger_id or "",
            ]
            for col, value in enumerate(log_data, start=1):
                ws.cell(row=row, column=col, value=value)
            row += 1

        auto_fit_columns(ws)
