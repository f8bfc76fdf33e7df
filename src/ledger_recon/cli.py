"""
Command-line interface for the property ledger reconciliation tool.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional
import sys

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import (
    ReconConfig,
    TieBreakPolicy,
    generate_default_config,
    load_config,
)
from .ledger.card_store import CsvCardPaymentStore
from .ledger.csv_store import CsvLedgerStore
from .models.transaction import (
    CardPaymentDraft,
    ExportFilter,
    LedgerTransaction,
    MatchResult,
    TransactionDraft,
)
from .parsers.statement_parser import StatementParser
from .reports.excel_generator import ExcelReportGenerator
from .reports.ledger_export import LedgerExporter, filter_transactions, spend_by_category
from .services.access import AdminAccessPolicy
from .services.bookkeeping import BookkeepingService
from .services.card_payments import CardPaymentService
from .services.ledger_admin import LedgerAdminService
from .services.reconciliation import ReconciliationService
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging_from_config

console = Console()

MAX_DISPLAY_ROWS = 50

config_option = click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
actor_option = click.option(
    "--actor",
    envvar="LEDGER_RECON_ACTOR",
    help="Email of the user performing the change (or LEDGER_RECON_ACTOR)",
)


@click.group()
@click.version_option(version=__version__)
def main():
    """Bank statement reconciliation for the property ledger."""
    pass


@main.command()
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.argument("ledger_file", type=click.Path(path_type=Path))
@config_option
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel report path")
@click.option(
    "--tie-break",
    type=click.Choice([p.value for p in TieBreakPolicy]),
    default=None,
    help="Override the tie-break policy",
)
@click.option(
    "--amount-tolerance",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Override amount tolerance in currency units",
)
@click.option(
    "--promote-unmatched", is_flag=True, help="Add every unmatched bank line to the ledger"
)
@actor_option
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Match and show results without writing a report")
def reconcile(
    statement_file: Path,
    ledger_file: Path,
    config: Optional[Path],
    output: Optional[Path],
    tie_break: Optional[str],
    amount_tolerance: Optional[float],
    promote_unmatched: bool,
    actor: Optional[str],
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile a bank statement CSV against the ledger.

    STATEMENT_FILE: Path to the bank statement CSV
    LEDGER_FILE: Path to the ledger CSV
    """
    try:
        recon_config = load_config(config)
        setup_logging_from_config(recon_config.logging, verbose)
        _apply_overrides(recon_config, tie_break, amount_tolerance)

        service = ReconciliationService(
            store=CsvLedgerStore(ledger_file),
            access_policy=AdminAccessPolicy.from_config(recon_config),
            config=recon_config,
        )
        service.load_statement_file(statement_file)
        service.run()

        if promote_unmatched:
            created = service.promote_all_unmatched(actor)
            console.print(f"[green]Added {len(created)} transaction(s) to the ledger[/green]")

        _display_results(service.results)
        summary = service.summary()
        _display_summary(summary)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        if output is None:
            now = datetime.now()
            output = Path(
                recon_config.output.filename_template.format(
                    date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
                )
            )

        report_path = ExcelReportGenerator(recon_config).generate_report(
            summary=summary,
            results=service.results,
            output_path=output,
        )
        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse-statement")
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@config_option
def parse_statement(statement_file: Path, config: Optional[Path]):
    """
    Parse a bank statement CSV and display its lines.

    STATEMENT_FILE: Path to the bank statement CSV
    """
    try:
        recon_config = load_config(config)
        lines = StatementParser(recon_config).parse_file(statement_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Bank Lines: {statement_file.name}")
    table.add_column("Row", justify="right")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")

    for line in lines[:MAX_DISPLAY_ROWS]:
        table.add_row(
            str(line.row_number or ""),
            str(line.date),
            _truncate(line.description),
            f"${line.amount:,.2f}",
        )

    console.print(table)
    if len(lines) > MAX_DISPLAY_ROWS:
        console.print(f"\n... and {len(lines) - MAX_DISPLAY_ROWS} more lines")
    console.print(f"\nTotal bank lines: {len(lines)}")


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@config_option
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), help="First date (inclusive)")
@click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]), help="Last date (inclusive)")
@click.option("--property", "property_name", default="", help="Property name contains")
@click.option(
    "--format", "export_format", type=click.Choice(["csv", "xlsx"]), default="csv", show_default=True
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output file path")
def export(
    ledger_file: Path,
    config: Optional[Path],
    start: Optional[datetime],
    end: Optional[datetime],
    property_name: str,
    export_format: str,
    output: Optional[Path],
):
    """
    Export ledger transactions filtered by date range and property.

    LEDGER_FILE: Path to the ledger CSV
    """
    try:
        recon_config = load_config(config)
        transactions = CsvLedgerStore(ledger_file).fetch_transactions()

        export_filter = ExportFilter(
            start_date=start.date() if start else None,
            end_date=end.date() if end else None,
            property=property_name,
        )
        selected = filter_transactions(transactions, export_filter)

        exporter = LedgerExporter(recon_config)
        output = output or Path(exporter.default_filename(export_format))
        if export_format == "xlsx":
            exporter.export_excel(selected, output)
        else:
            exporter.export_csv(selected, output)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Exported {len(selected)} transaction(s) to {output}[/green]")


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
def summary(ledger_file: Path):
    """
    Show total spend per category.

    LEDGER_FILE: Path to the ledger CSV
    """
    try:
        transactions = CsvLedgerStore(ledger_file).fetch_transactions()
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title="Spend by Category")
    table.add_column("Category", style="cyan")
    table.add_column("Total", justify="right")

    for category, total in spend_by_category(transactions).items():
        table.add_row(category, f"${total:,.2f}")

    console.print(table)
    total = sum((t.amount for t in transactions), Decimal("0"))
    console.print(f"\nTotal spend: ${total:,.2f}")


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
def deleted(ledger_file: Path):
    """
    List soft-deleted ledger transactions.

    LEDGER_FILE: Path to the ledger CSV
    """
    try:
        transactions = CsvLedgerStore(ledger_file).list_deleted()
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not transactions:
        console.print("No deleted transactions")
        return

    _display_transactions("Deleted Transactions", transactions)


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.argument("transaction_id")
@config_option
@actor_option
def delete(ledger_file: Path, transaction_id: str, config: Optional[Path], actor: Optional[str]):
    """Move a ledger transaction to deleted items."""
    _run_admin_action("delete", ledger_file, transaction_id, config, actor)
    console.print(f"[green]Transaction {transaction_id} deleted[/green]")


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.argument("transaction_id")
@config_option
@actor_option
def restore(ledger_file: Path, transaction_id: str, config: Optional[Path], actor: Optional[str]):
    """Restore a deleted ledger transaction."""
    _run_admin_action("restore", ledger_file, transaction_id, config, actor)
    console.print(f"[green]Transaction {transaction_id} restored[/green]")


@main.command()
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.argument("transaction_id")
@config_option
@actor_option
@click.confirmation_option(
    prompt="Are you sure you want to permanently delete this transaction? This cannot be undone."
)
def purge(ledger_file: Path, transaction_id: str, config: Optional[Path], actor: Optional[str]):
    """Permanently delete a ledger transaction."""
    _run_admin_action("purge", ledger_file, transaction_id, config, actor)
    console.print(f"[green]Transaction {transaction_id} permanently deleted[/green]")


@main.command("list")
@click.argument("ledger_file", type=click.Path(exists=True, path_type=Path))
@click.option("--property", "property_name", default="", help="Property name contains")
@click.option("--card", default="", help="Card used contains")
def list_transactions(ledger_file: Path, property_name: str, card: str):
    """
    List ledger transactions, newest first.

    LEDGER_FILE: Path to the ledger CSV
    """
    try:
        bookkeeping = BookkeepingService(CsvLedgerStore(ledger_file), AdminAccessPolicy([]))
        transactions = bookkeeping.list_transactions(property=property_name, card=card)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    _display_transactions("Transactions", transactions[:MAX_DISPLAY_ROWS])
    if len(transactions) > MAX_DISPLAY_ROWS:
        console.print(f"\n... and {len(transactions) - MAX_DISPLAY_ROWS} more transactions")
    console.print(f"\nTotal transactions: {len(transactions)}")


@main.command()
@click.argument("ledger_file", type=click.Path(path_type=Path))
@click.option("--date", "txn_date", type=click.DateTime(formats=["%Y-%m-%d"]), required=True)
@click.option("--vendor", required=True)
@click.option("--amount", type=float, required=True)
@click.option("--category", required=True)
@click.option("--property", "property_name", required=True)
@click.option("--card-used", required=True)
@click.option("--description", default="")
@click.option("--unit", default="")
@config_option
@actor_option
def add(
    ledger_file: Path,
    txn_date: datetime,
    vendor: str,
    amount: float,
    category: str,
    property_name: str,
    card_used: str,
    description: str,
    unit: str,
    config: Optional[Path],
    actor: Optional[str],
):
    """
    Add a transaction to the ledger.

    LEDGER_FILE: Path to the ledger CSV
    """
    draft = TransactionDraft(
        date=txn_date.date(),
        vendor=vendor,
        description=description,
        amount=Decimal(str(amount)),
        category=category,
        property=property_name,
        unit=unit,
        card_used=card_used,
    )

    try:
        recon_config = load_config(config)
        bookkeeping = BookkeepingService(
            CsvLedgerStore(ledger_file), AdminAccessPolicy.from_config(recon_config), recon_config
        )
        transaction_id = bookkeeping.add_transaction(draft, actor)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Transaction {transaction_id} added[/green]")


@main.command("import")
@click.argument("ledger_file", type=click.Path(path_type=Path))
@click.argument("csv_file", type=click.Path(exists=True, path_type=Path))
@config_option
@actor_option
def import_transactions(
    ledger_file: Path, csv_file: Path, config: Optional[Path], actor: Optional[str]
):
    """
    Import transactions from a CSV file.

    Columns are read in the order Property, Date, Vendor, Description,
    Amount, Category, Unit, Card; the first line is a header.

    LEDGER_FILE: Path to the ledger CSV
    CSV_FILE: Path to the transactions to import
    """
    try:
        recon_config = load_config(config)
        bookkeeping = BookkeepingService(
            CsvLedgerStore(ledger_file), AdminAccessPolicy.from_config(recon_config), recon_config
        )
        created = bookkeeping.import_file(csv_file, actor)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Imported {len(created)} transaction(s)[/green]")


@main.command()
@click.argument("cards_file", type=click.Path(exists=True, path_type=Path))
def cards(cards_file: Path):
    """
    List card payments, newest first.

    CARDS_FILE: Path to the card payments CSV
    """
    try:
        payments = CardPaymentService(
            CsvCardPaymentStore(cards_file), AdminAccessPolicy([])
        ).list_payments()
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not payments:
        console.print("No card payments")
        return

    table = Table(title="Card Payments")
    table.add_column("Date")
    table.add_column("Card")
    table.add_column("Amount", justify="right")
    table.add_column("Bank Used")
    table.add_column("Note")

    for payment in payments:
        table.add_row(
            str(payment.date),
            payment.card,
            f"${payment.amount:,.2f}",
            payment.bank_used,
            _truncate(payment.note) or "-",
        )

    console.print(table)


@main.command("add-card-payment")
@click.argument("cards_file", type=click.Path(path_type=Path))
@click.option("--card", required=True)
@click.option("--date", "payment_date", type=click.DateTime(formats=["%Y-%m-%d"]), required=True)
@click.option("--amount", type=float, required=True)
@click.option("--bank-used", required=True)
@click.option("--note", default="")
@config_option
@actor_option
def add_card_payment(
    cards_file: Path,
    card: str,
    payment_date: datetime,
    amount: float,
    bank_used: str,
    note: str,
    config: Optional[Path],
    actor: Optional[str],
):
    """
    Record a card payment.

    CARDS_FILE: Path to the card payments CSV
    """
    draft = CardPaymentDraft(
        card=card,
        date=payment_date.date(),
        amount=Decimal(str(amount)),
        bank_used=bank_used,
        note=note,
    )

    try:
        recon_config = load_config(config)
        card_payments = CardPaymentService(
            CsvCardPaymentStore(cards_file), AdminAccessPolicy.from_config(recon_config)
        )
        payment_id = card_payments.add_payment(draft, actor)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Card payment {payment_id} recorded[/green]")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _run_admin_action(
    action: str,
    ledger_file: Path,
    transaction_id: str,
    config: Optional[Path],
    actor: Optional[str],
) -> None:
    try:
        recon_config = load_config(config)
        admin = LedgerAdminService(
            CsvLedgerStore(ledger_file), AdminAccessPolicy.from_config(recon_config)
        )
        getattr(admin, action)(transaction_id, actor)
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def _display_results(results: list[MatchResult]) -> None:
    """Display match results in console."""
    table = Table(title="Transaction Comparison")
    table.add_column("Row", justify="right")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    table.add_column("Ledger ID")

    for result in results[:MAX_DISPLAY_ROWS]:
        line = result.bank_line
        status = "[green]Matched[/green]" if result.matched else "[yellow]Unmatched[/yellow]"
        table.add_row(
            str(line.row_number or ""),
            str(line.date),
            _truncate(line.description),
            f"${line.amount:,.2f}",
            status,
            result.matched_ledger_id or "-",
        )

    console.print(table)
    if len(results) > MAX_DISPLAY_ROWS:
        console.print(f"\n... and {len(results) - MAX_DISPLAY_ROWS} more lines")


def _display_transactions(title: str, transactions: list[LedgerTransaction]) -> None:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Vendor")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Property")

    for txn in transactions:
        table.add_row(
            txn.id,
            str(txn.date),
            _truncate(txn.vendor),
            f"${txn.amount:,.2f}",
            txn.category or "-",
            txn.property or "-",
        )

    console.print(table)


def _display_summary(summary) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Bank Lines", str(summary.total_bank_lines))
    table.add_row("Ledger Transactions", str(summary.total_ledger_transactions))
    table.add_row("Matched", str(summary.matched_count))
    table.add_row("Unmatched", str(summary.unmatched_count))
    table.add_row("Unmatched Total", f"${summary.unmatched_total:,.2f}")
    table.add_row("Match Rate", f"{summary.match_rate:.1f}%")
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)


def _apply_overrides(
    config: ReconConfig,
    tie_break: Optional[str],
    amount_tolerance: Optional[float],
) -> None:
    """Apply command-line overrides to the matching settings."""
    if tie_break is not None:
        config.matching.tie_break = TieBreakPolicy(tie_break)
    if amount_tolerance is not None:
        config.matching.amount_tolerance = Decimal(str(amount_tolerance))


def _truncate(text: str, width: int = 40) -> str:
    return text[:width] + "..." if len(text) > width else text


if __name__ == "__main__":
    main()
