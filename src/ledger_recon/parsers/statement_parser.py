"""
Bank statement CSV parser.
Converts uploaded statement text into BankLine records for matching.
"""

from decimal import Decimal
from io import StringIO
from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..models.transaction import BankLine
from ..config import ReconConfig
from ..utils.amounts import parse_amount
from ..utils.dates import normalize_date
from ..utils.exceptions import StatementParseError

logger = logging.getLogger(__name__)


class StatementParser:
    """
    Parser for bank statement CSV exports.

    Headers are matched case-insensitively against the configured column
    aliases; the first alias present in the header wins. Malformed or empty
    input yields no bank lines rather than an error.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.statement_config = config.input.statement
        self.column_aliases = self.statement_config.column_aliases

    def parse_file(self, file_path: Path) -> list[BankLine]:
        """
        Read a statement file and parse its contents.

        Raises:
            StatementParseError: If the file cannot be read
        """
        logger.info(f"Parsing bank statement: {file_path}")

        try:
            with open(file_path, "r", encoding=self.statement_config.encoding) as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read statement file: {e}")
            raise StatementParseError(f"Failed to read statement file: {e}") from e

        return self.parse_text(text)

    def parse_text(self, text: str) -> list[BankLine]:
        """
        Parse statement CSV text into bank lines.

        Args:
            text: Comma-delimited text with a header row

        Returns:
            Bank lines in file order
        """
        if not text or not text.strip():
            logger.warning("Statement is empty, no bank lines extracted")
            return []

        try:
            df = pd.read_csv(
                StringIO(text.strip()),
                sep=self.statement_config.delimiter,
                index_col=False,
                dtype=str,
                keep_default_na=False,
                skipinitialspace=True,
                on_bad_lines="skip",
            )
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            logger.warning(f"Statement could not be parsed as CSV: {e}")
            return []

        df.columns = [str(c).strip().lower() for c in df.columns]

        lines = self._process_dataframe(df)
        logger.info(f"Extracted {len(lines)} bank lines from statement")

        return lines

    def _resolve_column(self, columns: list[str], field_name: str) -> Optional[str]:
        """Return the first configured alias for a field present in the header."""
        for alias in self.column_aliases.get(field_name, []):
            if alias in columns:
                return alias
        return None

    def _process_dataframe(self, df: pd.DataFrame) -> list[BankLine]:
        columns = list(df.columns)
        date_col = self._resolve_column(columns, "date")
        desc_col = self._resolve_column(columns, "description")
        amount_col = self._resolve_column(columns, "amount")

        if date_col is None:
            logger.warning(f"No date column found in statement header: {columns}")
            return []

        logger.debug(
            f"Statement columns resolved: date={date_col!r}, "
            f"description={desc_col!r}, amount={amount_col!r}"
        )

        lines: list[BankLine] = []
        for idx, row in df.iterrows():
            row_number = int(idx) + 1

            line_date = normalize_date(
                _cell(row, date_col), self.statement_config.date_format
            )
            if line_date is None:
                logger.warning(f"Row {row_number}: Invalid date, skipping")
                continue

            lines.append(
                BankLine(
                    date=line_date,
                    description=_cell(row, desc_col).strip(),
                    amount=self._parse_amount(_cell(row, amount_col), row_number),
                    row_number=row_number,
                )
            )

        return lines

    def _parse_amount(self, amount_value: str, row_number: int) -> Decimal:
        """
        Parse an amount cell.

        Missing amounts parse to zero. Currency symbols and thousands
        separators are stripped, and accounting-style ``(12.50)`` is negative.
        """
        if not amount_value.strip():
            return Decimal("0")

        amount = parse_amount(amount_value)
        if amount is None:
            logger.warning(f"Row {row_number}: Invalid amount {amount_value!r}, using 0")
            return Decimal("0")

        return amount


def _cell(row: pd.Series, column: Optional[str]) -> str:
    """Return a cell as text, empty for a missing column or value."""
    if column is None:
        return ""
    value = row.get(column)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value)
