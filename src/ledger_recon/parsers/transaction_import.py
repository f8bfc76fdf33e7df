"""
Bulk transaction CSV import parser.
Converts pasted or uploaded transaction rows into drafts for the ledger.
"""

from io import StringIO
from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..models.transaction import TransactionDraft
from ..config import ReconConfig
from ..utils.amounts import parse_amount
from ..utils.dates import normalize_date
from ..utils.exceptions import InvalidRecordError, StatementParseError

logger = logging.getLogger(__name__)

# Fixed column order of an import file; header names are not interpreted
IMPORT_COLUMNS = [
    "property",
    "date",
    "vendor",
    "description",
    "amount",
    "category",
    "unit",
    "card_used",
]


class TransactionImportParser:
    """
    Parser for bulk transaction imports.

    Columns are read by position in ``IMPORT_COLUMNS`` order. The header row
    only fixes the expected field count: data rows with a different number
    of fields are skipped, as are rows whose date or amount cannot be parsed.
    """

    def __init__(self, config: ReconConfig):
        self.config = config
        self.import_config = config.input.transactions

    def parse_file(self, file_path: Path) -> list[TransactionDraft]:
        """
        Read an import file and parse its contents.

        Raises:
            StatementParseError: If the file cannot be read
            InvalidRecordError: If the header has too few columns
        """
        logger.info(f"Parsing transaction import: {file_path}")

        try:
            with open(file_path, "r", encoding=self.import_config.encoding) as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read import file: {e}")
            raise StatementParseError(f"Failed to read import file: {e}") from e

        return self.parse_text(text)

    def parse_text(self, text: str) -> list[TransactionDraft]:
        """
        Parse import CSV text into transaction drafts.

        Args:
            text: Delimited text; the first line is the header

        Returns:
            Drafts in file order

        Raises:
            InvalidRecordError: If the header has too few columns
        """
        if not text or not text.strip():
            logger.warning("Import data is empty, no transactions extracted")
            return []

        try:
            # the first line sets the field count; longer rows are dropped
            df = pd.read_csv(
                StringIO(text.strip()),
                sep=self.import_config.delimiter,
                header=None,
                dtype=str,
                keep_default_na=False,
                on_bad_lines="skip",
            )
        except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            logger.warning(f"Import data could not be parsed as CSV: {e}")
            return []

        if len(df.columns) < len(IMPORT_COLUMNS):
            raise InvalidRecordError(
                f"Import data needs {len(IMPORT_COLUMNS)} columns "
                f"({', '.join(IMPORT_COLUMNS)}), header has {len(df.columns)}"
            )

        drafts: list[TransactionDraft] = []
        for idx, row in df.iloc[1:].iterrows():
            row_number = int(idx)
            draft = self._row_to_draft(row, row_number)
            if draft:
                drafts.append(draft)

        logger.info(f"Extracted {len(drafts)} transactions from {len(df) - 1} import rows")
        return drafts

    def _row_to_draft(self, row: pd.Series, row_number: int) -> Optional[TransactionDraft]:
        if row.isna().any():
            logger.warning(f"Import row {row_number}: Wrong number of fields, skipping")
            return None

        values = dict(zip(IMPORT_COLUMNS, (str(v).strip() for v in row.iloc[: len(IMPORT_COLUMNS)])))

        txn_date = normalize_date(values["date"], self.import_config.date_format)
        if txn_date is None:
            logger.warning(f"Import row {row_number}: Invalid date {values['date']!r}, skipping")
            return None

        amount = parse_amount(values["amount"])
        if amount is None:
            logger.warning(f"Import row {row_number}: Invalid amount {values['amount']!r}, skipping")
            return None

        return TransactionDraft(
            date=txn_date,
            vendor=values["vendor"],
            description=values["description"],
            amount=amount,
            category=values["category"],
            property=values["property"],
            unit=values["unit"],
            card_used=values["card_used"],
        )
