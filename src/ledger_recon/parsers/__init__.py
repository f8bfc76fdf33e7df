"""Parsers for bank statements and transaction imports."""

from .statement_parser import StatementParser
from .transaction_import import TransactionImportParser, IMPORT_COLUMNS

__all__ = ["StatementParser", "TransactionImportParser", "IMPORT_COLUMNS"]
