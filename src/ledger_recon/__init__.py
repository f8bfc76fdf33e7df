"""Bank statement reconciliation for a property-management ledger."""

__version__ = "0.1.0"
