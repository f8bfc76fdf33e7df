"""Configuration loader and validation for reconciliation settings."""

from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class TieBreakPolicy(str, Enum):
    """How to choose between several ledger transactions matching one bank line."""

    SNAPSHOT_ORDER = "snapshot_order"
    CLOSEST_AMOUNT = "closest_amount"


class RefreshMode(str, Enum):
    """How match results are refreshed after a promotion."""

    INCREMENTAL = "incremental"
    FULL = "full"


class StatementInputConfig(BaseModel):
    """Configuration for bank statement CSV parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_format: Optional[str] = None
    column_aliases: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "date": ["date", "transaction date"],
            "description": ["description", "vendor", "transaction description"],
            "amount": ["amount", "transaction amount"],
        }
    )

    @field_validator("column_aliases")
    @classmethod
    def _lowercase_aliases(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        return {
            field: [alias.strip().lower() for alias in aliases]
            for field, aliases in value.items()
        }


class TransactionImportConfig(BaseModel):
    """Configuration for bulk transaction CSV imports."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_format: Optional[str] = None


class InputConfig(BaseModel):
    """Configuration for input file parsing."""

    statement: StatementInputConfig = Field(default_factory=StatementInputConfig)
    transactions: TransactionImportConfig = Field(default_factory=TransactionImportConfig)


class MatchingConfig(BaseModel):
    """Configuration for the reconciliation matcher."""

    amount_tolerance: Decimal = Decimal("0.01")
    tie_break: TieBreakPolicy = TieBreakPolicy.SNAPSHOT_ORDER
    skip_blank_text: bool = False
    include_deleted: bool = False
    refresh_mode: RefreshMode = RefreshMode.INCREMENTAL

    @field_validator("amount_tolerance")
    @classmethod
    def _positive_tolerance(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("amount_tolerance must be positive")
        return value


class PromotionConfig(BaseModel):
    """Defaults applied to ledger records created from bank lines."""

    default_category: str = "Uncategorized"


class LedgerConfig(BaseModel):
    """Bookkeeping rules for manually entered transactions."""

    categories: list[str] = Field(
        default_factory=lambda: ["Maintenance", "Utilities", "Insurance", "Taxes", "Other"]
    )


class AccessConfig(BaseModel):
    """Identities allowed to mutate the ledger."""

    admin_emails: list[str] = Field(default_factory=list)


class ExportConfig(BaseModel):
    """Configuration for ledger exports."""

    date_format: Optional[str] = None
    filename_template: str = "transactions_{date}.{ext}"


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched"))
    unmatched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Unmatched"))
    audit_trail: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Audit Trail"))


class OutputConfig(BaseModel):
    """Configuration for the reconciliation report."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    promotion: PromotionConfig = Field(default_factory=PromotionConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    access: AccessConfig = Field(default_factory=AccessConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "statement": {
                "encoding": "utf-8",
                "delimiter": ",",
                "date_format": None,
                "column_aliases": {
                    "date": ["date", "transaction date"],
                    "description": ["description", "vendor", "transaction description"],
                    "amount": ["amount", "transaction amount"],
                },
            },
            "transactions": {
                "encoding": "utf-8",
                "delimiter": ",",
                "date_format": None,
            },
        },
        "matching": {
            "amount_tolerance": "0.01",
            "tie_break": TieBreakPolicy.SNAPSHOT_ORDER.value,
            "skip_blank_text": False,
            "include_deleted": False,
            "refresh_mode": RefreshMode.INCREMENTAL.value,
        },
        "promotion": {
            "default_category": "Uncategorized",
        },
        "ledger": {
            "categories": ["Maintenance", "Utilities", "Insurance", "Taxes", "Other"],
        },
        "access": {
            "admin_emails": [],
        },
        "export": {
            "date_format": None,
            "filename_template": "transactions_{date}.{ext}",
        },
        "output": {
            "filename_template": "reconciliation_report_{date}_{time}.xlsx",
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matched": {"enabled": True, "name": "Matched"},
                "unmatched": {"enabled": True, "name": "Unmatched"},
                "audit_trail": {"enabled": True, "name": "Audit Trail"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    yaml_content = """# Property ledger reconciliation configuration
# Add admin identities under access.admin_emails to allow promotion

"""
    yaml_content += yaml.dump(get_default_config(), default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
