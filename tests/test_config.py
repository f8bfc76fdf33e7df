"""Tests for configuration loading."""

from decimal import Decimal

import pytest

from ledger_recon.config import (
    RefreshMode,
    TieBreakPolicy,
    generate_default_config,
    load_config,
)
from ledger_recon.utils.exceptions import ConfigurationError


def test_defaults_without_file():
    config = load_config(None)

    assert config.matching.amount_tolerance == Decimal("0.01")
    assert config.matching.tie_break == TieBreakPolicy.SNAPSHOT_ORDER
    assert config.matching.refresh_mode == RefreshMode.INCREMENTAL
    assert config.matching.skip_blank_text is False
    assert config.promotion.default_category == "Uncategorized"
    assert config.access.admin_emails == []
    assert config.input.statement.column_aliases["description"] == [
        "description",
        "vendor",
        "transaction description",
    ]
    assert config.config_file_path is None


def test_yaml_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "matching:\n"
        "  tie_break: closest_amount\n"
        "access:\n"
        "  admin_emails: [owner@example.com]\n"
        "input:\n"
        "  statement:\n"
        "    column_aliases:\n"
        "      date: [Posted Date]\n"
    )

    config = load_config(path)

    assert config.matching.tie_break == TieBreakPolicy.CLOSEST_AMOUNT
    assert config.matching.amount_tolerance == Decimal("0.01")
    assert config.access.admin_emails == ["owner@example.com"]
    assert config.input.statement.column_aliases["date"] == ["posted date"]
    assert config.input.statement.column_aliases["amount"] == ["amount", "transaction amount"]
    assert config.config_file_path == str(path)


@pytest.mark.parametrize(
    "content",
    [
        "matching:\n  tie_break: random\n",
        "matching:\n  amount_tolerance: 0\n",
        "- just\n- a list\n",
        "matching: [unclosed\n",
    ],
)
def test_invalid_configuration_raises(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_generated_config_loads(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    generate_default_config(path)

    config = load_config(path)

    assert path.read_text().startswith("# Property ledger reconciliation configuration")
    assert config.output.sheets.unmatched.name == "Unmatched"
