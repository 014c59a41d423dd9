"""Tests for logging setup and emitted events."""

import io
import pytest
import logging
from decimal import Decimal

from dreboard.domain.entities import (
    AccountSymbol,
    AccountType,
    DreAccount,
    DreComponent,
    Period,
    ReferenceKind,
)
from dreboard.domain.errors import CycleDetectedError
from dreboard.domain.references import ReferenceResolver
from dreboard.domain.valuation import sum_references, valuate_account
from dreboard.logging_config import StructuredFormatter, configure_logging, get_logger


def test_get_logger_uses_namespace():
    assert get_logger("valuation").name == "dreboard.valuation"
    assert get_logger("dreboard.domain.dre").name == "dreboard.domain.dre"


def test_configure_logging_is_idempotent():
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)
    configure_logging(level="DEBUG", stream=io.StringIO())

    root = logging.getLogger("dreboard")
    assert root.level == logging.INFO
    assert len(root.handlers) == 1

    get_logger("test").info("something_happened", extra={"item_id": 3})
    assert "something_happened item_id=3" in stream.getvalue()


def test_unknown_level_falls_back_to_warning():
    configure_logging(level="chatty", stream=io.StringIO())
    assert logging.getLogger("dreboard").level == logging.WARNING


def test_structured_formatter_renders_extras():
    record = logging.LogRecord("dreboard.x", logging.WARNING, __file__, 1, "reference_skipped", (), None)
    record.reference_id = 7
    line = StructuredFormatter().format(record)
    assert "WARNING dreboard.x reference_skipped reference_id=7" in line


def test_skipped_reference_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="dreboard")
    total = sum_references([], [(ReferenceKind.CATEGORY, 5)], Period(2024, 3), ReferenceResolver())
    assert total == Decimal("0")
    (record,) = [r for r in caplog.records if r.getMessage() == "reference_skipped"]
    assert record.reference_id == 5
    assert record.levelno == logging.WARNING


def test_unimplemented_account_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="dreboard")
    account = DreAccount(1, "EBITDA", AccountType.FORMULA, AccountSymbol.ADD, 0)
    valuate_account(account, {}, Period(2024, 3), ReferenceResolver())
    assert "account_unimplemented" in [r.getMessage() for r in caplog.records]


def test_cycle_is_logged_as_error(caplog):
    caplog.set_level(logging.WARNING, logger="dreboard")
    shared = DreComponent(1, 1, ReferenceKind.CATEGORY, 1)
    account = DreAccount(1, "X", AccountType.SIMPLE, AccountSymbol.ADD, 0, components=(shared, shared))
    with pytest.raises(CycleDetectedError):
        valuate_account(account, {}, Period(2024, 3), ReferenceResolver())
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert [r.getMessage() for r in errors] == ["cycle_detected"]
