"""Pytest configuration and shared helpers for the debt planner tests."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

import pytest

from debt_planner.amortization import TOLERANCE
from debt_planner.data_models import LoanSnapshot

START = date(2025, 1, 1)


def make_loan(
    loan_id: str,
    balance,
    rate,
    payment,
    *,
    term: int = 360,
    principal=None,
    start: date = START,
    name=None,
) -> LoanSnapshot:
    """Build a loan snapshot with sensible defaults for tests."""
    return LoanSnapshot(
        id=loan_id,
        principal=principal if principal is not None else (balance if Decimal(str(balance)) > 0 else 1),
        current_balance=balance,
        annual_rate_percent=rate,
        term_months=term,
        monthly_payment=payment,
        start_date=start,
        name=name,
    )


def assert_decimal_close(actual, expected, tolerance=TOLERANCE) -> None:
    """Assert two amounts are equal within ``tolerance``."""
    difference = abs(Decimal(str(actual)) - Decimal(str(expected)))
    assert difference <= Decimal(tolerance), f"{actual} != {expected} (difference {difference})"


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI or web app attached so they do not leak between tests."""
    yield
    logger = logging.getLogger("debt_planner")
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
