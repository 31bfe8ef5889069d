"""Shared fixtures.

Canonical loan: $300K at 6.5 % over 30 years, paid monthly.
"""

from datetime import date
from decimal import Decimal

import pytest

from mortgage_calc.data_models import LoanParameters


@pytest.fixture
def start_date() -> date:
    return date(2026, 1, 15)


@pytest.fixture
def baseline_params() -> LoanParameters:
    return LoanParameters(
        principal=Decimal("300000"),
        annual_rate=Decimal("6.5"),
        term_years=Decimal("30"),
    )
