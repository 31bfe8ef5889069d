"""Input collection for interactive front ends.

``MortgageInputs`` holds the values a user edits in a form, clamps them to
sensible ranges as they change and recomputes the mortgage result only when
the input snapshot differs from the one the cached result was built from. The
engine itself stays a plain function; this class owns the recomputation.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from .data_models import (
    LoanParameters,
    MortgageResult,
    OneTimePayment,
    PaymentFrequency,
    merge_one_time_payment,
    remove_one_time_payment,
)
from .engine import MAX_AMOUNT, compute_mortgage
from .utils import parse_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
MAX_RATE = Decimal("100")
MAX_TERM_YEARS = Decimal("50")

DEFAULT_LOAN_AMOUNT = Decimal("300000")
DEFAULT_RATE = Decimal("6.5")
DEFAULT_TERM_YEARS = Decimal("30")
DEFAULT_ONE_TIME_MONTH = 12


def _clamp_amount(value: Decimal) -> Decimal:
    return max(ZERO, min(MAX_AMOUNT, value))


def _parse_or_zero(value: str) -> Decimal:
    """Parse a form value, treating anything unparseable as zero."""
    try:
        return parse_amount(value)
    except ValueError:
        logger.warning("Ignoring unparseable input %r", value)
        return ZERO


class MortgageInputs:
    """Editable loan inputs with a lazily recomputed result."""

    def __init__(
        self,
        loan_amount: Decimal = DEFAULT_LOAN_AMOUNT,
        annual_rate: Decimal = DEFAULT_RATE,
        term_years: Decimal = DEFAULT_TERM_YEARS,
        extra_payment: Decimal = ZERO,
        payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
        one_time_payments: Tuple[OneTimePayment, ...] = (),
        start_date: Optional[date] = None,
    ) -> None:
        self.loan_amount = loan_amount
        self.annual_rate = annual_rate
        self.term_years = term_years
        self.extra_payment = extra_payment
        self.payment_frequency = payment_frequency
        self.one_time_payments = tuple(one_time_payments)
        self.start_date = start_date
        # pending one-time payment being typed into the form
        self.one_time_month = DEFAULT_ONE_TIME_MONTH
        self.one_time_amount = ZERO
        self._cached_key: Optional[Tuple[LoanParameters, Optional[date]]] = None
        self._cached_result: Optional[MortgageResult] = None

    @property
    def term_months(self) -> int:
        return int(self.term_years * 12)

    def update_loan_amount(self, value: str) -> None:
        self.loan_amount = _clamp_amount(_parse_or_zero(value))

    def update_annual_rate(self, value: str) -> None:
        self.annual_rate = max(ZERO, min(MAX_RATE, _parse_or_zero(value)))

    def update_term_years(self, value: str) -> None:
        self.term_years = max(ZERO, min(MAX_TERM_YEARS, _parse_or_zero(value)))

    def update_extra_payment(self, value: str) -> None:
        self.extra_payment = _clamp_amount(_parse_or_zero(value))

    def set_payment_frequency(self, value: str) -> None:
        self.payment_frequency = PaymentFrequency(value)

    def toggle_payment_frequency(self) -> None:
        if self.payment_frequency is PaymentFrequency.MONTHLY:
            self.payment_frequency = PaymentFrequency.BIWEEKLY
        else:
            self.payment_frequency = PaymentFrequency.MONTHLY

    def update_one_time_month(self, value: str) -> None:
        month = int(_parse_or_zero(value))
        self.one_time_month = max(1, min(self.term_months, month))

    def update_one_time_amount(self, value: str) -> None:
        self.one_time_amount = _clamp_amount(_parse_or_zero(value))

    def add_one_time_payment(self) -> bool:
        """Add the pending one-time payment; returns False when nothing was added.

        A payment for a month that already has one replaces it.
        """
        if self.one_time_amount <= 0 or self.one_time_month <= 0:
            return False
        payment = OneTimePayment(month=self.one_time_month, amount=self.one_time_amount)
        self.one_time_payments = merge_one_time_payment(self.one_time_payments, payment)
        self.one_time_amount = ZERO
        return True

    def remove_one_time_payment(self, month: int) -> None:
        self.one_time_payments = remove_one_time_payment(self.one_time_payments, month)

    def is_valid(self) -> bool:
        return self.loan_amount > 0 and self.annual_rate >= 0 and self.term_months > 0

    def parameters(self) -> Optional[LoanParameters]:
        """Snapshot of the current inputs, or ``None`` while they are invalid."""
        if not self.is_valid():
            return None
        return LoanParameters(
            principal=self.loan_amount,
            annual_rate=self.annual_rate,
            term_years=self.term_years,
            extra_payment=self.extra_payment,
            payment_frequency=self.payment_frequency,
            one_time_payments=self.one_time_payments,
        )

    @property
    def result(self) -> Optional[MortgageResult]:
        params = self.parameters()
        if params is None:
            return None
        key = (params, self.start_date)
        if key != self._cached_key:
            self._cached_result = compute_mortgage(params, start_date=self.start_date)
            self._cached_key = key
        return self._cached_result

    def to_state(self) -> Dict[str, Any]:
        """Plain, JSON-serialisable copy of the inputs (e.g. for a session)."""
        return {
            "loan_amount": str(self.loan_amount),
            "annual_rate": str(self.annual_rate),
            "term_years": str(self.term_years),
            "extra_payment": str(self.extra_payment),
            "payment_frequency": self.payment_frequency.value,
            "one_time_payments": [[p.month, str(p.amount)] for p in self.one_time_payments],
            "one_time_month": self.one_time_month,
            "one_time_amount": str(self.one_time_amount),
            "start_date": self.start_date.isoformat() if self.start_date else None,
        }

    @classmethod
    def from_state(cls, state: Optional[Dict[str, Any]]) -> "MortgageInputs":
        if not state:
            return cls()
        start_date = state.get("start_date")
        inputs = cls(
            loan_amount=Decimal(state["loan_amount"]),
            annual_rate=Decimal(state["annual_rate"]),
            term_years=Decimal(state["term_years"]),
            extra_payment=Decimal(state["extra_payment"]),
            payment_frequency=PaymentFrequency(state["payment_frequency"]),
            one_time_payments=tuple(
                OneTimePayment(month=int(month), amount=Decimal(amount))
                for month, amount in state.get("one_time_payments", [])
            ),
            start_date=date.fromisoformat(start_date) if start_date else None,
        )
        inputs.one_time_month = int(state.get("one_time_month", DEFAULT_ONE_TIME_MONTH))
        inputs.one_time_amount = Decimal(state.get("one_time_amount", "0"))
        return inputs
