"""Data models for the mortgage calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan parameters collected from the user, one-time extra
payments, individual ledger entries and the aggregate result. Using dataclasses
makes it easy to construct, inspect and serialize these structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"


@dataclass(frozen=True)
class OneTimePayment:
    """A lump sum applied on top of the regular payment in a single month.

    Attributes
    ----------
    month: int
        The 1-based month of the schedule in which the payment is made. Months
        beyond the loan term are never reached and are therefore ignored.
    amount: Decimal
        The additional money applied that month.
    """

    month: int
    amount: Decimal


def merge_one_time_payment(
    payments: Iterable[OneTimePayment], payment: OneTimePayment
) -> Tuple[OneTimePayment, ...]:
    """Return ``payments`` with ``payment`` added, replacing any for the same month.

    The result is sorted by month so it can be displayed as is.
    """
    kept = [p for p in payments if p.month != payment.month]
    kept.append(payment)
    return tuple(sorted(kept, key=lambda p: p.month))


def remove_one_time_payment(
    payments: Iterable[OneTimePayment], month: int
) -> Tuple[OneTimePayment, ...]:
    return tuple(p for p in payments if p.month != month)


@dataclass(frozen=True)
class LoanParameters:
    """Snapshot of every input to a single calculation.

    ``annual_rate`` is the nominal annual rate in percent (6.5 means 6.5 %).
    ``term_years`` is converted to whole months; a fractional month is dropped.
    """

    principal: Decimal
    annual_rate: Decimal
    term_years: Decimal
    extra_payment: Decimal = Decimal("0")
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY
    one_time_payments: Tuple[OneTimePayment, ...] = ()

    @property
    def term_months(self) -> int:
        return int(self.term_years * 12)

    @property
    def is_accelerated(self) -> bool:
        """True when anything beyond the level monthly payment is requested."""
        return (
            self.extra_payment > 0
            or self.payment_frequency is PaymentFrequency.BIWEEKLY
            or len(self.one_time_payments) > 0
        )

    def one_time_lookup(self) -> Dict[int, Decimal]:
        # later entries win, matching merge_one_time_payment
        return {p.month: p.amount for p in self.one_time_payments}


@dataclass(frozen=True)
class LedgerEntry:
    """One month of the amortization schedule.

    ``payment`` is the total cash applied that month (level payment, recurring
    extra and any one-time amount). On the final month it can exceed
    ``principal_payment + interest_payment`` because the principal portion is
    clamped to the outstanding balance. When the final payment falls short by
    no more than the paid-off tolerance, the leftover residual is written off
    and ``principal_payment`` stays the amount actually applied to principal.
    """

    month: int
    payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    remaining_balance: Decimal
    had_one_time_payment: bool = False


@dataclass(frozen=True)
class PayoffTotals:
    total_paid: Decimal
    total_interest: Decimal
    months_to_payoff: int


@dataclass
class MortgageResult:
    """Aggregate output of a calculation.

    ``biweekly_payment`` is only set for bi-weekly cadence. ``interest_saved``,
    ``months_saved`` and ``payoff_date`` are only set when the loan is
    accelerated; in that case ``total_payment`` and ``total_interest`` describe
    the accelerated payoff instead of the baseline.
    """

    monthly_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    schedule: List[LedgerEntry] = field(default_factory=list)
    biweekly_payment: Optional[Decimal] = None
    interest_saved: Optional[Decimal] = None
    months_saved: Optional[int] = None
    payoff_date: Optional[date] = None
