"""Core calculation engine for the mortgage calculator.

This module implements the financial logic required to build amortization
schedules for fixed-rate loans paid monthly or bi-weekly. It supports a
recurring extra payment and one-time extra payments at specific months, and
compares an accelerated payoff against the baseline level-payment schedule.

Bi-weekly cadence is folded into monthly steps: 26 half payments per year are
applied as ``biweekly_payment * 26 / 12`` each month, so the ledger is always
indexed by month.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, getcontext
from typing import Iterable, List, Mapping, Optional, Tuple

from .data_models import (
    LedgerEntry,
    LoanParameters,
    MortgageResult,
    OneTimePayment,
    PaymentFrequency,
    PayoffTotals,
)
from .utils import add_months

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Balances within this fraction of the principal count as paid off.
BALANCE_TOLERANCE = Decimal("1e-6")

# Upper bounds for loan, extra and one-time amounts and for the term.
MAX_AMOUNT = Decimal("1e12")
MAX_TERM_MONTHS = 1200


def monthly_rate(annual_rate: Decimal) -> Decimal:
    """Convert a nominal annual rate in percent to a monthly fraction."""
    return annual_rate / Decimal(100) / Decimal(12)


def calculate_monthly_payment(principal: Decimal, rate_per_month: Decimal, number_of_payments: int) -> Decimal:
    """Return the level monthly payment that fully amortizes a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if number_of_payments <= 0:
        raise ValueError("Number of payments must be positive")
    if rate_per_month == 0:
        return principal / Decimal(number_of_payments)
    factor = (1 + rate_per_month) ** number_of_payments
    return principal * (rate_per_month * factor) / (factor - 1)


def biweekly_payment(monthly_payment: Decimal) -> Decimal:
    return monthly_payment / Decimal(2)


def periodic_payment(monthly_payment: Decimal, frequency: PaymentFrequency) -> Decimal:
    """Monthly-equivalent amount applied each month for the given cadence."""
    if frequency is PaymentFrequency.BIWEEKLY:
        return biweekly_payment(monthly_payment) * Decimal(26) / Decimal(12)
    return monthly_payment


def _amortize_period(
    balance: Decimal, rate_per_month: Decimal, total_payment: Decimal, tolerance: Decimal
) -> Tuple[Decimal, Decimal, Decimal, bool]:
    """Apply one month's payment to ``balance``.

    Returns ``(principal_payment, interest_payment, new_balance, paid_off)``.
    When the payment covers the balance the principal portion is clamped to
    the balance. A residual within ``tolerance`` left by a payment that falls
    just short is written off; the principal portion is not adjusted for it.
    """
    interest_payment = balance * rate_per_month
    principal_payment = total_payment - interest_payment
    if principal_payment >= balance:
        return balance, interest_payment, ZERO, True
    new_balance = balance - principal_payment
    if new_balance <= tolerance:
        return principal_payment, interest_payment, ZERO, True
    return principal_payment, interest_payment, new_balance, False


def generate_schedule(
    principal: Decimal,
    rate_per_month: Decimal,
    number_of_payments: int,
    payment: Decimal,
    extra_payment: Decimal = ZERO,
    one_time: Optional[Mapping[int, Decimal]] = None,
) -> List[LedgerEntry]:
    """Build the month-by-month ledger for one set of parameters.

    Parameters
    ----------
    payment: Decimal
        The monthly-equivalent base payment (see ``periodic_payment``).
    one_time: Mapping[int, Decimal]
        One-time amounts keyed by month. Months past ``number_of_payments``
        are never reached.

    Returns
    -------
    List[LedgerEntry]
        At most ``number_of_payments`` entries; fewer when extra payments pay
        the loan off early. The recorded ``payment`` is the full amount
        applied that month, even on the clamped final month.
    """
    one_time = one_time or {}
    tolerance = principal * BALANCE_TOLERANCE
    schedule: List[LedgerEntry] = []
    remaining_balance = principal
    month = 1

    while remaining_balance > 0 and month <= number_of_payments:
        total_payment = payment + extra_payment
        one_time_amount = one_time.get(month)
        if one_time_amount is not None:
            total_payment += one_time_amount

        principal_payment, interest_payment, remaining_balance, paid_off = _amortize_period(
            remaining_balance, rate_per_month, total_payment, tolerance
        )
        schedule.append(
            LedgerEntry(
                month=month,
                payment=total_payment,
                principal_payment=principal_payment,
                interest_payment=interest_payment,
                remaining_balance=remaining_balance,
                had_one_time_payment=one_time_amount is not None,
            )
        )
        if paid_off:
            break
        month += 1

    return schedule


def simulate_payoff(
    principal: Decimal,
    rate_per_month: Decimal,
    max_months: int,
    payment: Decimal,
    extra_payment: Decimal = ZERO,
    one_time: Optional[Mapping[int, Decimal]] = None,
) -> PayoffTotals:
    """Run the same monthly simulation as ``generate_schedule`` keeping only totals.

    On the final (clamped) month only ``balance + interest`` counts towards
    ``total_paid``; any excess of the nominal payment is not paid.
    """
    one_time = one_time or {}
    tolerance = principal * BALANCE_TOLERANCE
    balance = principal
    total_paid = ZERO
    total_interest = ZERO
    month = 0

    while balance > 0 and month < max_months:
        month += 1
        total_payment = payment + extra_payment + one_time.get(month, ZERO)
        principal_payment, interest_payment, balance, _ = _amortize_period(
            balance, rate_per_month, total_payment, tolerance
        )
        total_interest += interest_payment
        total_paid += principal_payment + interest_payment

    return PayoffTotals(total_paid=total_paid, total_interest=total_interest, months_to_payoff=month)


def validate_parameters(params: LoanParameters) -> None:
    """Raise ``ValueError`` for inputs the engine cannot amortize."""
    if params.principal <= 0:
        raise ValueError("Loan amount must be positive")
    if params.principal > MAX_AMOUNT:
        raise ValueError(f"Loan amount cannot exceed {MAX_AMOUNT:,.0f}")
    if params.annual_rate < 0:
        raise ValueError("Interest rate cannot be negative")
    if params.term_months <= 0:
        raise ValueError("Loan term must be at least one month")
    if params.term_months > MAX_TERM_MONTHS:
        raise ValueError(f"Loan term cannot exceed {MAX_TERM_MONTHS // 12} years")
    if params.extra_payment < 0:
        raise ValueError("Extra payment cannot be negative")
    if params.extra_payment > MAX_AMOUNT:
        raise ValueError(f"Extra payment cannot exceed {MAX_AMOUNT:,.0f}")
    for p in params.one_time_payments:
        if p.amount > MAX_AMOUNT:
            raise ValueError(f"One-time payment cannot exceed {MAX_AMOUNT:,.0f}")


def compute_mortgage(params: LoanParameters, start_date: Optional[date] = None) -> MortgageResult:
    """Compute the schedule and summary figures for a loan.

    Parameters
    ----------
    params: LoanParameters
        The loan inputs.
    start_date: date
        Date the payoff projection counts from. Defaults to today; pass a
        fixed date for reproducible results.

    Returns
    -------
    MortgageResult
        The baseline level payment, totals and full ledger. When the loan is
        accelerated the totals describe the accelerated payoff and the savings
        fields are filled in.
    """
    validate_parameters(params)

    rate_per_month = monthly_rate(params.annual_rate)
    number_of_payments = params.term_months
    monthly_payment = calculate_monthly_payment(params.principal, rate_per_month, number_of_payments)
    total_payment = monthly_payment * number_of_payments
    total_interest = total_payment - params.principal

    base_payment = periodic_payment(monthly_payment, params.payment_frequency)
    one_time = params.one_time_lookup()

    schedule = generate_schedule(
        params.principal,
        rate_per_month,
        number_of_payments,
        base_payment,
        params.extra_payment,
        one_time,
    )

    result = MortgageResult(
        monthly_payment=monthly_payment,
        total_payment=total_payment,
        total_interest=total_interest,
        schedule=schedule,
    )
    if params.payment_frequency is PaymentFrequency.BIWEEKLY:
        result.biweekly_payment = biweekly_payment(monthly_payment)

    if params.is_accelerated:
        accelerated = simulate_payoff(
            params.principal,
            rate_per_month,
            number_of_payments,
            base_payment,
            params.extra_payment,
            one_time,
        )
        result.total_payment = accelerated.total_paid
        result.total_interest = accelerated.total_interest
        result.interest_saved = total_interest - accelerated.total_interest
        result.months_saved = number_of_payments - accelerated.months_to_payoff
        result.payoff_date = add_months(start_date or date.today(), accelerated.months_to_payoff)
        logger.debug(
            "Accelerated payoff in %d of %d months, interest saved %s",
            accelerated.months_to_payoff,
            number_of_payments,
            result.interest_saved,
        )

    logger.debug(
        "Computed %d ledger entries for principal %s at %s%% over %d months",
        len(schedule),
        params.principal,
        params.annual_rate,
        number_of_payments,
    )
    return result


def calculate(
    principal: Decimal,
    annual_rate: Decimal,
    term_years: Decimal,
    extra_payment: Decimal = ZERO,
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
    one_time_payments: Iterable[OneTimePayment] = (),
    start_date: Optional[date] = None,
) -> MortgageResult:
    """Function form of ``compute_mortgage`` taking the inputs as arguments.

    Numeric arguments may be ``int``, ``str`` or ``Decimal``; floats are
    converted through ``str`` so ``6.5`` means exactly 6.5.
    """
    params = LoanParameters(
        principal=_to_decimal(principal),
        annual_rate=_to_decimal(annual_rate),
        term_years=_to_decimal(term_years),
        extra_payment=_to_decimal(extra_payment),
        payment_frequency=PaymentFrequency(payment_frequency),
        one_time_payments=tuple(one_time_payments),
    )
    return compute_mortgage(params, start_date=start_date)


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
