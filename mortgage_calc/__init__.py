from .data_models import (
    LedgerEntry,
    LoanParameters,
    MortgageResult,
    OneTimePayment,
    PaymentFrequency,
)
from .engine import calculate, compute_mortgage

__all__ = [
    "calculate",
    "compute_mortgage",
    "LedgerEntry",
    "LoanParameters",
    "MortgageResult",
    "OneTimePayment",
    "PaymentFrequency",
]
