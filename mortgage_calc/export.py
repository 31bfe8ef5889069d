"""Serialisation and file export of calculation results.

The JSON and CSV writers use the standard library; the Excel workbook is
written with ``openpyxl``. Values are written unrounded; display formatting is
left to whoever opens the file.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from openpyxl import Workbook
from openpyxl.styles import Font

from .data_models import LedgerEntry, LoanParameters, MortgageResult, PaymentFrequency

logger = logging.getLogger(__name__)

SCHEDULE_HEADER = [
    "Month",
    "Payment",
    "Principal",
    "Interest",
    "Balance",
    "One_Time_Payment",
]


def build_summary(result: MortgageResult, params: LoanParameters) -> Dict[str, Any]:
    """Return loan details and payment figures as a JSON-friendly dict.

    Savings keys are only present when the loan is accelerated, and
    ``biweekly_payment`` only for bi-weekly cadence.
    """
    summary: Dict[str, Any] = {
        "loan_amount": float(params.principal),
        "annual_rate": float(params.annual_rate),
        "term_years": float(params.term_years),
        "payment_frequency": params.payment_frequency.value,
        "extra_payment": float(params.extra_payment),
        "one_time_payments": [
            {"month": p.month, "amount": float(p.amount)} for p in params.one_time_payments
        ],
        "monthly_payment": float(result.monthly_payment),
        "total_payment": float(result.total_payment),
        "total_interest": float(result.total_interest),
        "term_months": params.term_months,
        "payments_made": len(result.schedule),
    }
    if result.biweekly_payment is not None:
        summary["biweekly_payment"] = float(result.biweekly_payment)
    if result.interest_saved is not None:
        summary["interest_saved"] = float(result.interest_saved)
        summary["months_saved"] = result.months_saved
        summary["payoff_date"] = result.payoff_date.isoformat() if result.payoff_date else None
    return summary


def serialize_schedule(schedule: Iterable[LedgerEntry]) -> List[Dict[str, Any]]:
    """Convert ledger entries into JSON-serialisable dictionaries."""
    return [
        {
            "month": e.month,
            "payment": float(e.payment),
            "principal": float(e.principal_payment),
            "interest": float(e.interest_payment),
            "balance": float(e.remaining_balance),
            "one_time_payment": e.had_one_time_payment,
        }
        for e in schedule
    ]


def export_to_json(path: Path, result: MortgageResult, params: LoanParameters) -> None:
    """Export summary and schedule to a JSON file."""
    data = {
        "summary": build_summary(result, params),
        "schedule": serialize_schedule(result.schedule),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.debug("Wrote %d schedule rows to %s", len(result.schedule), path)


def write_csv(stream, schedule: Iterable[LedgerEntry]) -> None:
    writer = csv.writer(stream)
    writer.writerow(SCHEDULE_HEADER)
    for e in schedule:
        writer.writerow(
            [
                e.month,
                float(e.payment),
                float(e.principal_payment),
                float(e.interest_payment),
                float(e.remaining_balance),
                "Yes" if e.had_one_time_payment else "",
            ]
        )


def export_to_csv(path: Path, schedule: List[LedgerEntry]) -> None:
    """Export the schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_csv(f, schedule)
    logger.debug("Wrote %d schedule rows to %s", len(schedule), path)


def _summary_rows(result: MortgageResult, params: LoanParameters) -> List[List[Any]]:
    frequency = "Bi-Weekly" if params.payment_frequency is PaymentFrequency.BIWEEKLY else "Monthly"
    rows: List[List[Any]] = [
        ["Mortgage Calculator Report"],
        [],
        ["LOAN DETAILS"],
        ["Loan Amount", float(params.principal)],
        ["Annual Interest Rate (%)", float(params.annual_rate)],
        ["Loan Term (years)", float(params.term_years)],
        ["Payment Frequency", frequency],
        ["Extra Monthly Payment", float(params.extra_payment)],
        [],
        ["PAYMENT SUMMARY"],
        ["Monthly Payment", float(result.monthly_payment)],
    ]
    if result.biweekly_payment is not None:
        rows.append(["Bi-Weekly Payment", float(result.biweekly_payment)])
    rows.append(["Total Payment", float(result.total_payment)])
    rows.append(["Total Interest", float(result.total_interest)])
    if result.interest_saved is not None and result.interest_saved > 0:
        rows.extend(
            [
                [],
                ["SAVINGS WITH EXTRA PAYMENTS"],
                ["Interest Saved", float(result.interest_saved)],
                ["Time Saved (months)", result.months_saved],
                ["Payoff Date", result.payoff_date.isoformat() if result.payoff_date else "N/A"],
            ]
        )
    return rows


def build_workbook(result: MortgageResult, params: LoanParameters) -> Workbook:
    """Build a workbook with a ``Summary`` and an ``Amortization Schedule`` sheet."""
    workbook = Workbook()
    summary_sheet = workbook.active
    summary_sheet.title = "Summary"
    for row in _summary_rows(result, params):
        summary_sheet.append(row)
    summary_sheet["A1"].font = Font(bold=True, size=14)
    summary_sheet.column_dimensions["A"].width = 25
    summary_sheet.column_dimensions["B"].width = 20

    schedule_sheet = workbook.create_sheet("Amortization Schedule")
    schedule_sheet.append(["Month", "Payment", "Principal", "Interest", "Balance", "One-Time Payment"])
    for cell in schedule_sheet[1]:
        cell.font = Font(bold=True)
    for e in result.schedule:
        schedule_sheet.append(
            [
                e.month,
                float(e.payment),
                float(e.principal_payment),
                float(e.interest_payment),
                float(e.remaining_balance),
                "Yes" if e.had_one_time_payment else "",
            ]
        )
    for column, width in zip("ABCDEF", (8, 15, 15, 15, 15, 18)):
        schedule_sheet.column_dimensions[column].width = width
    return workbook


def export_to_excel(path: Path, result: MortgageResult, params: LoanParameters) -> None:
    """Export summary and schedule to an ``.xlsx`` workbook."""
    build_workbook(result, params).save(path)
    logger.debug("Wrote workbook with %d schedule rows to %s", len(result.schedule), path)
