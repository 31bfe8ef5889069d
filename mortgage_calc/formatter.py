"""Output helpers for the mortgage calculator.

This module provides simple functions to render amortization schedules and
summaries in a tabular text format through ``click.echo``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

import click

from .data_models import LedgerEntry


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Loan amount        : {summary['loan_amount']:.2f}")
    click.echo(f"Interest rate      : {summary['annual_rate']:.2f}%")
    click.echo(f"Term               : {summary['term_months']} months")
    click.echo(f"Payment frequency  : {summary['payment_frequency']}")
    if summary.get("extra_payment"):
        click.echo(f"Extra payment      : {summary['extra_payment']:.2f}")
    for p in summary.get("one_time_payments", []):
        click.echo(f"One-time payment   : {p['amount']:.2f} in month {p['month']}")
    click.echo(f"Monthly payment    : {summary['monthly_payment']:.2f}")
    if "biweekly_payment" in summary:
        click.echo(f"Bi-weekly payment  : {summary['biweekly_payment']:.2f}")
    click.echo(f"Total payment      : {summary['total_payment']:.2f}")
    click.echo(f"Total interest     : {summary['total_interest']:.2f}")
    click.echo(f"Payments made      : {summary['payments_made']}")
    if "interest_saved" in summary:
        click.echo(f"Interest saved     : {summary['interest_saved']:.2f}")
        click.echo(f"Time saved         : {summary['months_saved']} months")
        click.echo(f"Payoff date        : {summary['payoff_date']}")
    click.echo("-" * 72)


def print_schedule(schedule: Iterable[LedgerEntry]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["Month", "Payment", "Principal", "Interest", "Balance", "OneTime"]
    click.echo("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.month),
            f"{entry.payment:.2f}",
            f"{entry.principal_payment:.2f}",
            f"{entry.interest_payment:.2f}",
            f"{entry.remaining_balance:.2f}",
            "Yes" if entry.had_one_time_payment else "No",
        ]
        click.echo("\t".join(row))


def print_comparison(baseline: Dict[str, Any], accelerated: Dict[str, Any]) -> None:
    """Print the baseline and accelerated summaries side by side.

    The difference column is ``accelerated - baseline``; a negative value means
    the accelerated plan is cheaper or shorter.
    """
    click.echo("Comparison")
    click.echo("=" * 72)
    keys = [
        "total_payment",
        "total_interest",
        "payments_made",
    ]
    click.echo(f"{'Metric':20s} {'Baseline':>15s} {'Accelerated':>15s} {'Difference':>15s}")
    for key in keys:
        v1 = baseline[key]
        v2 = accelerated[key]
        diff = v2 - v1
        click.echo(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    if "payoff_date" in accelerated:
        click.echo(f"{'payoff_date':20s} {'':>15s} {accelerated['payoff_date']:>15s}")
    click.echo("=" * 72)
