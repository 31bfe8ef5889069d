"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command interface.
Users can compute full amortization schedules, view summaries or compare an
accelerated payoff with the baseline loan. Results can be printed to the
terminal or exported to JSON, CSV or Excel files. PDF output is not
supported.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, DecimalException
from pathlib import Path
from typing import Optional, Tuple

import click

from .data_models import LoanParameters, MortgageResult, OneTimePayment, PaymentFrequency, merge_one_time_payment
from .engine import compute_mortgage, validate_parameters
from .export import build_summary, export_to_csv, export_to_excel, export_to_json
from .formatter import print_comparison, print_schedule, print_summary
from .utils import decimal_from_str, parse_amount, parse_date, parse_one_time_payment

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120


def build_params_from_options(
    principal: str,
    rate: str,
    years: str,
    extra: Optional[str] = None,
    frequency: str = "monthly",
    one_time: Tuple[str, ...] = (),
) -> LoanParameters:
    """Turn raw option strings into ``LoanParameters``.

    Raises ``click.BadParameter`` for anything the engine would reject.
    """
    try:
        principal_value = parse_amount(principal)
        rate_value = decimal_from_str(rate.rstrip("%"))
        years_value = decimal_from_str(years)
        extra_value = parse_amount(extra) if extra else Decimal("0")
        one_time_payments: Tuple[OneTimePayment, ...] = ()
        for item in one_time:
            one_time_payments = merge_one_time_payment(one_time_payments, parse_one_time_payment(item))
    except ValueError as exc:
        raise click.BadParameter(str(exc))

    params = LoanParameters(
        principal=principal_value,
        annual_rate=rate_value,
        term_years=years_value,
        extra_payment=extra_value,
        payment_frequency=PaymentFrequency(frequency.lower()),
        one_time_payments=one_time_payments,
    )
    try:
        validate_parameters(params)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    except DecimalException:
        raise click.BadParameter("Loan term is out of range")
    for p in params.one_time_payments:
        if p.month > params.term_months:
            logger.warning(
                "One-time payment in month %d is past the %d month term and will be ignored",
                p.month,
                params.term_months,
            )
    return params


def _parse_start_date(start_date: Optional[str]) -> Optional[date]:
    if not start_date:
        return None
    try:
        return parse_date(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def _compute(params: LoanParameters, start_date: Optional[date]) -> MortgageResult:
    try:
        return compute_mortgage(params, start_date=start_date)
    except DecimalException:
        raise click.BadParameter("Inputs are too large to compute")


def loan_options(func):
    """Attach the options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount, e.g. 300000 or 300k"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--years", "-y", "years", default="30", show_default=True, help="Loan term in years"),
        click.option("--extra", "-e", "extra", help="Extra amount added to every payment"),
        click.option(
            "--frequency",
            "frequency",
            type=click.Choice([f.value for f in PaymentFrequency]),
            default=PaymentFrequency.MONTHLY.value,
            show_default=True,
            help="Payment frequency",
        ),
        click.option("--one-time", "one_time", multiple=True, help="One-time payment in MONTH:AMOUNT format"),
        click.option(
            "--start-date",
            "-s",
            "start_date",
            help="Date the payoff projection counts from (YYYY-MM or YYYY-MM-DD); defaults to today",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A command-line mortgage calculator with extra payment planning."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json, .csv or .xlsx); PDF is not supported")
def schedule(
    principal: str,
    rate: str,
    years: str,
    extra: Optional[str],
    frequency: str,
    one_time: Tuple[str, ...],
    start_date: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    params = build_params_from_options(principal, rate, years, extra, frequency, one_time)
    result = _compute(params, _parse_start_date(start_date))
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(path, result, params)
        elif suffix == ".csv":
            export_to_csv(path, result.schedule)
        elif suffix == ".xlsx":
            export_to_excel(path, result, params)
        else:
            raise click.BadParameter("Unsupported output format; use .json, .csv or .xlsx")
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(build_summary(result, params))
        # Limit schedule length printed to avoid flooding the terminal
        if len(result.schedule) > MAX_PRINTED_ROWS:
            click.echo(
                f"Schedule has {len(result.schedule)} rows; showing first {MAX_PRINTED_ROWS} rows."
            )
            print_schedule(result.schedule[:MAX_PRINTED_ROWS])
        else:
            print_schedule(result.schedule)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: str,
    years: str,
    extra: Optional[str],
    frequency: str,
    one_time: Tuple[str, ...],
    start_date: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    params = build_params_from_options(principal, rate, years, extra, frequency, one_time)
    result = _compute(params, _parse_start_date(start_date))
    summary_data = build_summary(result, params)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@loan_options
def compare(
    principal: str,
    rate: str,
    years: str,
    extra: Optional[str],
    frequency: str,
    one_time: Tuple[str, ...],
    start_date: Optional[str],
) -> None:
    """Compare the accelerated plan with the same loan paid monthly without extras.

    Example:

        mortgage-calc compare -p 300k -r 6.5 -y 30 --extra 200 --one-time 12:5000
    """
    params = build_params_from_options(principal, rate, years, extra, frequency, one_time)
    if not params.is_accelerated:
        raise click.UsageError("Nothing to compare; pass --extra, --one-time or --frequency biweekly")
    start = _parse_start_date(start_date)
    baseline_params = replace(
        params,
        extra_payment=Decimal("0"),
        payment_frequency=PaymentFrequency.MONTHLY,
        one_time_payments=(),
    )
    baseline = build_summary(_compute(baseline_params, start), baseline_params)
    accelerated = build_summary(_compute(params, start), params)
    print_comparison(baseline, accelerated)


if __name__ == "__main__":
    cli()
