from datetime import date
from decimal import Decimal

import pytest

from mortgage_calc.data_models import LoanParameters, OneTimePayment, PaymentFrequency, remove_one_time_payment
from mortgage_calc.utils import add_months, decimal_from_str, parse_amount, parse_date, parse_one_time_payment


class TestAddMonths:
    def test_same_year(self):
        assert add_months(date(2026, 1, 15), 3) == date(2026, 4, 15)

    def test_rolls_over_year(self):
        assert add_months(date(2026, 11, 15), 14) == date(2028, 1, 15)

    def test_clamps_day_to_month_end(self):
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_months(date(2027, 12, 31), 2) == date(2028, 2, 29)

    def test_zero_months(self):
        assert add_months(date(2026, 5, 5), 0) == date(2026, 5, 5)


class TestParsing:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("300000", Decimal("300000")),
            ("300,000", Decimal("300000")),
            ("300k", Decimal("300000")),
            ("1.5M", Decimal("1500000")),
            (" 250.75 ", Decimal("250.75")),
        ],
    )
    def test_parse_amount(self, text, expected):
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "12x", "nan", "inf", "9e999999m"])
    def test_parse_amount_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)

    def test_decimal_from_str(self):
        assert decimal_from_str("1,234.5") == Decimal("1234.5")
        with pytest.raises(ValueError):
            decimal_from_str("twelve")

    def test_parse_date(self):
        assert parse_date("2026-03") == date(2026, 3, 1)
        assert parse_date("2026-03-15") == date(2026, 3, 15)

    @pytest.mark.parametrize("text", ["2026", "2026/03", "2026-13", "2026-02-30", "march"])
    def test_parse_date_rejects_invalid(self, text):
        with pytest.raises(ValueError):
            parse_date(text)

    def test_parse_one_time_payment(self):
        assert parse_one_time_payment("12:5k") == OneTimePayment(month=12, amount=Decimal("5000"))

    @pytest.mark.parametrize("text", ["12", "12:5000:extra", "0:100", "x:100", "12:0", "12:-5"])
    def test_parse_one_time_payment_rejects_invalid(self, text):
        with pytest.raises(ValueError):
            parse_one_time_payment(text)


class TestLoanParameters:
    def test_term_months(self, baseline_params):
        assert baseline_params.term_months == 360

    def test_fractional_month_truncates(self):
        params = LoanParameters(Decimal("1000"), Decimal("5"), Decimal("2.55"))
        assert params.term_months == 30

    def test_baseline_is_not_accelerated(self, baseline_params):
        assert not baseline_params.is_accelerated

    @pytest.mark.parametrize(
        "changes",
        [
            {"extra_payment": Decimal("1")},
            {"payment_frequency": PaymentFrequency.BIWEEKLY},
            {"one_time_payments": (OneTimePayment(month=5, amount=Decimal("100")),)},
        ],
    )
    def test_acceleration_triggers(self, changes):
        params = LoanParameters(Decimal("1000"), Decimal("5"), Decimal("1"), **changes)
        assert params.is_accelerated

    def test_lookup_later_entry_wins(self):
        params = LoanParameters(
            Decimal("1000"),
            Decimal("5"),
            Decimal("1"),
            one_time_payments=(
                OneTimePayment(month=6, amount=Decimal("5000")),
                OneTimePayment(month=6, amount=Decimal("8000")),
            ),
        )
        assert params.one_time_lookup() == {6: Decimal("8000")}

    def test_remove_one_time_payment(self):
        payments = (
            OneTimePayment(month=6, amount=Decimal("100")),
            OneTimePayment(month=9, amount=Decimal("200")),
        )
        assert remove_one_time_payment(payments, 6) == (OneTimePayment(month=9, amount=Decimal("200")),)
        assert remove_one_time_payment(payments, 7) == payments
