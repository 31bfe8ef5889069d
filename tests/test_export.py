import csv
import json
from dataclasses import replace
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from mortgage_calc.data_models import OneTimePayment, PaymentFrequency
from mortgage_calc.engine import compute_mortgage
from mortgage_calc.export import (
    SCHEDULE_HEADER,
    build_summary,
    export_to_csv,
    export_to_excel,
    export_to_json,
    serialize_schedule,
)


@pytest.fixture
def accelerated_params(baseline_params):
    return replace(
        baseline_params,
        extra_payment=Decimal("200"),
        payment_frequency=PaymentFrequency.BIWEEKLY,
        one_time_payments=(OneTimePayment(month=12, amount=Decimal("5000")),),
    )


class TestSummary:
    def test_baseline_has_no_optional_keys(self, baseline_params, start_date):
        result = compute_mortgage(baseline_params, start_date=start_date)
        summary = build_summary(result, baseline_params)
        assert summary["monthly_payment"] == pytest.approx(1896.20, abs=0.01)
        assert summary["payments_made"] == 360
        assert summary["term_months"] == 360
        for key in ("biweekly_payment", "interest_saved", "months_saved", "payoff_date"):
            assert key not in summary

    def test_accelerated_has_savings(self, accelerated_params, start_date):
        result = compute_mortgage(accelerated_params, start_date=start_date)
        summary = build_summary(result, accelerated_params)
        assert summary["payment_frequency"] == "biweekly"
        assert summary["biweekly_payment"] == pytest.approx(float(result.monthly_payment) / 2)
        assert summary["interest_saved"] > 0
        assert summary["months_saved"] == result.months_saved
        assert summary["payoff_date"] == result.payoff_date.isoformat()
        assert summary["one_time_payments"] == [{"month": 12, "amount": 5000.0}]
        json.dumps(summary)

    def test_serialize_schedule(self, accelerated_params, start_date):
        result = compute_mortgage(accelerated_params, start_date=start_date)
        rows = serialize_schedule(result.schedule)
        assert len(rows) == len(result.schedule)
        assert rows[11]["one_time_payment"] is True
        assert set(rows[0]) == {"month", "payment", "principal", "interest", "balance", "one_time_payment"}


class TestFiles:
    def test_json(self, tmp_path, baseline_params, start_date):
        result = compute_mortgage(baseline_params, start_date=start_date)
        path = tmp_path / "schedule.json"
        export_to_json(path, result, baseline_params)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data["schedule"]) == 360
        assert data["schedule"][-1]["balance"] == 0
        assert data["summary"]["payments_made"] == 360

    def test_csv(self, tmp_path, accelerated_params, start_date):
        result = compute_mortgage(accelerated_params, start_date=start_date)
        path = tmp_path / "schedule.csv"
        export_to_csv(path, result.schedule)
        with path.open(newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == SCHEDULE_HEADER
        assert len(rows) == len(result.schedule) + 1
        assert rows[12][5] == "Yes"
        assert rows[1][5] == ""

    def test_excel(self, tmp_path, accelerated_params, start_date):
        result = compute_mortgage(accelerated_params, start_date=start_date)
        path = tmp_path / "report.xlsx"
        export_to_excel(path, result, accelerated_params)

        workbook = load_workbook(path)
        assert workbook.sheetnames == ["Summary", "Amortization Schedule"]
        schedule_sheet = workbook["Amortization Schedule"]
        assert schedule_sheet.max_row == len(result.schedule) + 1
        assert schedule_sheet["A1"].value == "Month"
        assert schedule_sheet["F13"].value == "Yes"
        labels = [row[0] for row in workbook["Summary"].iter_rows(values_only=True)]
        assert "Bi-Weekly Payment" in labels
        assert "Interest Saved" in labels

    def test_excel_baseline_has_no_savings_section(self, tmp_path, baseline_params, start_date):
        result = compute_mortgage(baseline_params, start_date=start_date)
        path = tmp_path / "report.xlsx"
        export_to_excel(path, result, baseline_params)
        labels = [row[0] for row in load_workbook(path)["Summary"].iter_rows(values_only=True)]
        assert "Interest Saved" not in labels
        assert "Bi-Weekly Payment" not in labels
