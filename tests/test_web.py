from decimal import Decimal

import pytest

from mortgage_calc.engine import MAX_AMOUNT
from mortgage_calc_web.app import XLSX_MIMETYPE, app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def _stored_inputs(client) -> dict:
    with client.session_transaction() as sess:
        return sess["inputs"]


class TestIndex:
    def test_default_page(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert b"Mortgage Calculator" in response.data
        assert b"1896.20" in response.data
        assert b"Show full schedule" in response.data

    def test_full_schedule(self, client):
        response = client.get("/?show_full_schedule=1")
        assert b"Show full schedule" not in response.data
        assert b"<td>360</td>" in response.data

    def test_post_updates_inputs(self, client):
        response = client.post(
            "/",
            data={
                "loan_amount": "200000",
                "annual_rate": "5",
                "term_years": "15",
                "extra_payment": "100",
                "payment_frequency": "monthly",
            },
        )
        assert response.status_code == 200
        assert b"Interest saved" in response.data
        stored = _stored_inputs(client)
        assert stored["loan_amount"] == "200000"
        assert stored["term_years"] == "15"

    def test_invalid_inputs_withhold_result(self, client):
        response = client.post("/", data={"loan_amount": "0"})
        assert response.status_code == 200
        assert b"Enter a loan amount and term" in response.data
        assert b"Amortization Schedule" not in response.data

    def test_unknown_frequency_reports_error(self, client):
        response = client.post("/", data={"payment_frequency": "weekly"})
        assert response.status_code == 200
        assert b"class=\"error\"" in response.data


class TestOneTimePayments:
    def test_add_and_replace(self, client):
        response = client.post("/one-time/add", data={"month": "12", "amount": "5000"})
        assert response.status_code == 302
        client.post("/one-time/add", data={"month": "12", "amount": "8000"})
        assert _stored_inputs(client)["one_time_payments"] == [[12, "8000"]]

        page = client.get("/")
        assert b"Month 12: 8000.00" in page.data
        assert b"Interest saved" in page.data

    def test_zero_amount_ignored(self, client):
        client.post("/one-time/add", data={"month": "12", "amount": "0"})
        assert _stored_inputs(client)["one_time_payments"] == []

    def test_remove(self, client):
        client.post("/one-time/add", data={"month": "24", "amount": "1000"})
        response = client.post("/one-time/remove", data={"month": "24"})
        assert response.status_code == 302
        assert _stored_inputs(client)["one_time_payments"] == []


class TestActions:
    def test_toggle_frequency(self, client):
        client.post("/frequency/toggle")
        assert _stored_inputs(client)["payment_frequency"] == "biweekly"
        assert b"Bi-weekly payment" in client.get("/").data

    def test_reset(self, client):
        client.post("/", data={"loan_amount": "100000"})
        response = client.post("/reset")
        assert response.status_code == 302
        with client.session_transaction() as sess:
            assert "inputs" not in sess


class TestExport:
    def test_json(self, client):
        response = client.get("/export/json")
        assert response.status_code == 200
        data = response.get_json()
        assert len(data["schedule"]) == 360
        assert data["summary"]["payments_made"] == 360

    def test_csv(self, client):
        response = client.get("/export/csv")
        assert response.status_code == 200
        assert response.mimetype == "text/csv"
        lines = response.get_data(as_text=True).splitlines()
        assert lines[0].startswith("Month,Payment,Principal")
        assert len(lines) == 361

    def test_xlsx(self, client):
        response = client.get("/export/xlsx")
        assert response.status_code == 200
        assert response.mimetype == XLSX_MIMETYPE
        assert response.data[:2] == b"PK"

    def test_unknown_format(self, client):
        assert client.get("/export/pdf").status_code == 404

    def test_export_without_result(self, client):
        client.post("/", data={"loan_amount": "0"})
        assert client.get("/export/json").status_code == 400


class TestOutOfRangeInputs:
    def test_huge_loan_amount_is_clamped(self, client):
        response = client.post("/", data={"loan_amount": "9e999999"})
        assert response.status_code == 200
        assert Decimal(_stored_inputs(client)["loan_amount"]) == MAX_AMOUNT

        assert client.get("/").status_code == 200
        assert client.get("/export/json").status_code == 200

    def test_huge_extra_and_one_time_amounts_are_clamped(self, client):
        client.post("/", data={"extra_payment": "9e999999"})
        client.post("/one-time/add", data={"month": "12", "amount": "9e999999"})
        stored = _stored_inputs(client)
        assert Decimal(stored["extra_payment"]) == MAX_AMOUNT
        assert stored["one_time_payments"] == [[12, str(MAX_AMOUNT)]]
        assert client.get("/").status_code == 200

    def test_unknown_frequency_leaves_other_fields_unchanged(self, client):
        response = client.post("/", data={"loan_amount": "200000", "payment_frequency": "weekly"})
        assert b"class=\"error\"" in response.data
        stored = _stored_inputs(client)
        assert stored["loan_amount"] == "300000"
        assert stored["payment_frequency"] == "monthly"
