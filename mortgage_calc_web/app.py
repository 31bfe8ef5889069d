import io
import logging
import os
from decimal import DecimalException

from flask import Flask, Response, abort, jsonify, redirect, render_template, request, send_file, session, url_for

from mortgage_calc.controller import MortgageInputs
from mortgage_calc.data_models import PaymentFrequency
from mortgage_calc.export import build_summary, build_workbook, serialize_schedule, write_csv

logging.basicConfig(
    level=os.environ.get("MORTGAGE_CALC_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")

SCHEDULE_PREVIEW_ROWS = 120
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _load_inputs() -> MortgageInputs:
    return MortgageInputs.from_state(session.get("inputs"))


def _save_inputs(inputs: MortgageInputs) -> None:
    session["inputs"] = inputs.to_state()
    session.modified = True


def _apply_form(inputs: MortgageInputs, form) -> None:
    """Copy submitted form fields onto ``inputs``; missing fields are left alone.

    Raises ``ValueError`` for an unknown payment frequency before any field
    is changed.
    """
    frequency = PaymentFrequency(form["payment_frequency"]) if "payment_frequency" in form else None
    if "loan_amount" in form:
        inputs.update_loan_amount(form["loan_amount"])
    if "annual_rate" in form:
        inputs.update_annual_rate(form["annual_rate"])
    if "term_years" in form:
        inputs.update_term_years(form["term_years"])
    if "extra_payment" in form:
        inputs.update_extra_payment(form["extra_payment"] or "0")
    if frequency is not None:
        inputs.set_payment_frequency(frequency)


def _schedule_for_view(schedule: list, show_full_schedule: bool):
    if show_full_schedule:
        return schedule, 0
    preview = schedule[:SCHEDULE_PREVIEW_ROWS]
    return preview, len(schedule) - len(preview)


@app.route("/", methods=["GET", "POST"])
def index():
    error = None
    inputs = _load_inputs()
    show_full_schedule = request.values.get("show_full_schedule") == "1"

    if request.method == "POST":
        try:
            _apply_form(inputs, request.form)
        except ValueError as exc:
            error = str(exc)
        _save_inputs(inputs)

    summary = None
    schedule = []
    truncated = 0
    try:
        result = inputs.result
    except (ValueError, DecimalException) as exc:
        result = None
        error = str(exc)
    if result is not None:
        summary = build_summary(result, inputs.parameters())
        schedule, truncated = _schedule_for_view(result.schedule, show_full_schedule)

    return render_template(
        "index.html",
        inputs=inputs,
        summary=summary,
        schedule=schedule,
        truncated=truncated,
        show_full_schedule=show_full_schedule,
        error=error,
        asset_version=app.config["ASSET_VERSION"],
    )


@app.post("/one-time/add")
def add_one_time_payment():
    inputs = _load_inputs()
    inputs.update_one_time_month(request.form.get("month", ""))
    inputs.update_one_time_amount(request.form.get("amount", ""))
    if not inputs.add_one_time_payment():
        logger.info("Rejected one-time payment for month %s", inputs.one_time_month)
    _save_inputs(inputs)
    return redirect(url_for("index"))


@app.post("/one-time/remove")
def remove_one_time_payment():
    inputs = _load_inputs()
    month = request.form.get("month", type=int)
    if month is not None:
        inputs.remove_one_time_payment(month)
        _save_inputs(inputs)
    return redirect(url_for("index"))


@app.post("/frequency/toggle")
def toggle_frequency():
    inputs = _load_inputs()
    inputs.toggle_payment_frequency()
    _save_inputs(inputs)
    return redirect(url_for("index"))


@app.post("/reset")
def reset():
    session.pop("inputs", None)
    return redirect(url_for("index"))


@app.get("/export/<fmt>")
def export(fmt: str):
    inputs = _load_inputs()
    try:
        result = inputs.result
    except (ValueError, DecimalException) as exc:
        abort(400, description=str(exc))
    if result is None:
        abort(400, description="Enter a loan amount and term before exporting")
    params = inputs.parameters()

    if fmt == "json":
        return jsonify({"summary": build_summary(result, params), "schedule": serialize_schedule(result.schedule)})
    if fmt == "csv":
        buffer = io.StringIO()
        write_csv(buffer, result.schedule)
        return Response(
            buffer.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=mortgage-schedule.csv"},
        )
    if fmt == "xlsx":
        buffer = io.BytesIO()
        build_workbook(result, params).save(buffer)
        buffer.seek(0)
        return send_file(buffer, mimetype=XLSX_MIMETYPE, as_attachment=True, download_name="mortgage-report.xlsx")
    abort(404)


if __name__ == "__main__":
    print("Starting Mortgage Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
