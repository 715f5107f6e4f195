"""JSON API around the debt planner.

Every endpoint is stateless: the request body carries the loan snapshots,
the response carries the computed schedule, comparison or analysis.
"""

from __future__ import annotations

from flask import Flask, jsonify, request

from debt_planner.amortization import compute_standard_payment, generate_schedule, summarize_schedule
from debt_planner.analysis import analyze_refinance, debt_summary, extra_payment_impact
from debt_planner.config import Settings
from debt_planner.errors import DebtPlannerError, InvalidInputError
from debt_planner.export import comparison_to_dict, schedule_to_rows, to_serializable
from debt_planner.logging_config import get_logger, setup_logging
from debt_planner.parsing import build_loan_from_mapping, build_loans, parse_amount, parse_term
from debt_planner.planner import compare_strategies
from debt_planner.utils import to_date, to_decimal

settings = Settings.from_env()
setup_logging(settings.log_level, json_output=settings.log_json)
logger = get_logger("web")

app = Flask(__name__)
app.secret_key = settings.secret_key
app.config["DEBT_PLANNER_SETTINGS"] = settings


def _settings() -> Settings:
    return app.config["DEBT_PLANNER_SETTINGS"]


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data


def _loan_from_payload(data: dict):
    loan = data.get("loan")
    if loan is None:
        raise InvalidInputError("Request is missing 'loan'")
    return build_loan_from_mapping(loan, default_id="loan")


def _loans_from_payload(data: dict):
    loans = data.get("loans")
    if not isinstance(loans, list):
        raise InvalidInputError("Request must contain a 'loans' list")
    return build_loans(loans)


def _optional_amount(data: dict, *keys: str):
    for key in keys:
        if data.get(key) not in (None, ""):
            return parse_amount(data[key])
    return 0


@app.errorhandler(DebtPlannerError)
def handle_planner_error(exc: DebtPlannerError):
    status = 400 if isinstance(exc, InvalidInputError) else 422
    logger.info("Rejected %s %s: %s", request.method, request.path, exc)
    body = {"error": type(exc).__name__, "message": str(exc)}
    if exc.loan_id is not None:
        body["loan_id"] = exc.loan_id
    return jsonify(body), status


@app.get("/health")
def health():
    return jsonify({"status": "ok"})


@app.post("/api/payment")
def payment():
    data = _payload()
    for key in ("balance", "annual_rate_percent", "term_months"):
        if data.get(key) is None:
            raise InvalidInputError(f"Request is missing '{key}'")
    value = compute_standard_payment(
        parse_amount(data["balance"]),
        to_decimal(data["annual_rate_percent"], "annual_rate_percent"),
        parse_term(data["term_months"]),
    )
    return jsonify({"monthly_payment": float(value)})


@app.post("/api/schedule")
def schedule():
    data = _payload()
    loan = _loan_from_payload(data)
    entries = generate_schedule(
        loan,
        extra_payment=_optional_amount(data, "extra_payment"),
        max_months=_settings().max_schedule_months,
    )
    rows = schedule_to_rows(entries)
    body = {"summary": to_serializable(summarize_schedule(loan, entries)), "schedule": rows}
    preview_rows = _settings().preview_rows
    if not data.get("full_schedule") and len(rows) > preview_rows:
        body["schedule"] = rows[:preview_rows]
        body["truncated"] = len(rows) - preview_rows
    return jsonify(body)


@app.post("/api/compare")
def compare():
    data = _payload()
    loans = _loans_from_payload(data)
    start = data.get("start_date")
    comparison = compare_strategies(
        loans,
        _optional_amount(data, "extra_monthly_payment", "extra_payment"),
        start_date=to_date(start, "start_date") if start else None,
        max_months=_settings().max_schedule_months,
    )
    return jsonify(comparison_to_dict(comparison))


@app.post("/api/summary")
def summary():
    data = _payload()
    result = debt_summary(_loans_from_payload(data), max_months=_settings().max_schedule_months)
    return jsonify(to_serializable(result))


@app.post("/api/extra-payment-impact")
def impact():
    data = _payload()
    if data.get("extra_payment") in (None, ""):
        raise InvalidInputError("Request is missing 'extra_payment'")
    result = extra_payment_impact(
        _loan_from_payload(data),
        parse_amount(data["extra_payment"]),
        max_months=_settings().max_schedule_months,
    )
    return jsonify(to_serializable(result))


@app.post("/api/refinance")
def refinance():
    data = _payload()
    if data.get("new_rate") in (None, ""):
        raise InvalidInputError("Request is missing 'new_rate'")
    result = analyze_refinance(
        _loan_from_payload(data),
        to_decimal(data["new_rate"], "new_rate"),
        _optional_amount(data, "closing_costs"),
        max_months=_settings().max_schedule_months,
    )
    return jsonify(to_serializable(result))


if __name__ == "__main__":
    print("Starting debt planner API...")
    app.run(host="0.0.0.0", port=8710, debug=True)
