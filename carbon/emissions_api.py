"""Scope 1/2 emissions CRUD."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from werkzeug.wrappers.response import Response

from .app_sessions import current_user_id, require_user
from .co2e import EmissionInput, calculate_co2e, parse_month
from .db import get_session
from .emissions_repo import EmissionsRepo
from .errors import NotFoundError, ValidationError
from .factors import load_factor_set, refrigerant_label
from .formatting import display_month_label
from .metrics import increment
from .models import EmissionEntry
from .pagination import make_page_response, page_offset, parse_page_params

bp = Blueprint("emissions_api", __name__, url_prefix="/api/emissions")


def serialize_entry(e: EmissionEntry) -> dict[str, Any]:
    return {
        "id": e.id,
        "month": e.month.isoformat() if e.month else None,
        "month_label": display_month_label(e.month),
        "electricity_kwh": e.electricity_kwh,
        "diesel_litres": e.diesel_litres,
        "petrol_litres": e.petrol_litres,
        "gas_kwh": e.gas_kwh,
        "refrigerant_type": e.refrigerant_type,
        "refrigerant_label": refrigerant_label(e.refrigerant_type),
        "refrigerant_kg": e.refrigerant_kg,
        "total_co2e": e.total_co2e,
        "factor_version": e.factor_version,
    }


@bp.post("")
@require_user
def create_entry() -> tuple[Response, int]:
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError([{"field": "body", "msg": "expected a JSON object"}])
    month = parse_month(data.get("month"))
    inp = EmissionInput.from_payload(data)
    user_id = current_user_id()
    db = get_session()
    try:
        factors = load_factor_set(
            db, current_app.config["FACTOR_VERSION"], current_app.config["FACTOR_REGION"]
        )
        result = calculate_co2e(inp, factors)
        entry = EmissionsRepo(db).add(
            user_id=user_id,
            month=month,
            electricity_kwh=inp.electricity_kwh,
            diesel_litres=inp.diesel_litres,
            petrol_litres=inp.petrol_litres,
            gas_kwh=inp.gas_kwh,
            refrigerant_type=inp.refrigerant_type,
            refrigerant_kg=inp.refrigerant_kg,
            total_co2e=result.total,
            factor_version=factors.version,
        )
        increment("emissions.create", {"factor_version": factors.version})
        current_app.logger.info("emission entry created id=%s user=%s month=%s", entry.id, user_id, month)
        return (
            jsonify(
                {
                    "ok": True,
                    "id": entry.id,
                    "total_co2e": result.total,
                    "breakdown": result.to_dict(),
                    "factor_version": factors.version,
                }
            ),
            201,
        )
    finally:
        db.close()


@bp.get("")
@require_user
def list_entries() -> Response:
    page_req = parse_page_params(request.args)
    user_id = current_user_id()
    db = get_session()
    try:
        repo = EmissionsRepo(db)
        total = repo.count_for_user(user_id)
        items = repo.list_for_user(user_id, limit=page_req["size"], offset=page_offset(page_req))
        return jsonify(make_page_response([serialize_entry(e) for e in items], page_req, total))
    finally:
        db.close()


@bp.delete("/<int:entry_id>")
@require_user
def delete_entry(entry_id: int) -> Response:
    db = get_session()
    try:
        if not EmissionsRepo(db).delete(current_user_id(), entry_id):
            raise NotFoundError("emission_not_found")
        return jsonify({"ok": True, "deleted": entry_id})
    finally:
        db.close()
