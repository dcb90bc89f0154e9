from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.wrappers.response import Response

from .app_sessions import current_user_id, require_user
from .db import get_session
from .emissions_repo import Scope3Repo
from .errors import NotFoundError, ValidationError
from .formatting import display_month_label
from .metrics import increment
from .models import Scope3Entry
from .scope3 import calculate_scope3_co2e_kg, parse_scope3_activity

bp = Blueprint("scope3_api", __name__, url_prefix="/api/scope3")


def _serialize(e: Scope3Entry) -> dict[str, Any]:
    return {
        "id": e.id,
        "month": e.month.isoformat() if e.month else None,
        "month_label": display_month_label(e.month),
        "category": e.category,
        "label": e.label,
        "details": e.details or {},
        "co2e_kg": e.co2e_kg,
    }


@bp.post("")
@require_user
def create_activity() -> tuple[Response, int]:
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError([{"field": "body", "msg": "expected a JSON object"}])
    activity = parse_scope3_activity(data)
    co2e = calculate_scope3_co2e_kg(activity)
    db = get_session()
    try:
        entry = Scope3Repo(db).add(
            user_id=current_user_id(),
            month=activity.month,
            category=activity.category,
            label=activity.label,
            details=activity.details,
            co2e_kg=co2e,
        )
        increment("scope3.create", {"category": activity.category})
        return jsonify({"ok": True, "activity": _serialize(entry)}), 201
    finally:
        db.close()


@bp.get("")
@require_user
def list_activities() -> Response:
    db = get_session()
    try:
        items = Scope3Repo(db).list_for_user(current_user_id())
        return jsonify({"ok": True, "items": [_serialize(e) for e in items]})
    finally:
        db.close()


@bp.delete("/<int:activity_id>")
@require_user
def delete_activity(activity_id: int) -> Response:
    db = get_session()
    try:
        if not Scope3Repo(db).delete(current_user_id(), activity_id):
            raise NotFoundError("scope3_not_found")
        return jsonify({"ok": True, "deleted": activity_id})
    finally:
        db.close()
