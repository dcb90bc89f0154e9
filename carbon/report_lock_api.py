"""Per-month report lock flags.

A lock marks a month's report as final; the flag is stored and listed here,
readers decide what a locked month means for them.
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.wrappers.response import Response

from .app_sessions import current_user_id, require_user
from .co2e import parse_month
from .db import get_session
from .emissions_repo import ReportLockRepo
from .errors import ValidationError
from .formatting import display_month_label
from .metrics import increment
from .models import ReportLock

bp = Blueprint("report_lock_api", __name__, url_prefix="/api/report-lock")


def _serialize(row: ReportLock) -> dict[str, Any]:
    return {
        "month": row.month.isoformat() if row.month else None,
        "month_label": display_month_label(row.month),
        "locked": bool(row.locked),
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


@bp.post("")
@require_user
def set_lock() -> Response:
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError([{"field": "body", "msg": "expected a JSON object"}])
    errors = []
    if not data.get("month"):
        errors.append({"field": "month", "msg": "required"})
    if not isinstance(data.get("locked"), bool):
        errors.append({"field": "locked", "msg": "expected true or false"})
    if errors:
        raise ValidationError(errors)
    month = parse_month(data["month"])
    db = get_session()
    try:
        row = ReportLockRepo(db).set_lock(current_user_id(), month, data["locked"])
        increment("report.lock", {"locked": str(row.locked).lower()})
        return jsonify({"ok": True, "lock": _serialize(row)})
    finally:
        db.close()


@bp.get("")
@require_user
def list_locks() -> Response:
    db = get_session()
    try:
        rows = ReportLockRepo(db).list_for_user(current_user_id())
        return jsonify({"ok": True, "items": [_serialize(r) for r in rows]})
    finally:
        db.close()
