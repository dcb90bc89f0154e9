from __future__ import annotations

from flask import Blueprint, jsonify, request
from werkzeug.wrappers.response import Response

from .app_sessions import current_user_id, require_user
from .dashboard_service import build_dashboard, parse_months_limit
from .db import get_session
from .emissions_repo import EmissionsRepo, Scope3Repo
from .errors import ValidationError
from .shares import ShareSet, normalise_shares

bp = Blueprint("dashboard_api", __name__, url_prefix="/api")


@bp.get("/dashboard")
@require_user
def dashboard() -> Response:
    months_limit = parse_months_limit(request.args.get("months"))
    user_id = current_user_id()
    db = get_session()
    try:
        entries = EmissionsRepo(db).list_for_user(user_id)
        scope3_rows = Scope3Repo(db).list_for_user(user_id)
        return jsonify({"ok": True, **build_dashboard(entries, scope3_rows, months_limit)})
    finally:
        db.close()


@bp.post("/shares/normalise")
@require_user
def normalise() -> Response:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError([{"field": "body", "msg": "expected a JSON object"}])
    try:
        raw = ShareSet.from_mapping(data)
    except (TypeError, ValueError):
        raise ValidationError([{"field": "body", "msg": "shares must be numeric"}]) from None
    # NaN/inf strings parse as floats; normalise_shares rejects them (422)
    result = normalise_shares(raw)
    return jsonify({"ok": True, "shares": result.as_dict(), "total": result.total})
