"""AI insight endpoints.

``POST /api/ai/insights`` regenerates and stores the insight for the caller;
``POST /api/ai/recompute-all`` does the same for every user with data
(admin only, meant for a scheduled job). ``recompute-on-change`` refreshes it
after an edit to one month. ``recommended-actions`` and ``performance`` are
answered on the fly and not stored.
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from werkzeug.wrappers.response import Response

from .ai_data import prepare_ai_data
from .app_sessions import current_user_id, require_role, require_user
from .co2e import parse_month
from .dashboard_service import build_dashboard
from .db import get_session
from .emissions_repo import EmissionsRepo, Scope3Repo
from .errors import NotFoundError, ValidationError
from .insights_service import InsightService
from .shares import ShareSet, normalise_shares

bp = Blueprint("insights_api", __name__, url_prefix="/api/ai")


def _service() -> InsightService:
    return current_app.insight_service  # type: ignore[attr-defined]


@bp.get("/data")
@require_user
def ai_data() -> Response:
    user_id = current_user_id()
    db = get_session()
    try:
        entries = EmissionsRepo(db).list_for_user(user_id)
        scope3_rows = Scope3Repo(db).list_for_user(user_id)
        months = build_dashboard(entries, scope3_rows, current_app.config["AI_MONTHS_LIMIT"])["months"]
        return jsonify({"ok": True, "months": prepare_ai_data(months)})
    finally:
        db.close()


@bp.post("/insights")
@require_user
def generate_insight() -> tuple[Response, int]:
    db = get_session()
    try:
        insight = _service().generate_for_user(
            db,
            current_user_id(),
            period=current_app.config["AI_PERIOD"],
            months_limit=current_app.config["AI_MONTHS_LIMIT"],
        )
        return jsonify({"ok": True, "insight": insight}), 201
    finally:
        db.close()


@bp.get("/insights")
@require_user
def latest_insight() -> Response:
    db = get_session()
    try:
        insight = _service().latest_for_user(db, current_user_id(), period=current_app.config["AI_PERIOD"])
        if insight is None:
            raise NotFoundError("insight_not_found")
        return jsonify({"ok": True, "insight": insight})
    finally:
        db.close()


@bp.post("/recompute-all")
@require_role("admin")
def recompute_all() -> Response:
    db = get_session()
    try:
        summary = _service().generate_for_all_users(
            db,
            period=current_app.config["AI_PERIOD"],
            months_limit=current_app.config["AI_MONTHS_LIMIT"],
        )
        current_app.logger.info("ai recompute-all processed=%s", summary["processed"])
        return jsonify({"ok": True, **summary})
    finally:
        db.close()


@bp.post("/recompute-on-change")
@require_user
def recompute_on_change() -> Response:
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError([{"field": "body", "msg": "expected a JSON object"}])
    month = parse_month(data.get("month"))
    db = get_session()
    try:
        insight = _service().recompute_for_month(
            db,
            current_user_id(),
            month,
            period=current_app.config["AI_PERIOD"],
            months_limit=current_app.config["AI_MONTHS_LIMIT"],
        )
        return jsonify({"ok": True, "insight": insight})
    finally:
        db.close()


@bp.post("/recommended-actions")
@require_user
def recommended_actions() -> Response:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError([{"field": "body", "msg": "expected a JSON object"}])
    try:
        raw = ShareSet.from_mapping(data)
    except (TypeError, ValueError):
        raise ValidationError([{"field": "body", "msg": "shares must be numeric"}]) from None
    months = data.get("months", 0)
    if isinstance(months, bool) or not isinstance(months, int) or months < 0:
        raise ValidationError([{"field": "months", "msg": "expected a non-negative integer"}])
    shares = normalise_shares(raw)
    actions = _service().recommend_actions(shares, months)
    return jsonify({"ok": True, "shares": shares.as_dict(), "actions": actions})


@bp.get("/performance")
@require_user
def performance() -> Response:
    db = get_session()
    try:
        result = _service().performance_for_user(db, current_user_id())
        return jsonify({"ok": True, **result})
    finally:
        db.close()
