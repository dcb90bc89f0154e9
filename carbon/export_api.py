from __future__ import annotations

from flask import Blueprint, Response

from .app_sessions import current_user_id, require_user
from .db import get_session
from .emissions_repo import EmissionsRepo
from .errors import ForbiddenError
from .export import build_csv, build_xlsx
from .metrics import increment
from .models import UserPlan

bp = Blueprint("export_api", __name__, url_prefix="/api/export")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _require_paid_plan(db, user_id: str) -> str:
    row = (
        db.query(UserPlan)
        .filter(UserPlan.user_id == user_id)
        .order_by(UserPlan.created_at.desc(), UserPlan.id.desc())
        .first()
    )
    plan = (row.plan if row else "free") or "free"
    if plan == "free":
        raise ForbiddenError("export_requires_paid_plan", plan=plan)
    return plan


def _export(fmt: str) -> Response:
    user_id = current_user_id()
    db = get_session()
    try:
        plan = _require_paid_plan(db, user_id)
        rows = EmissionsRepo(db).list_for_user(user_id, ascending=True)
        if fmt == "csv":
            body, mimetype = build_csv(rows), "text/csv"
        else:
            body, mimetype = build_xlsx(rows), XLSX_MIMETYPE
    finally:
        db.close()
    increment("export.download", {"format": fmt, "plan": plan})
    resp = Response(body, mimetype=mimetype)
    resp.headers["Content-Disposition"] = f'attachment; filename="emissions-export.{fmt}"'
    return resp


@bp.get("/csv")
@require_user
def export_csv() -> Response:
    return _export("csv")


@bp.get("/xlsx")
@require_user
def export_xlsx() -> Response:
    return _export("xlsx")
