"""Admin support endpoints over the WARN+ ring buffer.

Exposes:
 - GET /admin/support/ : counters and recent warnings.
 - GET /admin/support/lookup?request_id=... : ring buffer entries for one request.
"""
from __future__ import annotations

from datetime import UTC, datetime

from flask import Blueprint, current_app, jsonify, request
from werkzeug.wrappers.response import Response

from .app_sessions import require_role
from .errors import ValidationError
from .logging_setup import LOG_BUFFER, recent_problems
from .metrics import MemoryMetrics, get_metrics

bp = Blueprint("support_api", __name__, url_prefix="/admin/support")


@bp.get("/")
@require_role("admin")
def support_home() -> Response:
    metrics = get_metrics()
    return jsonify(
        {
            "ok": True,
            "now": datetime.now(UTC).isoformat(),
            "factor_version": current_app.config["FACTOR_VERSION"],
            "metrics": dict(metrics.counts) if isinstance(metrics, MemoryMetrics) else None,
            "recent_warnings": recent_problems(50),
        }
    )


@bp.get("/lookup")
@require_role("admin")
def support_lookup() -> Response:
    rid = request.args.get("request_id", "").strip()
    if not rid:
        raise ValidationError([{"field": "request_id", "msg": "required"}])
    hits = [r for r in LOG_BUFFER if r.get("request_id") == rid]
    return jsonify({"ok": True, "request_id": rid, "hits": hits})
