"""Flask application factory.

Wires configuration, the DB engine, metrics, RFC7807 error handlers, the
per-request log line and the API blueprints.
"""

from __future__ import annotations

import os
import time
import uuid
from typing import Any

from dotenv import load_dotenv
from flask import Flask, g, request, session
from werkzeug.wrappers.response import Response

from .app_sessions import persist_login
from .config import Config
from .dashboard_api import bp as dashboard_api_bp
from .db import init_engine, remove_session
from .emissions_api import bp as emissions_api_bp
from .errors import register_error_handlers
from .export_api import bp as export_api_bp
from .health_api import bp as health_bp
from .insights_api import bp as insights_api_bp
from .insights_service import InsightService
from .logging_setup import get_request_logger, install_support_log_handler
from .metrics import MemoryMetrics, configure_metrics, get_metrics
from .report_lock_api import bp as report_lock_api_bp
from .scope3_api import bp as scope3_api_bp
from .support_api import bp as support_api_bp


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)

    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
    # Keep the dev sqlite file in the instance folder when DATABASE_URL is not provided
    if not os.getenv("DATABASE_URL") and cfg.database_url == "sqlite:///dev.db":
        os.makedirs(app.instance_path, exist_ok=True)
        cfg.database_url = f"sqlite:///{os.path.join(app.instance_path, 'dev.db')}"
    app.config.update(cfg.to_flask_dict())
    if config_override:
        for k, v in config_override.items():  # direct Flask config keys win
            if k.isupper():
                app.config[k] = v

    # --- DB setup ---
    init_engine(cfg.database_url, force=bool(app.config.get("TESTING")))
    app.logger.info("DB_URL=%s", cfg.database_url)

    # --- Metrics + logging ---
    configure_metrics(app.config.get("METRICS_BACKEND"))
    install_support_log_handler()
    log = get_request_logger()

    # --- Error handling ---
    register_error_handlers(app)

    @app.before_request
    def _before_req() -> None:
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        if app.config.get("TESTING"):
            uid = request.headers.get("X-User-Id")
            if uid:
                persist_login(session, uid, request.headers.get("X-User-Role") or "member")

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", str(uuid.uuid4()))
        resp.headers["X-Request-Id"] = rid
        resp.headers["X-Request-Duration-ms"] = str(dur_ms)
        if "Cache-Control" not in resp.headers:
            resp.headers["Cache-Control"] = "no-store"
        log.info(
            {
                "request_id": rid,
                "user_id": session.get("user_id"),
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
            }
        )
        return resp

    @app.teardown_appcontext
    def _teardown(exc: BaseException | None) -> None:
        remove_session()

    # --- Attach domain services ---
    app.insight_service = InsightService(  # type: ignore[attr-defined]
        api_key=app.config.get("OPENAI_API_KEY") or "",
        model=app.config.get("OPENAI_MODEL") or "gpt-4.1-mini",
    )

    # --- Blueprints ---
    app.register_blueprint(emissions_api_bp)
    app.register_blueprint(scope3_api_bp)
    app.register_blueprint(dashboard_api_bp)
    app.register_blueprint(insights_api_bp)
    app.register_blueprint(export_api_bp)
    app.register_blueprint(report_lock_api_bp)
    app.register_blueprint(support_api_bp)
    app.register_blueprint(health_bp)

    @app.get("/health")
    def health() -> dict[str, Any]:
        metrics = get_metrics()
        return {
            "status": "ok",
            "factor_version": app.config["FACTOR_VERSION"],
            "factor_region": app.config["FACTOR_REGION"],
            "ai_configured": bool(app.config.get("OPENAI_API_KEY")),
            "metrics": dict(metrics.counts) if isinstance(metrics, MemoryMetrics) else None,
        }

    return app


__all__ = ["create_app"]
