"""Domain error system + RFC7807 handler registration.

Services raise DomainError subclasses; the handlers registered here turn
them (and framework/unhandled errors) into problem+json responses.
"""
from __future__ import annotations

import traceback
import uuid
from collections.abc import Callable
from typing import Any

from flask import request
from werkzeug.wrappers.response import Response

from .app_sessions import RoleError, SessionError
from .http_errors import (
    bad_gateway,
    bad_request,
    forbidden,
    internal_server_error,
    not_found,
    problem,
    service_unavailable,
    unauthorized,
    unprocessable_entity,
)
from .metrics import increment
from .pagination import PaginationError
from .shares import ShareInputError


class DomainError(Exception):
    def __init__(self, status: int, code: str, detail: str | None = None, **extra: Any):
        self.status = status
        self.code = code
        self.detail = detail or code
        self.extra = extra
        super().__init__(self.detail)


class ValidationError(DomainError):
    def __init__(self, errors: Any, detail: str = "validation_error", **extra: Any):
        super().__init__(422, "validation_error", detail, errors=errors, **extra)
        self.errors = errors


class NotFoundError(DomainError):
    def __init__(self, detail: str = "not_found", **extra: Any):
        super().__init__(404, "not_found", detail, **extra)


class ForbiddenError(DomainError):
    def __init__(self, detail: str = "forbidden", **extra: Any):
        super().__init__(403, "forbidden", detail, **extra)


class FactorsUnavailableError(DomainError):
    """No emission factor rows for the configured version/region."""

    def __init__(self, detail: str = "factors_unavailable", **extra: Any):
        super().__init__(503, "factors_unavailable", detail, **extra)


class InsightGenerationError(DomainError):
    """LLM call failed or returned something we cannot store."""

    def __init__(self, detail: str = "ai_failed", status: int = 502, **extra: Any):
        super().__init__(status, "ai_failed", detail, **extra)


_STATUS_HELPERS: dict[int, Callable[..., Response]] = {
    400: bad_request,
    401: unauthorized,
    403: forbidden,
    404: not_found,
    502: bad_gateway,
    503: service_unavailable,
}


def _emit_problem(resp: Response) -> None:
    payload = resp.get_json(silent=True) or {}
    increment("http.problem", {"status": str(payload.get("status")), "path": request.path})


def register_error_handlers(app: Any) -> None:
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(SessionError)
    def _h_session(err: SessionError) -> Response:
        resp = unauthorized(detail=str(err) or "authentication_required")
        _emit_problem(resp)
        return resp

    @app.errorhandler(RoleError)
    def _h_role(err: RoleError) -> Response:
        resp = forbidden(detail=str(err) or "forbidden", required_role=err.required)
        _emit_problem(resp)
        return resp

    @app.errorhandler(DomainError)
    def _h_domain(err: DomainError) -> Response:
        if err.status == 422:
            extra = {k: v for k, v in err.extra.items() if k != "errors"}
            resp = unprocessable_entity(err.extra.get("errors") or [], detail=err.detail, **extra)
        else:
            helper = _STATUS_HELPERS.get(err.status, bad_request)
            resp = helper(detail=err.detail, **err.extra)
        _emit_problem(resp)
        return resp

    @app.errorhandler(ShareInputError)
    def _h_share(err: ShareInputError) -> Response:
        resp = unprocessable_entity([{"field": err.field, "msg": "must be a finite number"}], detail="invalid_share")
        _emit_problem(resp)
        return resp

    @app.errorhandler(PaginationError)
    def _h_pagination(err: PaginationError) -> Response:
        resp = bad_request(detail=str(err) or "bad_request")
        _emit_problem(resp)
        return resp

    @app.errorhandler(HTTPException)
    def _h_http(ex: HTTPException) -> Response:
        status = ex.code or 500
        helper = _STATUS_HELPERS.get(status)
        if helper:
            resp = helper(detail=ex.description)
        elif status >= 500:
            resp = internal_server_error()
        else:
            resp = problem(status, "about:blank", ex.name, str(ex.description))
        _emit_problem(resp)
        return resp

    @app.errorhandler(Exception)
    def _h_exception(ex: Exception) -> Response:
        incident_id = str(uuid.uuid4())
        app.logger.error(
            "Unhandled exception incident_id=%s path=%s\n%s", incident_id, request.path, traceback.format_exc()
        )
        resp = internal_server_error(incident_id=incident_id)
        _emit_problem(resp)
        return resp


__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "ForbiddenError",
    "FactorsUnavailableError",
    "InsightGenerationError",
    "register_error_handlers",
]
