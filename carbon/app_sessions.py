"""Session helpers for authentication-gated routes.

Login/signup live with the external auth provider; this module only reads
the identity it left in the Flask session and guards views with it.
"""
from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypedDict, TypeVar

from flask import session as flask_session

P = ParamSpec("P")
R = TypeVar("R")


class SessionData(TypedDict):
    user_id: str
    role: str


class SessionError(Exception):
    """Signals a 401 unauthorized due to missing/invalid session."""

    def __init__(self, message: str = "authentication required"):
        super().__init__(message)


class RoleError(Exception):
    """Signals a 403 for an authenticated user lacking the required role."""

    def __init__(self, message: str = "forbidden", required: str | None = None):
        super().__init__(message)
        self.required = required


def persist_login(sess, user_id: str, role: str = "member") -> None:
    sess["user_id"] = str(user_id)
    sess["role"] = role


def get_session(sess=flask_session) -> SessionData | None:
    if not sess.get("user_id"):
        return None
    return {"user_id": str(sess["user_id"]), "role": str(sess.get("role") or "member")}


def require_session(sess=flask_session) -> SessionData:
    data = get_session(sess)
    if data is None:
        raise SessionError("authentication required")
    return data


def current_user_id() -> str:
    return require_session()["user_id"]


def require_user(fn: Callable[P, R]) -> Callable[P, R]:
    @wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        require_session()
        return fn(*args, **kwargs)

    return wrapper


def require_role(*roles: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            sess = require_session()
            if sess["role"] not in roles:
                raise RoleError("forbidden", required=roles[0] if roles else None)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


__all__ = [
    "SessionData",
    "SessionError",
    "RoleError",
    "persist_login",
    "get_session",
    "require_session",
    "current_user_id",
    "require_user",
    "require_role",
]
