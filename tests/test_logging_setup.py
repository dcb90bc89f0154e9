from __future__ import annotations

import logging

from carbon.logging_setup import LOG_BUFFER, install_support_log_handler, recent_problems


def test_warnings_land_in_ring_buffer_with_request_id(client, user_headers):
    install_support_log_handler()
    LOG_BUFFER.clear()
    resp = client.post("/api/emissions", json={"month": "nope"}, headers=user_headers)
    assert resp.status_code == 422
    logging.getLogger("carbon.test").warning("outside request")
    problems = recent_problems()
    assert problems[-1]["msg"] == "outside request"
    assert problems[-1]["request_id"] == "-"


def test_info_is_not_buffered():
    install_support_log_handler()
    LOG_BUFFER.clear()
    logging.getLogger("carbon.test").info("chatter")
    assert recent_problems() == []


def test_install_is_idempotent():
    install_support_log_handler()
    install_support_log_handler()
    from carbon.logging_setup import SupportLogHandler

    assert sum(isinstance(h, SupportLogHandler) for h in logging.getLogger().handlers) == 1


def test_request_headers(client, user_headers):
    resp = client.get("/api/dashboard", headers={**user_headers, "X-Request-Id": "rid-123"})
    assert resp.headers["X-Request-Id"] == "rid-123"
    assert int(resp.headers["X-Request-Duration-ms"]) >= 0
    assert resp.headers["Cache-Control"] == "no-store"
