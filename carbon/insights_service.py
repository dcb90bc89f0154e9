"""AI narrative insights over a user's monthly emissions.

Reads emissions -> calls the LLM -> upserts into ``ai_insights``. The same
client also answers two stateless questions: next actions for a share
breakdown and a Falling/Rising/Stable trend for recent months.
"""
from __future__ import annotations

import json
import logging
from datetime import UTC, date, datetime
from typing import Any

from openai import OpenAI
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .ai_data import (
    PERFORMANCE_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    build_actions_prompt,
    build_performance_prompt,
    build_user_prompt,
    compact_month,
)
from .emissions_repo import EmissionsRepo
from .errors import DomainError, InsightGenerationError, NotFoundError
from .metrics import increment
from .models import AIInsight
from .shares import ShareSet

logger = logging.getLogger(__name__)

HOTSPOTS = ("Electricity", "Fuel", "Refrigerant")
CONFIDENCE_LEVELS = ("low", "medium", "high")
TREND_STATUSES = ("Falling", "Rising", "Stable")
DEFAULT_PERIOD = "last_12_months"
PERFORMANCE_MONTHS = 6
RECOMMENDED_ACTIONS = 3


def _strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def _load_json(raw_text: str | None) -> Any:
    if not raw_text or not raw_text.strip():
        raise InsightGenerationError("AI returned empty response")
    text = _strip_code_fences(raw_text)
    # tolerate chatter around the object
    start, end = text.find("{"), text.rfind("}")
    if not text.startswith(("{", "[")) and 0 <= start < end:
        text = text[start : end + 1]
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("Unparsable AI output: %s", raw_text[:500])
        raise InsightGenerationError(f"Failed to parse AI JSON: {e.msg}") from e


def parse_insight(raw_text: str | None) -> dict[str, Any]:
    """Parse and validate the model's JSON answer."""
    data = _load_json(raw_text)
    if not isinstance(data, dict):
        raise InsightGenerationError("AI JSON must be an object")

    hotspot = data.get("hotspot")
    if hotspot is not None and hotspot not in HOTSPOTS:
        raise InsightGenerationError(f"unknown hotspot {hotspot!r}")
    confidence = data.get("confidence")
    if confidence not in CONFIDENCE_LEVELS:
        raise InsightGenerationError(f"unknown confidence {confidence!r}")
    actions = data.get("actions") or []
    if not isinstance(actions, list):
        raise InsightGenerationError("actions must be a list")
    return {
        "headline": str(data.get("headline") or ""),
        "narrative": str(data.get("narrative") or ""),
        "hotspot": hotspot,
        "confidence": confidence,
        "actions": [
            {"id": str(a.get("id", i + 1)), "title": str(a.get("title", "")), "detail": str(a.get("detail", ""))}
            for i, a in enumerate(actions)
            if isinstance(a, dict)
        ],
    }


def parse_actions(raw_text: str | None) -> list[dict[str, str]]:
    """``{"actions": [...]}`` (or a bare list) -> at most three title/description pairs."""
    data = _load_json(raw_text)
    actions = data.get("actions") if isinstance(data, dict) else data
    if not isinstance(actions, list):
        raise InsightGenerationError("actions must be a list")
    out = [
        {"title": str(a.get("title", "")), "description": str(a.get("description", ""))}
        for a in actions
        if isinstance(a, dict)
    ]
    return out[:RECOMMENDED_ACTIONS]


def parse_performance(raw_text: str | None) -> dict[str, Any]:
    """Keep only status and insight; risk/stability/compliance are never taken from the model."""
    data = _load_json(raw_text)
    if not isinstance(data, dict):
        raise InsightGenerationError("AI JSON must be an object")
    status = data.get("status")
    return {
        "status": status if status in TREND_STATUSES else "Stable",
        "insight": str(data.get("insight") or "No insight available."),
        "risk": None,
        "stability": None,
        "compliance": None,
    }


def serialize_insight(row: AIInsight) -> dict[str, Any]:
    return {
        "user_id": row.user_id,
        "period": row.period,
        "headline": row.headline,
        "narrative": row.narrative,
        "hotspot": row.hotspot,
        "confidence": row.confidence,
        "actions": row.actions or [],
        "generated_at": row.generated_at.isoformat() if row.generated_at else None,
    }


class InsightService:
    def __init__(self, client: Any | None = None, *, api_key: str = "", model: str = "gpt-4.1-mini"):
        self._client = client
        self._api_key = api_key
        self.model = model

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise InsightGenerationError("ai_not_configured", status=503)
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    def _chat(self, messages: list[dict[str, str]], **kwargs: Any) -> str | None:
        try:
            response = self.client.chat.completions.create(model=self.model, messages=messages, **kwargs)
        except InsightGenerationError:
            raise
        except Exception as e:
            logger.warning("AI call failed: %s", e)
            raise InsightGenerationError(f"AI call failed: {e}") from e
        return response.choices[0].message.content

    def _complete(self, compact: list[dict[str, Any]]) -> str | None:
        return self._chat(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(compact)},
            ],
            temperature=0.2,
        )

    def generate_for_user(
        self, db: Session, user_id: str, period: str = DEFAULT_PERIOD, months_limit: int = 12
    ) -> dict[str, Any]:
        # newest N months, presented oldest first
        rows = EmissionsRepo(db).list_for_user(user_id, limit=months_limit)
        compact = [compact_month(r) for r in reversed(rows)]
        insight = parse_insight(self._complete(compact))

        row = db.query(AIInsight).filter(AIInsight.user_id == user_id, AIInsight.period == period).first()
        if row is None:
            row = AIInsight(user_id=user_id, period=period)
            db.add(row)
        row.headline = insight["headline"]
        row.narrative = insight["narrative"]
        row.hotspot = insight["hotspot"]
        row.confidence = insight["confidence"]
        row.actions = insight["actions"]
        row.raw = insight
        row.generated_at = datetime.now(UTC)
        db.commit()
        increment("ai.insight.generate", {"period": period})
        return insight

    def recompute_for_month(
        self, db: Session, user_id: str, month: date, period: str = DEFAULT_PERIOD, months_limit: int = 12
    ) -> dict[str, Any]:
        """Regenerate after an entry for ``month`` was created or edited; 404 when there is none."""
        if EmissionsRepo(db).get_for_month(user_id, month) is None:
            raise NotFoundError("emission_not_found", month=month.isoformat())
        return self.generate_for_user(db, user_id, period, months_limit)

    def generate_for_all_users(
        self, db: Session, period: str = DEFAULT_PERIOD, months_limit: int = 12
    ) -> dict[str, Any]:
        results: list[dict[str, Any]] = []
        for uid in EmissionsRepo(db).distinct_user_ids():
            try:
                insight = self.generate_for_user(db, uid, period, months_limit)
                results.append({"user": uid, "ok": True, "insight": insight})
            except InsightGenerationError as e:
                db.rollback()
                results.append({"user": uid, "ok": False, "error": e.detail})
            except SQLAlchemyError as e:
                db.rollback()
                logger.warning("insight store failed for user=%s: %s", uid, e)
                results.append({"user": uid, "ok": False, "error": "storage_failed"})
        return {"processed": len(results), "results": results}

    def latest_for_user(self, db: Session, user_id: str, period: str = DEFAULT_PERIOD) -> dict[str, Any] | None:
        row = db.query(AIInsight).filter(AIInsight.user_id == user_id, AIInsight.period == period).first()
        return serialize_insight(row) if row else None

    def recommend_actions(self, shares: ShareSet, months: int = 0) -> list[dict[str, str]]:
        raw_text = self._chat(
            [{"role": "user", "content": build_actions_prompt(shares.as_dict(), months)}],
            response_format={"type": "json_object"},
            max_tokens=200,
        )
        actions = parse_actions(raw_text)
        increment("ai.actions.generate", {})
        return actions

    def performance_for_user(self, db: Session, user_id: str) -> dict[str, Any]:
        rows = EmissionsRepo(db).list_for_user(user_id, limit=PERFORMANCE_MONTHS)
        if not rows:
            raise DomainError(400, "bad_request", "no_emissions")
        compact = [compact_month(r) for r in reversed(rows)]
        raw_text = self._chat(
            [
                {"role": "system", "content": PERFORMANCE_SYSTEM_PROMPT},
                {"role": "user", "content": build_performance_prompt(compact)},
            ]
        )
        return {**parse_performance(raw_text), "months": len(compact)}


__all__ = [
    "InsightService",
    "parse_insight",
    "parse_actions",
    "parse_performance",
    "serialize_insight",
    "HOTSPOTS",
    "CONFIDENCE_LEVELS",
    "TREND_STATUSES",
]
