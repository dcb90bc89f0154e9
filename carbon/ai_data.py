"""Payload shaping and prompts for the AI summarisation call."""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

SYSTEM_PROMPT = """
You are Carbon Central AI, an expert sustainability analyst for small businesses.

You receive monthly emissions data and must produce:
1) A concise headline (1 sentence)
2) A 3-4 sentence narrative explaining trends
3) A named hotspot (Electricity, Fuel, Refrigerant) or null if unclear
4) A confidence rating (low, medium, high)
5) A list of 3-5 very specific, actionable steps the business can take

Respond ONLY as strict JSON matching this contract:

{
  "headline": string,
  "narrative": string,
  "hotspot": "Electricity" | "Fuel" | "Refrigerant" | null,
  "confidence": "low" | "medium" | "high",
  "actions": [
    { "id": string, "title": string, "detail": string }
  ]
}
""".strip()


def build_user_prompt(data: Any) -> str:
    return (
        "Here is the business's monthly emissions data:\n"
        f"{json.dumps(data, indent=2, default=str)}\n\n"
        "Think step-by-step and output ONLY valid JSON."
    )


PERFORMANCE_SYSTEM_PROMPT = "You are an expert sustainability analyst."


def build_actions_prompt(shares: Mapping[str, float], months: int) -> str:
    """Prompt for three next actions from the normalised source shares."""
    return (
        "You are an environmental carbon reduction advisor.\n"
        "Given:\n"
        f"- Electricity share: {shares['electricity']}%\n"
        f"- Fuel share: {shares['fuel']}%\n"
        f"- Refrigerant share: {shares['refrigerant']}%\n"
        f"- Months of data: {months}\n\n"
        "Suggest exactly 3 practical next actions.\n"
        'Return ONLY a JSON object: {"actions": [{"title": "", "description": ""}]}'
    )


def build_performance_prompt(data: Any) -> str:
    # risk/stability/compliance come from dashboard rules, never from the model
    return (
        "Using ONLY these recent months of emissions data:\n"
        f"{json.dumps(data, indent=2, default=str)}\n\n"
        "Return only this JSON:\n"
        '{"status": "Falling" | "Rising" | "Stable", "insight": string}\n\n'
        "RULES:\n"
        "- DO NOT return: score, risk, stability, compliance.\n"
        "- DO NOT add extra fields.\n"
        "- insight must be 1-2 sentences."
    )


def _num(m: Mapping[str, Any], key: str) -> float:
    value = m.get(key)
    return 0 if value is None else value


def _month_key(m: Mapping[str, Any]) -> Any:
    return m.get("month", m.get("month_label"))


def prepare_ai_data(months: Any) -> list[dict[str, Any]]:
    """Normalise dashboard months into the structure sent to the model.

    Months are sorted by their ISO ``month`` as text (falling back to
    ``month_label``); missing quantities become 0. Anything that is not a
    list yields ``[]``.
    """
    if not isinstance(months, list):
        return []
    ordered = sorted(months, key=lambda m: str(_month_key(m)))
    return [
        {
            "month": _month_key(m),
            "total_co2e": _num(m, "total_co2e_kg"),
            "electricity": _num(m, "electricity_kwh"),
            "fuel": _num(m, "fuel_litres"),
            "refrigerants": _num(m, "refrigerant_kg"),
            # UK extended fields
            "diesel": _num(m, "diesel_litres"),
            "petrol": _num(m, "petrol_litres"),
            "gas": _num(m, "gas_kwh"),
        }
        for m in ordered
    ]


def compact_month(row: Any) -> dict[str, Any]:
    """Compact one stored emissions row for the insight prompt.

    Diesel + petrol is the fuel figure; rows from before the split fall back
    to the legacy combined ``fuel_litres`` column.
    """
    diesel = float(row.diesel_litres or 0)
    petrol = float(row.petrol_litres or 0)
    legacy_fuel = float(row.fuel_litres or 0)
    month = row.month.isoformat() if hasattr(row.month, "isoformat") else row.month
    return {
        "month": month,
        "electricity_kwh": float(row.electricity_kwh or 0),
        "fuel_litres": diesel + petrol if diesel + petrol > 0 else legacy_fuel,
        "refrigerant_kg": float(row.refrigerant_kg or 0),
        "total_co2e_kg": float(row.total_co2e or 0),
    }


__all__ = [
    "SYSTEM_PROMPT",
    "PERFORMANCE_SYSTEM_PROMPT",
    "build_user_prompt",
    "build_actions_prompt",
    "build_performance_prompt",
    "prepare_ai_data",
    "compact_month",
]
