"""Scope 3 activity validation and CO2e estimates.

Factors are deliberately simple SME-level averages (kg CO2e per unit).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .co2e import parse_month
from .errors import ValidationError

EF: dict[str, float] = {
    # per km
    "car_commute_kg_per_km": 0.18,
    "train_kg_per_km": 0.041,
    "bus_kg_per_km": 0.082,
    "short_haul_flight_kg_per_km": 0.15,
    "long_haul_flight_kg_per_km": 0.12,
    "taxi_kg_per_km": 0.19,
    # per GBP spent
    "purchased_goods_kg_per_gbp": 0.35,
    # per kg of waste
    "mixed_recycling_kg_per_kg": 0.02,
    "mixed_waste_landfill_kg_per_kg": 0.45,
    "food_waste_kg_per_kg": 0.9,
    # per tonne-km
    "road_freight_kg_per_tkm": 0.12,
    "sea_freight_kg_per_tkm": 0.015,
    "air_freight_kg_per_tkm": 0.6,
}

CATEGORIES = (
    "employee_commuting",
    "business_travel",
    "purchased_goods",
    "waste",
    "upstream_transport",
    "downstream_transport",
)

# category -> (numeric detail fields, required subset)
_NUMERIC_DETAILS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "employee_commuting": (("one_way_km", "days_per_month"), ("one_way_km", "days_per_month")),
    "business_travel": (("flight_km", "hotel_nights", "taxi_km", "train_km"), ()),
    "purchased_goods": (("spend_gbp",), ("spend_gbp",)),
    "waste": (("weight_kg",), ("weight_kg",)),
    "upstream_transport": (("weight_kg", "distance_km"), ("weight_kg", "distance_km")),
    "downstream_transport": (("weight_kg", "distance_km"), ("weight_kg", "distance_km")),
}

_CHOICES: dict[str, dict[str, tuple[str, ...]]] = {
    "employee_commuting": {"mode": ("car", "train", "bus", "bike_walk")},
    "business_travel": {"flight_type": ("short_haul", "long_haul")},
    "waste": {"waste_type": ("mixed_recycling", "general_landfill", "food")},
    "upstream_transport": {"mode": ("road", "sea", "air")},
    "downstream_transport": {"mode": ("road", "sea", "air")},
}

_COMMUTE_FACTORS = {
    "car": EF["car_commute_kg_per_km"],
    "train": EF["train_kg_per_km"],
    "bus": EF["bus_kg_per_km"],
}
_WASTE_FACTORS = {
    "mixed_recycling": EF["mixed_recycling_kg_per_kg"],
    "food": EF["food_waste_kg_per_kg"],
}
_FREIGHT_FACTORS = {
    "sea": EF["sea_freight_kg_per_tkm"],
    "air": EF["air_freight_kg_per_tkm"],
}


@dataclass
class Scope3Activity:
    category: str
    month: date
    label: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def num(self, key: str) -> float:
        return float(self.details.get(key) or 0)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


def parse_scope3_activity(data: dict[str, Any]) -> Scope3Activity:
    """Validate a JSON body into a Scope3Activity. Raises ValidationError."""
    category = str(data.get("category") or "").strip()
    if category not in CATEGORIES:
        raise ValidationError([{"field": "category", "msg": f"must be one of {', '.join(CATEGORIES)}"}])
    month = parse_month(data.get("month"))

    errors: list[dict[str, str]] = []
    details: dict[str, Any] = {}
    numeric, required = _NUMERIC_DETAILS[category]
    for name in numeric:
        raw = data.get(name, data.get(_camel(name)))
        if raw in (None, ""):
            if name in required:
                errors.append({"field": name, "msg": "required"})
            continue
        try:
            if isinstance(raw, bool):
                raise TypeError
            value = float(raw)
        except (TypeError, ValueError):
            errors.append({"field": name, "msg": "must be a number"})
            continue
        if not math.isfinite(value) or value < 0:
            errors.append({"field": name, "msg": "must be a non-negative number"})
            continue
        details[name] = value
    for name, allowed in _CHOICES.get(category, {}).items():
        raw = data.get(name, data.get(_camel(name)))
        if raw is None:
            if category == "employee_commuting":
                errors.append({"field": name, "msg": "required"})
            continue
        if raw not in allowed:
            errors.append({"field": name, "msg": f"must be one of {', '.join(allowed)}"})
            continue
        details[name] = raw
    if errors:
        raise ValidationError(errors)
    label = (str(data.get("label") or "").strip() or None)
    return Scope3Activity(category=category, month=month, label=label, details=details)


def calculate_scope3_co2e_kg(activity: Scope3Activity) -> float:
    category = activity.category
    if category == "employee_commuting":
        trips_per_month = activity.num("days_per_month") * 2
        factor = _COMMUTE_FACTORS.get(activity.details.get("mode", ""), 0.0)  # bike/walk is zero
        return activity.num("one_way_km") * trips_per_month * factor

    if category == "business_travel":
        if activity.details.get("flight_type") == "long_haul":
            flight_factor = EF["long_haul_flight_kg_per_km"]
        else:
            flight_factor = EF["short_haul_flight_kg_per_km"]
        # hotel nights are stored but not modelled yet
        return (
            activity.num("flight_km") * flight_factor
            + activity.num("taxi_km") * EF["taxi_kg_per_km"]
            + activity.num("train_km") * EF["train_kg_per_km"]
        )

    if category == "purchased_goods":
        return activity.num("spend_gbp") * EF["purchased_goods_kg_per_gbp"]

    if category == "waste":
        factor = _WASTE_FACTORS.get(activity.details.get("waste_type", ""), EF["mixed_waste_landfill_kg_per_kg"])
        return activity.num("weight_kg") * factor

    if category in ("upstream_transport", "downstream_transport"):
        tkm = activity.num("weight_kg") / 1000 * activity.num("distance_km")
        factor = _FREIGHT_FACTORS.get(activity.details.get("mode", ""), EF["road_freight_kg_per_tkm"])
        return tkm * factor

    return 0.0


__all__ = ["EF", "CATEGORIES", "Scope3Activity", "parse_scope3_activity", "calculate_scope3_co2e_kg"]
