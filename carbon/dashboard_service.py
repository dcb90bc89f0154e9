"""Dashboard aggregation: per-month totals, source breakdown and hotspot.

Rows from ``emissions`` and ``scope3_activities`` are merged per calendar
month; the Scope 1+2 source breakdown is converted to percentage shares via
``shares_from_totals`` so the three shares shown always add up to 100.0.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Literal

from .errors import ValidationError
from .factors import EF_GRID_ELECTRICITY_KG_PER_KWH, calc_fuel_co2e_kg, calc_refrigerant_co2e, normalise_refrigerant_code
from .formatting import display_month_label
from .shares import ShareSet, shares_from_totals

Hotspot = Literal["Electricity", "Fuel", "Refrigerant"]

SUGGESTION_ELECTRICITY = (
    "Electricity use is a significant driver. Consider LED lighting, higher AC setpoints, and better controls."
)
SUGGESTION_FUEL = "Fuel usage is high. Review vehicle routing, idling, and behaviour."
SUGGESTION_REFRIGERANT = "Refrigerant leakage has major impact. Schedule AC leak checks and servicing."

_PERIOD_ALIASES = {"3m": 3, "6m": 6, "12m": 12}


@dataclass
class DashboardMonth:
    month: date
    electricity_kwh: float = 0.0
    diesel_litres: float = 0.0
    petrol_litres: float = 0.0
    gas_kwh: float = 0.0
    refrigerant_kg: float = 0.0
    refrigerant_codes: set[str] = field(default_factory=set)
    refrigerant_co2e_kg: float = 0.0
    scope1and2_co2e_kg: float = 0.0
    scope3_co2e_kg: float = 0.0

    @property
    def fuel_litres(self) -> float:
        return self.diesel_litres + self.petrol_litres

    @property
    def total_co2e_kg(self) -> float:
        return self.scope1and2_co2e_kg + self.scope3_co2e_kg

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month.isoformat(),
            "month_label": display_month_label(self.month),
            "electricity_kwh": self.electricity_kwh,
            "fuel_litres": self.fuel_litres,
            "diesel_litres": self.diesel_litres,
            "petrol_litres": self.petrol_litres,
            "gas_kwh": self.gas_kwh,
            "refrigerant_kg": self.refrigerant_kg,
            "refrigerant_codes": sorted(self.refrigerant_codes),
            "scope1and2_co2e_kg": self.scope1and2_co2e_kg,
            "scope3_co2e_kg": self.scope3_co2e_kg,
            "total_co2e_kg": self.total_co2e_kg,
        }


def parse_months_limit(raw: str | None, default: int | None = 12) -> int | None:
    """``None``/empty -> default, ``all`` -> no limit, ``3m``/``6m``/``12m`` or a positive int."""
    if raw is None or raw == "":
        return default
    text = str(raw).strip().lower()
    if text == "all":
        return None
    if text in _PERIOD_ALIASES:
        return _PERIOD_ALIASES[text]
    try:
        value = int(text)
    except ValueError:
        raise ValidationError([{"field": "months", "msg": "expected a positive integer, 3m/6m/12m or 'all'"}]) from None
    if value < 1:
        raise ValidationError([{"field": "months", "msg": "must be >= 1"}])
    return value


def _merge_months(entries: Iterable[Any], scope3_rows: Iterable[Any]) -> list[DashboardMonth]:
    by_month: dict[date, DashboardMonth] = {}

    def _slot(month: date) -> DashboardMonth:
        if month not in by_month:
            by_month[month] = DashboardMonth(month=month)
        return by_month[month]

    for row in entries:
        m = _slot(row.month)
        diesel = float(row.diesel_litres or 0)
        petrol = float(row.petrol_litres or 0)
        gas = float(row.gas_kwh or 0)
        if not (diesel or petrol or gas):
            # rows from before the diesel/petrol split only carry a combined figure
            diesel = float(getattr(row, "fuel_litres", None) or 0)
        code = normalise_refrigerant_code(row.refrigerant_type)
        refrigerant_kg = float(row.refrigerant_kg or 0)
        m.electricity_kwh += float(row.electricity_kwh or 0)
        m.diesel_litres += diesel
        m.petrol_litres += petrol
        m.gas_kwh += gas
        m.refrigerant_kg += refrigerant_kg
        if refrigerant_kg:
            m.refrigerant_codes.add(code)
        m.refrigerant_co2e_kg += calc_refrigerant_co2e(refrigerant_kg, code)
        m.scope1and2_co2e_kg += float(row.total_co2e or 0)

    for row in scope3_rows:
        amount = float(row.co2e_kg or 0)
        if not amount:
            continue
        _slot(row.month).scope3_co2e_kg += amount

    return sorted(by_month.values(), key=lambda m: m.month, reverse=True)


def pick_hotspot(shares: ShareSet) -> Hotspot | None:
    """Refrigerant wins ties with both others, then fuel over electricity."""
    elec, fuel, ref = shares.electricity, shares.fuel, shares.refrigerant
    if ref >= fuel and ref >= elec and (ref > 0 or fuel > 0 or elec > 0):
        return "Refrigerant"
    if fuel >= elec and fuel > 0:
        return "Fuel"
    if elec > 0:
        return "Electricity"
    return None


def suggestions_for(shares: ShareSet) -> list[str]:
    out: list[str] = []
    if shares.electricity > 40:
        out.append(SUGGESTION_ELECTRICITY)
    if shares.fuel > 25:
        out.append(SUGGESTION_FUEL)
    if shares.refrigerant > 10:
        out.append(SUGGESTION_REFRIGERANT)
    return out


def build_dashboard(entries: Iterable[Any], scope3_rows: Iterable[Any], months_limit: int | None = 12) -> dict[str, Any]:
    months = _merge_months(entries, scope3_rows)
    period = months if months_limit is None else months[:months_limit]

    scope12 = sum(m.scope1and2_co2e_kg for m in period)
    scope3 = sum(m.scope3_co2e_kg for m in period)

    elec_kg = sum(m.electricity_kwh * EF_GRID_ELECTRICITY_KG_PER_KWH for m in period)
    fuel_kg = sum(calc_fuel_co2e_kg(m.diesel_litres, m.petrol_litres, m.gas_kwh) for m in period)
    ref_kg = sum(m.refrigerant_co2e_kg for m in period)
    if elec_kg or fuel_kg or ref_kg:
        shares = shares_from_totals(elec_kg, fuel_kg, ref_kg)
    else:
        # No Scope 1+2 signal: zeros rather than a normalised 100/0/0
        shares = ShareSet(electricity=0.0, fuel=0.0, refrigerant=0.0)

    return {
        "months": [m.to_dict() for m in period],
        "total_co2e_kg": scope12 + scope3,
        "last_month": period[0].to_dict() if period else None,
        "prev_month": period[1].to_dict() if len(period) > 1 else None,
        "breakdown_by_source": {
            "electricity_share_percent": shares.electricity,
            "fuel_share_percent": shares.fuel,
            "refrigerant_share_percent": shares.refrigerant,
        },
        "hotspot": pick_hotspot(shares),
        "suggestions": suggestions_for(shares),
        "scope_breakdown": {
            "scope1and2_co2e_kg": scope12,
            "scope3_co2e_kg": scope3,
        },
    }


__all__ = [
    "DashboardMonth",
    "parse_months_limit",
    "pick_hotspot",
    "suggestions_for",
    "build_dashboard",
]
