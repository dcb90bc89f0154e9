"""Scope 1/2 CO2e calculation for one monthly entry."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

from .errors import ValidationError
from .factors import FactorSet

# payload key -> accepted aliases (the web forms post camelCase)
_NUMERIC_FIELDS: dict[str, tuple[str, ...]] = {
    "electricity_kwh": ("electricity_kwh", "electricityKwh"),
    "diesel_litres": ("diesel_litres", "dieselLitres"),
    "petrol_litres": ("petrol_litres", "petrolLitres"),
    "gas_kwh": ("gas_kwh", "gasKwh"),
    "refrigerant_kg": ("refrigerant_kg", "refrigerantKg"),
}


@dataclass
class EmissionInput:
    electricity_kwh: float = 0.0
    diesel_litres: float = 0.0
    petrol_litres: float = 0.0
    gas_kwh: float = 0.0
    refrigerant_type: str | None = None
    refrigerant_kg: float = 0.0

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> EmissionInput:
        errors: list[dict[str, str]] = []
        values: dict[str, Any] = {}
        for name, aliases in _NUMERIC_FIELDS.items():
            raw = next((data[a] for a in aliases if data.get(a) not in (None, "")), None)
            if raw is None:
                values[name] = 0.0
                continue
            try:
                if isinstance(raw, bool):
                    raise TypeError
                num = float(raw)
            except (TypeError, ValueError):
                errors.append({"field": name, "msg": "must be a number"})
                continue
            if not math.isfinite(num) or num < 0:
                errors.append({"field": name, "msg": "must be a non-negative number"})
                continue
            values[name] = num
        ref_type = data.get("refrigerant_type", data.get("refrigerantType"))
        values["refrigerant_type"] = (str(ref_type).strip() or None) if ref_type is not None else None
        if errors:
            raise ValidationError(errors)
        return cls(**values)


@dataclass
class Co2eBreakdown:
    electricity: float
    diesel: float
    petrol: float
    gas: float
    refrigerant: float
    total: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def calculate_co2e(inp: EmissionInput, factors: FactorSet) -> Co2eBreakdown:
    """kg CO2e per source for one entry.

    Refrigerant only counts when its type is present in the factor set.
    """
    electricity = inp.electricity_kwh * factors.electricity
    diesel = inp.diesel_litres * factors.diesel
    petrol = inp.petrol_litres * factors.petrol
    gas = inp.gas_kwh * factors.gas

    refrigerant = 0.0
    if inp.refrigerant_type and factors.refrigerants.get(inp.refrigerant_type):
        refrigerant = inp.refrigerant_kg * factors.refrigerants[inp.refrigerant_type]

    return Co2eBreakdown(
        electricity=electricity,
        diesel=diesel,
        petrol=petrol,
        gas=gas,
        refrigerant=refrigerant,
        total=electricity + diesel + petrol + gas + refrigerant,
    )


def parse_month(raw: Any) -> date:
    """Accept ``YYYY-MM-DD`` or ``YYYY-MM``; the stored month is always day 1."""
    text = str(raw or "").strip()
    try:
        if len(text) == 7:
            parsed = date.fromisoformat(text + "-01")
        else:
            parsed = date.fromisoformat(text)
    except ValueError:
        raise ValidationError([{"field": "month", "msg": "expected YYYY-MM or YYYY-MM-DD"}]) from None
    return parsed.replace(day=1)


__all__ = ["EmissionInput", "Co2eBreakdown", "calculate_co2e", "parse_month"]
