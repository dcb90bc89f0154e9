"""UK emission factors (kg CO2e per unit) and refrigerant GWPs.

Defaults follow DEFRA-style values for UK SMEs; a versioned factor set can
also be loaded from the ``emission_factors`` table.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from .errors import FactorsUnavailableError
from .models import EmissionFactor

DEFAULT_FACTOR_VERSION = "DEFRA-2024-v1"
DEFAULT_REGION = "UK"

EF_GRID_ELECTRICITY_KG_PER_KWH = 0.20705
EF_DIESEL_KG_PER_LITRE = 2.6  # average biofuel blend
EF_PETROL_KG_PER_LITRE = 2.3  # average biofuel blend
EF_NATURAL_GAS_KG_PER_KWH = 0.184
EF_GENERIC_ROAD_FUEL_KG_PER_LITRE = 2.5

# IPCC AR4 100-year GWPs
REFRIGERANT_GWP: dict[str, float] = {
    "R410A": 2088,
    "R134A": 1430,
    "R407C": 1774,
    "R404A": 3922,
    "GENERIC_HFC": 1300,
}

_REFRIGERANT_PREFIXES = (
    ("R410", "R410A"),
    ("R134", "R134A"),
    ("R407", "R407C"),
    ("R404", "R404A"),
)

_REFRIGERANT_LABELS = {
    "R410A": "R410A (split AC – common)",
    "R134A": "R134a (chillers / older systems)",
    "R407C": "R407C (comfort cooling)",
    "R404A": "R404A (cold rooms / refrigeration)",
    "GENERIC_HFC": "Generic HFC (not specified)",
}


@dataclass
class FactorSet:
    version: str
    electricity: float
    diesel: float
    petrol: float
    gas: float
    refrigerants: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "version": self.version,
            "electricity": self.electricity,
            "diesel": self.diesel,
            "petrol": self.petrol,
            "gas": self.gas,
            "refrigerants": dict(self.refrigerants),
        }


def normalise_refrigerant_code(value: str | None) -> str:
    """Map a free-text refrigerant (dropdown value) to a GWP lookup code."""
    if not value:
        return "GENERIC_HFC"
    upper = value.upper()
    for prefix, code in _REFRIGERANT_PREFIXES:
        if upper.startswith(prefix):
            return code
    return "GENERIC_HFC"


def calc_refrigerant_co2e(kg_leak: float, code: str | None) -> float:
    gwp = REFRIGERANT_GWP.get(normalise_refrigerant_code(code), REFRIGERANT_GWP["GENERIC_HFC"])
    return kg_leak * gwp


def refrigerant_label(code: str | None) -> str:
    if not code:
        return "Not specified"
    return _REFRIGERANT_LABELS.get(code.upper(), code)


def calc_fuel_co2e_kg(
    diesel_litres: float | None = 0, petrol_litres: float | None = 0, gas_kwh: float | None = 0
) -> float:
    """Diesel + petrol + natural gas in kg CO2e; ``None`` counts as zero."""
    return (
        (diesel_litres or 0) * EF_DIESEL_KG_PER_LITRE
        + (petrol_litres or 0) * EF_PETROL_KG_PER_LITRE
        + (gas_kwh or 0) * EF_NATURAL_GAS_KG_PER_KWH
    )


def default_factor_set() -> FactorSet:
    return FactorSet(
        version=DEFAULT_FACTOR_VERSION,
        electricity=EF_GRID_ELECTRICITY_KG_PER_KWH,
        diesel=EF_DIESEL_KG_PER_LITRE,
        petrol=EF_PETROL_KG_PER_LITRE,
        gas=EF_NATURAL_GAS_KG_PER_KWH,
        refrigerants=dict(REFRIGERANT_GWP),
    )


def default_factor_rows(
    version: str = DEFAULT_FACTOR_VERSION, region: str = DEFAULT_REGION
) -> list[dict[str, object]]:
    """Default factors shaped as ``emission_factors`` rows (used by seeding)."""
    rows: list[dict[str, object]] = [
        {"category": "electricity", "subcategory": "Grid", "factor": EF_GRID_ELECTRICITY_KG_PER_KWH, "unit": "kWh"},
        {"category": "fuel", "subcategory": "Diesel", "factor": EF_DIESEL_KG_PER_LITRE, "unit": "litre"},
        {"category": "fuel", "subcategory": "Petrol", "factor": EF_PETROL_KG_PER_LITRE, "unit": "litre"},
        {"category": "fuel", "subcategory": "Natural Gas", "factor": EF_NATURAL_GAS_KG_PER_KWH, "unit": "kWh"},
    ]
    for code, gwp in REFRIGERANT_GWP.items():
        rows.append({"category": "refrigerant", "subcategory": code, "factor": gwp, "unit": "kg"})
    for r in rows:
        r["version"] = version
        r["region"] = region
    return rows


def seed_default_factors(db: Session, version: str = DEFAULT_FACTOR_VERSION, region: str = DEFAULT_REGION) -> int:
    """Insert default factor rows when the version/region has none. Returns rows added."""
    exists = (
        db.query(EmissionFactor.id)
        .filter(EmissionFactor.version == version, EmissionFactor.region == region)
        .first()
    )
    if exists:
        return 0
    rows = default_factor_rows(version, region)
    db.add_all([EmissionFactor(**r) for r in rows])
    db.commit()
    return len(rows)


def load_factor_set(db: Session, version: str = DEFAULT_FACTOR_VERSION, region: str = DEFAULT_REGION) -> FactorSet:
    rows = (
        db.query(EmissionFactor)
        .filter(EmissionFactor.version == version, EmissionFactor.region == region)
        .all()
    )
    if not rows:
        raise FactorsUnavailableError(f"no emission factors for {version}/{region}")

    def _scalar(**match: str) -> float:
        for r in rows:
            if all(getattr(r, k) == v for k, v in match.items()):
                return float(r.factor)
        return 0.0

    refrigerants = {r.subcategory: float(r.factor) for r in rows if r.category == "refrigerant"}
    return FactorSet(
        version=version,
        electricity=_scalar(category="electricity"),
        diesel=_scalar(subcategory="Diesel"),
        petrol=_scalar(subcategory="Petrol"),
        gas=_scalar(subcategory="Natural Gas"),
        refrigerants=refrigerants,
    )


__all__ = [
    "DEFAULT_FACTOR_VERSION",
    "DEFAULT_REGION",
    "EF_GRID_ELECTRICITY_KG_PER_KWH",
    "EF_DIESEL_KG_PER_LITRE",
    "EF_PETROL_KG_PER_LITRE",
    "EF_NATURAL_GAS_KG_PER_KWH",
    "EF_GENERIC_ROAD_FUEL_KG_PER_LITRE",
    "REFRIGERANT_GWP",
    "FactorSet",
    "normalise_refrigerant_code",
    "calc_refrigerant_co2e",
    "refrigerant_label",
    "calc_fuel_co2e_kg",
    "default_factor_set",
    "default_factor_rows",
    "seed_default_factors",
    "load_factor_set",
]
