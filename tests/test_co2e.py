from __future__ import annotations

from datetime import date

import pytest

from carbon.co2e import EmissionInput, calculate_co2e, parse_month
from carbon.errors import ValidationError
from carbon.factors import default_factor_set


def test_from_payload_accepts_camel_case_and_defaults():
    inp = EmissionInput.from_payload({"electricityKwh": "1000", "dieselLitres": 10, "refrigerantType": " R410A "})
    assert inp.electricity_kwh == 1000.0
    assert inp.diesel_litres == 10.0
    assert inp.petrol_litres == 0.0
    assert inp.refrigerant_type == "R410A"


def test_from_payload_collects_all_errors():
    with pytest.raises(ValidationError) as exc:
        EmissionInput.from_payload({"electricity_kwh": -1, "gas_kwh": "abc", "petrol_litres": "inf"})
    fields = {e["field"] for e in exc.value.errors}
    assert fields == {"electricity_kwh", "gas_kwh", "petrol_litres"}


def test_blank_refrigerant_type_becomes_none():
    assert EmissionInput.from_payload({"refrigerant_type": "  "}).refrigerant_type is None


def test_calculate_co2e_breakdown():
    inp = EmissionInput(electricity_kwh=1000, diesel_litres=10, petrol_litres=10, gas_kwh=100,
                        refrigerant_type="R410A", refrigerant_kg=0.5)
    out = calculate_co2e(inp, default_factor_set())
    assert out.electricity == pytest.approx(207.05)
    assert out.diesel == pytest.approx(26.0)
    assert out.petrol == pytest.approx(23.0)
    assert out.gas == pytest.approx(18.4)
    assert out.refrigerant == pytest.approx(1044.0)
    assert out.total == pytest.approx(207.05 + 26.0 + 23.0 + 18.4 + 1044.0)


def test_unknown_refrigerant_type_contributes_nothing():
    inp = EmissionInput(refrigerant_type="R32", refrigerant_kg=3)
    assert calculate_co2e(inp, default_factor_set()).total == 0.0


@pytest.mark.parametrize("raw", ["2025-11", "2025-11-17", " 2025-11-01 "])
def test_parse_month_snaps_to_first(raw):
    assert parse_month(raw) == date(2025, 11, 1)


@pytest.mark.parametrize("raw", [None, "", "November", "2025-13"])
def test_parse_month_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_month(raw)
