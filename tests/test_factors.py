from __future__ import annotations

import pytest

from carbon.db import get_session
from carbon.errors import FactorsUnavailableError
from carbon.factors import (
    REFRIGERANT_GWP,
    calc_fuel_co2e_kg,
    calc_refrigerant_co2e,
    default_factor_rows,
    default_factor_set,
    load_factor_set,
    normalise_refrigerant_code,
    refrigerant_label,
    seed_default_factors,
)


@pytest.mark.parametrize(
    "raw, code",
    [
        ("R410A", "R410A"),
        ("r410a blend", "R410A"),
        ("R134a", "R134A"),
        ("R407C", "R407C"),
        ("R404A", "R404A"),
        ("R32", "GENERIC_HFC"),
        ("", "GENERIC_HFC"),
        (None, "GENERIC_HFC"),
    ],
)
def test_normalise_refrigerant_code(raw, code):
    assert normalise_refrigerant_code(raw) == code


def test_refrigerant_co2e_uses_gwp():
    assert calc_refrigerant_co2e(2.0, "R410A") == pytest.approx(4176.0)
    assert calc_refrigerant_co2e(1.0, "unknown") == REFRIGERANT_GWP["GENERIC_HFC"]


def test_refrigerant_label():
    assert refrigerant_label(None) == "Not specified"
    assert refrigerant_label("r404a").startswith("R404A")
    assert refrigerant_label("R32") == "R32"


def test_fuel_co2e_treats_none_as_zero():
    assert calc_fuel_co2e_kg(10, None, None) == pytest.approx(26.0)
    assert calc_fuel_co2e_kg(0, 10, 100) == pytest.approx(23.0 + 18.4)


def test_default_rows_cover_every_refrigerant():
    rows = default_factor_rows("V1", "UK")
    subcats = {r["subcategory"] for r in rows if r["category"] == "refrigerant"}
    assert subcats == set(REFRIGERANT_GWP)
    assert all(r["version"] == "V1" and r["region"] == "UK" for r in rows)


def test_seed_is_idempotent_and_load_round_trips(app_session):
    with app_session.app_context():
        db = get_session()
        try:
            assert seed_default_factors(db, "TEST-v9", "UK") == len(default_factor_rows())
            assert seed_default_factors(db, "TEST-v9", "UK") == 0
            loaded = load_factor_set(db, "TEST-v9", "UK")
        finally:
            db.close()
    expected = default_factor_set()
    assert loaded.version == "TEST-v9"
    assert loaded.electricity == pytest.approx(expected.electricity)
    assert loaded.diesel == pytest.approx(expected.diesel)
    assert loaded.petrol == pytest.approx(expected.petrol)
    assert loaded.gas == pytest.approx(expected.gas)
    assert loaded.refrigerants == pytest.approx(expected.refrigerants)


def test_load_missing_version_raises(app_session):
    with app_session.app_context():
        db = get_session()
        try:
            with pytest.raises(FactorsUnavailableError) as exc:
                load_factor_set(db, "NOPE", "UK")
        finally:
            db.close()
    assert exc.value.status == 503
