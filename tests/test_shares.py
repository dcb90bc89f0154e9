from __future__ import annotations

import math
from decimal import Decimal

import pytest

from carbon.shares import SHARE_FIELDS, ShareInputError, ShareSet, normalise_shares, shares_from_totals


def _one_place_sum(s: ShareSet) -> Decimal:
    return sum((Decimal(repr(getattr(s, n))) for n in SHARE_FIELDS), Decimal(0))


def test_typical_split_rounds_smaller_shares():
    out = normalise_shares(ShareSet(electricity=62.34, fuel=25.26, refrigerant=12.4))
    assert out == ShareSet(electricity=62.3, fuel=25.3, refrigerant=12.4)


def test_largest_absorbs_residual_when_inputs_overshoot():
    out = normalise_shares(ShareSet(electricity=33.35, fuel=33.35, refrigerant=33.35))
    # electricity wins the tie, fuel/refrigerant round half-up to 33.4
    assert out == ShareSet(electricity=33.2, fuel=33.4, refrigerant=33.4)


def test_result_sums_to_exactly_100_at_one_decimal():
    samples = [
        (10.05, 20.15, 69.8),
        (0.04, 0.04, 99.92),
        (1 / 3 * 100, 1 / 3 * 100, 1 / 3 * 100),
        (50.0, 49.95, 0.05),
        (12.345, 67.891, 19.764),
    ]
    for e, f, r in samples:
        out = normalise_shares(ShareSet(e, f, r))
        assert _one_place_sum(out) == Decimal("100.0"), (e, f, r, out)


def test_inputs_not_summing_to_100_are_corrected():
    out = normalise_shares(ShareSet(electricity=40.0, fuel=30.0, refrigerant=20.0))
    assert out == ShareSet(electricity=50.0, fuel=30.0, refrigerant=20.0)


def test_every_field_has_at_most_one_decimal():
    out = normalise_shares(ShareSet(electricity=12.3456, fuel=45.6789, refrigerant=41.9755))
    for name in SHARE_FIELDS:
        value = getattr(out, name)
        assert Decimal(repr(value)) == Decimal(repr(value)).quantize(Decimal("0.1"))


@pytest.mark.parametrize(
    "raw, largest",
    [
        (ShareSet(40.0, 40.0, 20.0), "electricity"),
        (ShareSet(20.0, 40.0, 40.0), "fuel"),
        (ShareSet(40.0, 20.0, 40.0), "electricity"),
        (ShareSet(10.0, 20.0, 70.0), "refrigerant"),
    ],
)
def test_ties_resolve_in_canonical_order(raw, largest):
    shifted = ShareSet(raw.electricity + 0.04, raw.fuel + 0.04, raw.refrigerant + 0.04)
    out = normalise_shares(shifted)
    others = [n for n in SHARE_FIELDS if n != largest]
    for name in others:
        assert getattr(out, name) == round(getattr(raw, name), 1)
    expected = 100.0 - sum(getattr(out, n) for n in others)
    assert getattr(out, largest) == pytest.approx(expected)


def test_half_values_round_up():
    out = normalise_shares(ShareSet(electricity=80.0, fuel=1.15, refrigerant=18.85))
    assert out.fuel == 1.2
    assert out.refrigerant == 18.9
    assert out.electricity == 79.9


def test_idempotent():
    once = normalise_shares(ShareSet(electricity=55.55, fuel=22.22, refrigerant=22.23))
    assert normalise_shares(once) == once


def test_all_zero_gives_largest_the_full_hundred():
    assert normalise_shares(ShareSet(0.0, 0.0, 0.0)) == ShareSet(100.0, 0.0, 0.0)


def test_negative_inputs_are_not_clamped():
    out = normalise_shares(ShareSet(electricity=-5.0, fuel=60.0, refrigerant=50.0))
    assert out == ShareSet(electricity=-5.0, fuel=55.0, refrigerant=50.0)


def test_input_is_not_mutated():
    raw = ShareSet(electricity=62.34, fuel=25.26, refrigerant=12.4)
    normalise_shares(raw)
    assert raw == ShareSet(electricity=62.34, fuel=25.26, refrigerant=12.4)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_input_is_rejected(bad):
    with pytest.raises(ShareInputError) as exc:
        normalise_shares(ShareSet(electricity=50.0, fuel=bad, refrigerant=50.0))
    assert exc.value.field == "fuel"


def test_from_mapping_defaults_missing_fields_to_zero():
    s = ShareSet.from_mapping({"electricity": "12.5", "fuel": 3})
    assert s == ShareSet(electricity=12.5, fuel=3.0, refrigerant=0.0)


def test_from_mapping_rejects_booleans_and_text():
    with pytest.raises(TypeError):
        ShareSet.from_mapping({"electricity": True})
    with pytest.raises(ValueError):
        ShareSet.from_mapping({"fuel": "lots"})


def test_shares_from_totals_converts_kg_to_percentages():
    out = shares_from_totals(200.0, 100.0, 100.0)
    assert out == ShareSet(electricity=50.0, fuel=25.0, refrigerant=25.0)


def test_shares_from_totals_thirds_sum_to_100():
    out = shares_from_totals(1.0, 1.0, 1.0)
    assert out == ShareSet(electricity=33.4, fuel=33.3, refrigerant=33.3)


def test_shares_from_totals_all_zero():
    assert shares_from_totals(0, 0, 0) == ShareSet(100.0, 0.0, 0.0)


def test_exact_input_is_unchanged():
    assert normalise_shares(ShareSet(100.0, 0.0, 0.0)) == ShareSet(100.0, 0.0, 0.0)
    assert normalise_shares(ShareSet(45.2, 30.1, 24.7)) == ShareSet(45.2, 30.1, 24.7)


def test_near_thirds_largest_takes_remainder():
    out = normalise_shares(ShareSet(33.33, 33.33, 33.34))
    assert out == ShareSet(33.3, 33.3, 33.4)


def test_moving_the_largest_moves_the_absorbing_field():
    a = normalise_shares(ShareSet(50.0, 30.06, 20.06))
    b = normalise_shares(ShareSet(20.06, 30.06, 50.0))
    assert a.electricity == 49.8 and a.refrigerant == 20.1
    assert b.refrigerant == 49.8 and b.electricity == 20.1


def test_total_is_exact_at_one_decimal():
    assert ShareSet(85.4, 5.7, 8.9).total == 100.0
    assert normalise_shares(ShareSet(85.4, 5.7, 8.9)).total == 100.0
    assert ShareSet(0.1, 0.2, 0.0).total == 0.3


def test_zero_ranked_largest_when_others_negative():
    out = normalise_shares(ShareSet(0.0, -5.0, -10.0))
    assert out == ShareSet(electricity=115.0, fuel=-5.0, refrigerant=-10.0)
    assert out.total == 100.0
