"""Percentage shares that always add up to exactly 100.0.

Upstream shares are computed independently per source (electricity, fuel,
refrigerant) and rounded for display, so three of them can show 99.9 or
100.1. ``normalise_shares`` rounds the two smaller shares to one decimal and
lets the largest one absorb the residual, which is where a 0.1-0.3 point
adjustment is least visible on a pie/bar breakdown.

Rounding is round-half-away-from-zero on the value's shortest decimal
representation (``Decimal(repr(x))`` with ``ROUND_HALF_UP``), i.e. the value
the user would read, not its binary approximation: ``1.15 -> 1.2``.

Ties for "largest" are resolved by ``SHARE_FIELDS`` order:
electricity > fuel > refrigerant.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

SHARE_FIELDS: tuple[str, str, str] = ("electricity", "fuel", "refrigerant")

_ONE_PLACE = Decimal("0.1")
_HUNDRED = Decimal(100)


class ShareInputError(ValueError):
    """Raised when a raw share is NaN or infinite."""

    def __init__(self, field: str, value: object):
        super().__init__(f"share '{field}' must be a finite number, got {value!r}")
        self.field = field
        self.value = value


@dataclass(frozen=True)
class ShareSet:
    electricity: float
    fuel: float
    refrigerant: float

    @property
    def total(self) -> float:
        """Decimal sum of the shares as written, so 85.4 + 5.7 + 8.9 is 100.0."""
        return float(sum((Decimal(repr(float(getattr(self, n)))) for n in SHARE_FIELDS), Decimal(0)))

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in SHARE_FIELDS}

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> ShareSet:
        """Build from a mapping; missing fields count as 0. Raises TypeError/ValueError on non-numbers."""
        values: dict[str, float] = {}
        for name in SHARE_FIELDS:
            raw = data.get(name)
            if raw is None:
                values[name] = 0.0
                continue
            if isinstance(raw, bool):
                raise TypeError(f"share '{name}' must be numeric")
            values[name] = float(raw)  # type: ignore[arg-type]
        return cls(**values)


def _round_one_place(value: float | Decimal) -> Decimal:
    dec = value if isinstance(value, Decimal) else Decimal(repr(float(value)))
    return dec.quantize(_ONE_PLACE, rounding=ROUND_HALF_UP)


def _largest_field(raw: ShareSet) -> str:
    # Strict ">" keeps the earliest canonical field on ties.
    largest = SHARE_FIELDS[0]
    for name in SHARE_FIELDS[1:]:
        if getattr(raw, name) > getattr(raw, largest):
            largest = name
    return largest


def normalise_shares(raw: ShareSet) -> ShareSet:
    """Return ``raw`` rounded to one decimal with the largest share absorbing the residual.

    The result always sums to 100.0 at one decimal place, whatever the input
    summed to. Negative or zero inputs are not rejected and the absorbing
    share is not clamped; NaN/inf raise :class:`ShareInputError`.
    """
    for name in SHARE_FIELDS:
        value = getattr(raw, name)
        if not math.isfinite(value):
            raise ShareInputError(name, value)

    largest = _largest_field(raw)
    rounded: dict[str, Decimal] = {
        name: _round_one_place(getattr(raw, name)) for name in SHARE_FIELDS if name != largest
    }
    rounded[largest] = _round_one_place(_HUNDRED - sum(rounded.values(), Decimal(0)))
    return ShareSet(**{name: float(rounded[name]) for name in SHARE_FIELDS})


def shares_from_totals(electricity: float, fuel: float, refrigerant: float) -> ShareSet:
    """Convert absolute kg CO2e per source into normalised percentage shares.

    A zero denominator is treated as 1, so an all-zero input yields
    (100.0, 0.0, 0.0) after normalisation. Callers that want zeros for an
    empty dataset must skip this call.
    """
    denom = (electricity + fuel + refrigerant) or 1
    raw = ShareSet(
        electricity=electricity / denom * 100,
        fuel=fuel / denom * 100,
        refrigerant=refrigerant / denom * 100,
    )
    return normalise_shares(raw)


__all__ = [
    "SHARE_FIELDS",
    "ShareInputError",
    "ShareSet",
    "normalise_shares",
    "shares_from_totals",
]
