"""Display formatting for month labels and numbers (UK English)."""
from __future__ import annotations

import math
import re
from datetime import date, datetime

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")

# Fixed English names; strftime("%B") would follow the process locale.
_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

EMPTY_LABEL = "—"


def _month_year(d: date) -> str:
    return f"{_MONTH_NAMES[d.month - 1]} {d.year}"


def format_month_label(label: str) -> str:
    """``"2025-11-01" -> "November 2025"``; anything that is not a valid ISO date is returned unchanged."""
    if not label:
        return label
    if _ISO_DATE_RE.match(label):
        try:
            return _month_year(date.fromisoformat(label))
        except ValueError:
            return label
    return label


def display_month_label(raw: str | date | None) -> str:
    """Always-friendly variant used by dashboard/report views.

    Accepts dates, ISO dates/datetimes and ``YYYY-MM``; empty input renders as
    an em dash and unparseable labels are returned unchanged.
    """
    if raw is None or raw == "":
        return EMPTY_LABEL
    if isinstance(raw, date):
        return _month_year(raw)
    text = str(raw).strip()
    if _ISO_MONTH_RE.match(text):
        text += "-01"
    try:
        return _month_year(datetime.fromisoformat(text))
    except ValueError:
        return text


def format_number(n: float | None, decimals: int = 2) -> str:
    if n is None or (isinstance(n, float) and math.isnan(n)):
        return "0"
    return f"{n:,.{decimals}f}"


__all__ = ["EMPTY_LABEL", "format_month_label", "display_month_label", "format_number"]
