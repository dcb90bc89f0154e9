from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font

from .formatting import display_month_label

HEADER = [
    "Month",
    "Electricity_kWh",
    "Diesel_L",
    "Petrol_L",
    "Gas_kWh",
    "Refrigerant_kg",
    "Total_CO2e_kg",
]


def _row_values(row: Any) -> list[Any]:
    month = row.month.isoformat() if row.month else ""
    return [
        month,
        row.electricity_kwh or 0,
        row.diesel_litres or 0,
        row.petrol_litres or 0,
        row.gas_kwh or 0,
        row.refrigerant_kg or 0,
        round(float(row.total_co2e or 0), 2),
    ]


def build_csv(rows: Iterable[Any]) -> bytes:
    """Emission rows (months ascending) as CSV; totals carry two decimals."""
    buf = io.StringIO(newline="")
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(HEADER)
    for row in rows:
        values = _row_values(row)
        values[-1] = f"{values[-1]:.2f}"
        w.writerow(values)
    return buf.getvalue().encode("utf-8")


def build_xlsx(rows: Iterable[Any]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "emissions"
    ws.append(HEADER + ["Month_label"])
    for cell in ws[1]:
        cell.font = Font(bold=True)
    total = 0.0
    for row in rows:
        values = _row_values(row)
        total += values[-1]
        ws.append(values + [display_month_label(row.month)])
    ws.append(["TOTAL", None, None, None, None, None, round(total, 2)])
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


__all__ = ["HEADER", "build_csv", "build_xlsx"]
