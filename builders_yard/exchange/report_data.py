"""Flat report rows shared by the JSON and Excel inventory reports."""
from __future__ import annotations

from builders_yard.materials.codec import encode_specification


def inventory_rows(content: list) -> list:
    rows = []
    for material, quantity in content:
        gross = material.gross_price()
        rows.append({
            "id": material.id,
            "tag": material.TAG,
            "name": material.name,
            "kind": material.kind.value,
            "unit_price": material.unit_price,
            "vat_percent": material.vat_percent,
            "gross_price": round(gross, 2),
            "quantity": quantity,
            "line_total": round(gross * quantity, 2),
            "specification": encode_specification(material),
        })
    return rows


def total_value(rows: list) -> float:
    return round(sum(r["line_total"] for r in rows), 2)
