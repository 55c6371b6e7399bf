"""Semicolon-delimited CSV exchange of a single material.

The file holds one header line and one value line. Columns are the shared
fields followed by the variant's own attributes in declaration order, so the
layout differs per variant.
"""
from __future__ import annotations

import csv
import enum
import io
from typing import Any, Optional

from builders_yard.core.errors import ExchangeFormatError
from builders_yard.materials import registry
from builders_yard.materials.validators import RuleBook
from builders_yard.materials.variants import Material

DELIMITER = ";"
SHARED_COLUMNS = ("tag", "name", "unit_price", "vat_percent", "kind")


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return str(value.value)
    return repr(value) if isinstance(value, float) else str(value)


def header_for(material: Material) -> list:
    return list(SHARED_COLUMNS) + material.spec_field_names()


def build_csv(material: Material) -> str:
    values = [material.TAG, material.name, material.unit_price, material.vat_percent,
              material.kind]
    values += [getattr(material, name) for name in material.spec_field_names()]
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=DELIMITER, lineterminator="\n")
    writer.writerow(header_for(material))
    writer.writerow([_render(v) for v in values])
    return buf.getvalue()


def _parse_number(column: str, text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ExchangeFormatError("Column '%s' is not a number: %r" % (column, text))


def parse_csv(text: str, rules: Optional[RuleBook] = None) -> Material:
    """Build a transient material (id 0) from CSV text."""
    rows = [row for row in csv.reader(io.StringIO(text), delimiter=DELIMITER) if row]
    if len(rows) < 2:
        raise ExchangeFormatError("CSV must contain a header and at least one data line")
    header, values = rows[0], rows[1]
    if len(header) != len(values):
        raise ExchangeFormatError("CSV header and value count mismatch")
    record = {h.strip(): v.strip() for h, v in zip(header, values)}

    for column in SHARED_COLUMNS:
        if column not in record:
            raise ExchangeFormatError("CSV missing '%s' column" % column)
    cls = registry.variant_class(record["tag"])
    if record["kind"] != cls.KIND.value:
        raise ExchangeFormatError("%s must have kind %s, not %r"
                                  % (cls.TAG, cls.KIND.value, record["kind"]))

    spec = {}
    for field in cls.SPEC_FIELDS:
        if field.name not in record:
            raise ExchangeFormatError("CSV missing '%s' column" % field.name)
        spec[field.name] = field.parse_text(record[field.name])

    return cls.from_specification(
        spec,
        unit_price=_parse_number("unit_price", record["unit_price"]),
        vat_percent=_parse_number("vat_percent", record["vat_percent"]),
        name=record["name"],
        rules=rules,
    )


def export_csv(material: Material, path: str) -> str:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(build_csv(material))
    return path


def import_csv(path: str, rules: Optional[RuleBook] = None) -> Material:
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        return parse_csv(f.read(), rules)
