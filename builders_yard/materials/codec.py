"""Specification codec: canonical specification <-> stable JSON text.

The encoded text is the identity key of a catalog row, so it has to be
byte-stable: keys keep declaration order, enum members are written by name,
numbers are always floats in Python's shortest round-trip form and the
separators carry no whitespace.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from builders_yard.core.errors import DecodeError, MissingFieldError, TypeMismatchError
from builders_yard.materials import registry
from builders_yard.materials.validators import RuleBook
from builders_yard.materials.variants import Material, SpecField


@dataclass(frozen=True)
class EncodedMaterial:
    tag: str
    unit_price: float
    vat_percent: float
    spec_text: str
    id: int = 0
    name: str = ""

    @property
    def key(self) -> tuple:
        return (self.tag, self.spec_text)


def encode_specification(material: Material) -> str:
    return json.dumps(material.rendered_specification(), ensure_ascii=False,
                      separators=(",", ":"), allow_nan=False)


def encode(material: Material) -> EncodedMaterial:
    tag = registry.variant_class(material.TAG).TAG
    return EncodedMaterial(
        tag=tag,
        unit_price=material.unit_price,
        vat_percent=material.vat_percent,
        spec_text=encode_specification(material),
        id=material.id,
        name=material.name,
    )


def _convert(field: SpecField, value: Any) -> Any:
    if field.is_enum:
        if isinstance(value, str):
            for member in field.kind:
                if member.value == value:
                    return member
        raise TypeMismatchError(field.name, value, "one of %s" % ", ".join(field.choices))
    if field.kind is bool:
        if isinstance(value, bool):
            return value
        raise TypeMismatchError(field.name, value, "a boolean")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatchError(field.name, value, "a number")
    return float(value)


def parse_specification(tag: str, spec_text: str) -> dict:
    """Parse ``spec_text`` into the typed attribute map of variant ``tag``."""
    cls = registry.variant_class(tag)
    try:
        raw = json.loads(spec_text)
    except (TypeError, ValueError) as exc:
        raise DecodeError("Specification of %s is not valid JSON: %s" % (tag, exc)) from exc
    if not isinstance(raw, dict):
        raise DecodeError("Specification of %s must be a JSON object" % tag)

    spec = {}
    for field in cls.SPEC_FIELDS:
        if field.name not in raw:
            raise MissingFieldError(field.name, tag)
        spec[field.name] = _convert(field, raw[field.name])

    unexpected = sorted(set(raw) - set(spec))
    if unexpected:
        raise DecodeError("Specification of %s has unexpected keys: %s"
                          % (tag, ", ".join(unexpected)))
    return spec


def decode(tag: str, id: int, unit_price: float, vat_percent: float, spec_text: str,
           name: Optional[str] = None, rules: Optional[RuleBook] = None) -> Material:
    spec = parse_specification(tag, spec_text)
    return registry.construct(tag, id, name, unit_price, vat_percent, spec, rules=rules)


def decode_encoded(encoded: EncodedMaterial, rules: Optional[RuleBook] = None) -> Material:
    return decode(encoded.tag, encoded.id, encoded.unit_price, encoded.vat_percent,
                  encoded.spec_text, name=encoded.name or None, rules=rules)


def decode_row(row: dict, rules: Optional[RuleBook] = None) -> Material:
    """Decode a catalog row as returned by :class:`Database`."""
    return decode(row["tag"], row["id"], row["unit_price"], row["vat_percent"],
                  row["specification"] or "{}", name=row["name"], rules=rules)
