"""Range rule sets for the general material fields and each material variant.

Every rule set is a frozen dataclass: the bounds are configuration values
fixed at construction, so one instance can be shared read-only by any number
of materials. ``validate(field, value)`` returns the value unchanged when it
is in range and raises :class:`RangeError` otherwise.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from builders_yard.core.errors import RangeError, ValidationError


def as_number(field: str, value: Any) -> float:
    """Return ``value`` as a finite float or raise ValidationError."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, "%s must be a number (got %r)" % (field, value))
    if not math.isfinite(value):
        raise ValidationError(field, "%s must be a finite number (got %r)" % (field, value))
    return float(value)


@dataclass(frozen=True)
class Bounds:
    minimum: float
    maximum: float
    unit: str = ""

    def __post_init__(self):
        if self.minimum > self.maximum:
            raise ValueError("Invalid bounds: min %s > max %s" % (self.minimum, self.maximum))

    def check(self, field: str, value: float) -> float:
        if value < self.minimum:
            raise RangeError(field, value, "min", self.minimum, self.unit)
        if value > self.maximum:
            raise RangeError(field, value, "max", self.maximum, self.unit)
        return value


class RuleSet:
    """Base for the per-variant rule sets; each dataclass field is a Bounds."""

    def bounded_fields(self) -> tuple:
        return tuple(f.name for f in fields(self))

    def bounds(self, field: str) -> Bounds:
        if field not in self.bounded_fields():
            raise KeyError("%s has no bounds for '%s'" % (type(self).__name__, field))
        return getattr(self, field)

    def validate(self, field: str, value: Any) -> Any:
        self.bounds(field).check(field, as_number(field, value))
        return value

    @classmethod
    def from_config(cls, section: Optional[dict]):
        defaults = cls()
        overrides = {}
        for name, pair in (section or {}).items():
            if name not in defaults.bounded_fields():
                raise ValueError("%s has no field '%s'" % (cls.__name__, name))
            low, high = pair
            overrides[name] = Bounds(float(low), float(high), getattr(defaults, name).unit)
        return replace(defaults, **overrides)


@dataclass(frozen=True)
class MaterialRules:
    min_unit_price: float = 0.0
    min_vat_percent: float = 0.0
    max_vat_percent: float = 50.0

    def validate(self, field: str, value: Any) -> Any:
        if field == "id":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError("id", "id must be an integer (got %r)" % (value,))
            if value < 0:
                raise RangeError("id", value, "min", 0)
            return value
        if field == "name":
            if not isinstance(value, str) or not value.strip():
                raise ValidationError("name", "name cannot be empty")
            return value.strip()
        if field == "unit_price":
            if as_number(field, value) < self.min_unit_price:
                raise RangeError(field, value, "min", self.min_unit_price)
            return value
        if field == "vat_percent":
            Bounds(self.min_vat_percent, self.max_vat_percent, "%").check(
                field, as_number(field, value))
            return value
        raise KeyError("MaterialRules has no rule for '%s'" % field)

    @classmethod
    def from_config(cls, section: Optional[dict]) -> "MaterialRules":
        section = section or {}
        defaults = cls()
        return cls(
            min_unit_price=float(section.get("min_unit_price", defaults.min_unit_price)),
            min_vat_percent=float(section.get("min_vat_percent", defaults.min_vat_percent)),
            max_vat_percent=float(section.get("max_vat_percent", defaults.max_vat_percent)),
        )


@dataclass(frozen=True)
class BrickRules(RuleSet):
    thickness: Bounds = Bounds(10, 40, "cm")


@dataclass(frozen=True)
class AeratedBlockRules(RuleSet):
    thickness: Bounds = Bounds(10, 30, "cm")
    length: Bounds = Bounds(40, 110, "cm")


@dataclass(frozen=True)
class BeamRules(RuleSet):
    diameter: Bounds = Bounds(10, 25, "cm")
    length: Bounds = Bounds(2, 8, "m")


@dataclass(frozen=True)
class PlankRules(RuleSet):
    length: Bounds = Bounds(1, 6, "m")


@dataclass(frozen=True)
class ReadyMixConcreteRules(RuleSet):
    cement_content: Bounds = Bounds(10, 32, "%")


@dataclass(frozen=True)
class CrushedStoneAggregateRules(RuleSet):
    grain_size: Bounds = Bounds(5, 40, "mm")
    density: Bounds = Bounds(1200, 2400, "kg/m3")


@dataclass(frozen=True)
class MineralWoolRules(RuleSet):
    thickness: Bounds = Bounds(5, 20, "cm")


@dataclass(frozen=True)
class FoamBoardRules(RuleSet):
    thickness: Bounds = Bounds(5, 20, "cm")


_TAG_FIELDS = {
    "Brick": "brick",
    "AeratedBlock": "aerated_block",
    "Beam": "beam",
    "Plank": "plank",
    "ReadyMixConcrete": "ready_mix_concrete",
    "CrushedStoneAggregate": "crushed_stone_aggregate",
    "MineralWool": "mineral_wool",
    "FoamBoard": "foam_board",
}


@dataclass(frozen=True)
class RuleBook:
    """The general material rules plus one rule set per variant tag."""

    material: MaterialRules = MaterialRules()
    brick: BrickRules = BrickRules()
    aerated_block: AeratedBlockRules = AeratedBlockRules()
    beam: BeamRules = BeamRules()
    plank: PlankRules = PlankRules()
    ready_mix_concrete: ReadyMixConcreteRules = ReadyMixConcreteRules()
    crushed_stone_aggregate: CrushedStoneAggregateRules = CrushedStoneAggregateRules()
    mineral_wool: MineralWoolRules = MineralWoolRules()
    foam_board: FoamBoardRules = FoamBoardRules()

    def for_tag(self, tag: str) -> RuleSet:
        return getattr(self, _TAG_FIELDS[tag])

    @classmethod
    def from_config(cls, section: Optional[dict]) -> "RuleBook":
        section = section or {}
        defaults = cls()
        kwargs = {"material": MaterialRules.from_config(section.get("material"))}
        for tag, attr in _TAG_FIELDS.items():
            kwargs[attr] = type(getattr(defaults, attr)).from_config(section.get(tag))
        return cls(**kwargs)


DEFAULT_RULES = RuleBook()
