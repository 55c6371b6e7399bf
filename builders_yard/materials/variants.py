"""Material variants: the shared material contract and its eight concrete shapes.

A variant declares its unique attributes as :class:`SpecField` class
attributes. Their declaration order is the canonical specification order and
also drives the editor descriptors, the codec and the CSV columns.
"""
from __future__ import annotations

import enum
from typing import Any, Optional

from builders_yard.core.errors import MissingFieldError, ValidationError
from builders_yard.core.models import AttributeDescriptor, MaterialKind
from builders_yard.materials.validators import DEFAULT_RULES, RuleBook, as_number


class BrickForm(enum.Enum):
    SOLID = "Solid"
    AIR_CELL = "AirCell"


class BlockType(enum.Enum):
    SMOOTH = "Smooth"
    INTERLOCKING = "Interlocking"


class PlankSize(enum.Enum):
    S_5X10 = "5x10"
    S_5X15 = "5x15"
    S_7_5X15 = "7.5x15"
    S_7_5X20 = "7.5x20"


class Consistency(enum.Enum):
    WET = "Wet"
    DRY = "Dry"


class Aggregate(enum.Enum):
    SMALL_GRAVEL = "SmallGravel"
    LARGE_GRAVEL = "LargeGravel"
    CRUSHED_STONE = "CrushedStone"


class WoolForm(enum.Enum):
    ROLLED = "Rolled"
    BOARD = "Board"


class BoardSize(enum.Enum):
    S_50X50 = "50x50"
    S_100X50 = "100x50"
    S_100X100 = "100x100"


_TRUE_WORDS = ("true", "yes", "1")
_FALSE_WORDS = ("false", "no", "0")


class SpecField:
    """A unique attribute of a variant; validated on every assignment."""

    def __init__(self, kind: Any, unit: str = ""):
        self.kind = kind
        self.unit = unit
        self.name = ""

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj._spec[self.name]

    def __set__(self, obj, value):
        obj._set_spec(self, value)

    @property
    def is_enum(self) -> bool:
        return isinstance(self.kind, type) and issubclass(self.kind, enum.Enum)

    @property
    def choices(self) -> list:
        return [m.value for m in self.kind] if self.is_enum else []

    def coerce(self, value: Any) -> Any:
        if self.is_enum:
            if isinstance(value, self.kind):
                return value
            raise ValidationError(self.name, "%s must be one of %s (got %r)"
                                  % (self.name, ", ".join(self.choices), value))
        if self.kind is bool:
            if isinstance(value, bool):
                return value
            raise ValidationError(self.name, "%s must be true or false (got %r)" % (self.name, value))
        return as_number(self.name, value)

    def parse_text(self, raw: Any) -> Any:
        """Convert editor or CSV input, which usually arrives as text."""
        if not isinstance(raw, str):
            return self.coerce(raw)
        text = raw.strip()
        if self.is_enum:
            for member in self.kind:
                if text == member.value:
                    return member
            return self.coerce(text)
        if self.kind is bool:
            lowered = text.lower()
            if lowered in _TRUE_WORDS:
                return True
            if lowered in _FALSE_WORDS:
                return False
            return self.coerce(text)
        try:
            return as_number(self.name, float(text))
        except ValueError:
            raise ValidationError(self.name, "%s must be a number (got %r)" % (self.name, raw))

    def render(self, value: Any) -> Any:
        return value.value if self.is_enum else value


def _parse_shared_number(name: str, raw: Any) -> float:
    if isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError:
            raise ValidationError(name, "%s must be a number (got %r)" % (name, raw))
    return raw


class Material:
    """Shared contract of every material variant.

    ``id`` is 0 until the upsert protocol persists the material. All shared
    fields go through the general rule set, unique attributes through the
    variant's own rule set, on construction and on every later assignment.
    """

    TAG = ""
    KIND: MaterialKind = MaterialKind.HARD
    SPEC_FIELDS: tuple = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        inherited = tuple(f for f in cls.SPEC_FIELDS if f.name not in cls.__dict__)
        own = tuple(v for v in cls.__dict__.values() if isinstance(v, SpecField))
        cls.SPEC_FIELDS = inherited + own

    def __init__(self, unit_price: float, vat_percent: float, id: int = 0,
                 name: Optional[str] = None, rules: Optional[RuleBook] = None):
        if not self.TAG:
            raise TypeError("Material is abstract; instantiate one of its variants")
        self._rules = rules or DEFAULT_RULES
        self._spec: dict = {}
        self.id = id
        self.name = self.TAG if name is None else name
        self.unit_price = unit_price
        self.vat_percent = vat_percent

    # --- Shared fields ---
    @property
    def id(self) -> int:
        return self._id

    @id.setter
    def id(self, value: int) -> None:
        self._id = self._rules.material.validate("id", value)

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = self._rules.material.validate("name", value)

    @property
    def unit_price(self) -> float:
        return self._unit_price

    @unit_price.setter
    def unit_price(self, value: float) -> None:
        self._unit_price = float(self._rules.material.validate("unit_price", value))

    @property
    def vat_percent(self) -> float:
        return self._vat_percent

    @vat_percent.setter
    def vat_percent(self, value: float) -> None:
        self._vat_percent = float(self._rules.material.validate("vat_percent", value))

    @property
    def kind(self) -> MaterialKind:
        return self.KIND

    @property
    def tag(self) -> str:
        return self.TAG

    # --- Unique attributes ---
    def _set_spec(self, field: SpecField, value: Any) -> None:
        coerced = field.coerce(value)
        rule_set = self._rules.for_tag(self.TAG)
        if field.name in rule_set.bounded_fields():
            rule_set.validate(field.name, coerced)
        self._spec[field.name] = coerced

    @classmethod
    def spec_field(cls, name: str) -> SpecField:
        for f in cls.SPEC_FIELDS:
            if f.name == name:
                return f
        raise KeyError("%s has no attribute '%s'" % (cls.TAG, name))

    @classmethod
    def spec_field_names(cls) -> list:
        return [f.name for f in cls.SPEC_FIELDS]

    def canonical_specification(self) -> dict:
        return {f.name: getattr(self, f.name) for f in self.SPEC_FIELDS}

    def rendered_specification(self) -> dict:
        """Canonical specification with enum members replaced by their names."""
        return {f.name: f.render(getattr(self, f.name)) for f in self.SPEC_FIELDS}

    # --- Pricing ---
    def gross_price(self) -> float:
        return self.unit_price * (1 + self.vat_percent / 100)

    # --- Editor boundary ---
    def describe(self) -> list:
        descriptors = [
            AttributeDescriptor("id", self.id, int, editable=False),
            AttributeDescriptor("name", self.name, str),
            AttributeDescriptor("unit_price", self.unit_price, float),
            AttributeDescriptor("vat_percent", self.vat_percent, float),
        ]
        for f in self.SPEC_FIELDS:
            descriptors.append(AttributeDescriptor(f.name, getattr(self, f.name), f.kind))
        return descriptors

    def apply_edits(self, changes: dict) -> list:
        """Apply every change through its setter; return all validation errors."""
        errors = []
        for name, raw in changes.items():
            try:
                self._apply_edit(name, raw)
            except ValidationError as exc:
                errors.append(exc)
        return errors

    def _apply_edit(self, name: str, raw: Any) -> None:
        if name == "name":
            self.name = raw
        elif name in ("unit_price", "vat_percent"):
            setattr(self, name, _parse_shared_number(name, raw))
        elif name == "id":
            raise ValidationError("id", "id is not editable")
        elif name in self.spec_field_names():
            field = self.spec_field(name)
            setattr(self, name, field.parse_text(raw))
        else:
            raise ValidationError(name, "%s has no attribute '%s'" % (self.TAG, name))

    # --- Construction helpers ---
    @classmethod
    def from_specification(cls, spec: dict, unit_price: float, vat_percent: float,
                           id: int = 0, name: Optional[str] = None,
                           rules: Optional[RuleBook] = None) -> "Material":
        for f in cls.SPEC_FIELDS:
            if f.name not in spec:
                raise MissingFieldError(f.name, cls.TAG)
        kwargs = {f.name: spec[f.name] for f in cls.SPEC_FIELDS}
        return cls(unit_price=unit_price, vat_percent=vat_percent, id=id,
                   name=name, rules=rules, **kwargs)

    @classmethod
    def default(cls, rules: Optional[RuleBook] = None) -> "Material":
        """Placeholder instance used before the user picks real values."""
        rules = rules or DEFAULT_RULES
        rule_set = rules.for_tag(cls.TAG)
        spec = {}
        for f in cls.SPEC_FIELDS:
            if f.is_enum:
                spec[f.name] = next(iter(f.kind))
            elif f.kind is bool:
                spec[f.name] = False
            else:
                spec[f.name] = rule_set.bounds(f.name).minimum
        return cls.from_specification(spec, unit_price=max(0.0, rules.material.min_unit_price),
                                      vat_percent=rules.material.min_vat_percent, rules=rules)

    def __eq__(self, other):
        if not isinstance(other, Material):
            return NotImplemented
        return (self.TAG == other.TAG and self.id == other.id and self.name == other.name
                and self.unit_price == other.unit_price
                and self.vat_percent == other.vat_percent
                and self.rendered_specification() == other.rendered_specification())

    __hash__ = None

    def __repr__(self) -> str:
        spec = ", ".join("%s=%r" % item for item in self.rendered_specification().items())
        return "%s(id=%d, name=%r, unit_price=%r, vat_percent=%r, %s)" % (
            self.TAG, self.id, self.name, self.unit_price, self.vat_percent, spec)

    def __str__(self) -> str:
        return "%s (%s) - %s net - %s%% VAT" % (
            self.name, self.KIND.value, self.unit_price, self.vat_percent)


class Brick(Material):
    TAG = "Brick"
    KIND = MaterialKind.HARD

    form = SpecField(BrickForm)
    thickness = SpecField(float, "cm")

    def __init__(self, form: BrickForm, thickness: float, unit_price: float,
                 vat_percent: float, id: int = 0, name: Optional[str] = None,
                 rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.form = form
        self.thickness = thickness


class AeratedBlock(Material):
    TAG = "AeratedBlock"
    KIND = MaterialKind.HARD

    type = SpecField(BlockType)
    thickness = SpecField(float, "cm")
    length = SpecField(float, "cm")

    def __init__(self, type: BlockType, thickness: float, length: float, unit_price: float,
                 vat_percent: float, id: int = 0, name: Optional[str] = None,
                 rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.type = type
        self.thickness = thickness
        self.length = length


class Beam(Material):
    """Wooden beam, priced per running meter."""

    TAG = "Beam"
    KIND = MaterialKind.WOOD

    diameter = SpecField(float, "cm")
    length = SpecField(float, "m")
    insect_treated = SpecField(bool)

    def __init__(self, diameter: float, length: float, insect_treated: bool,
                 unit_price: float, vat_percent: float, id: int = 0,
                 name: Optional[str] = None, rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.diameter = diameter
        self.length = length
        self.insect_treated = insect_treated

    def gross_price(self) -> float:
        return super().gross_price() * self.length


class Plank(Material):
    """Sawn plank, priced per running meter."""

    TAG = "Plank"
    KIND = MaterialKind.WOOD

    size = SpecField(PlankSize, "cm")
    length = SpecField(float, "m")
    insect_treated = SpecField(bool)

    def __init__(self, size: PlankSize, length: float, insect_treated: bool,
                 unit_price: float, vat_percent: float, id: int = 0,
                 name: Optional[str] = None, rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.size = size
        self.length = length
        self.insect_treated = insect_treated

    def gross_price(self) -> float:
        return super().gross_price() * self.length


class ReadyMixConcrete(Material):
    TAG = "ReadyMixConcrete"
    KIND = MaterialKind.HARD

    cement_content = SpecField(float, "%")
    consistency = SpecField(Consistency)
    aggregate = SpecField(Aggregate)

    def __init__(self, cement_content: float, consistency: Consistency, aggregate: Aggregate,
                 unit_price: float, vat_percent: float, id: int = 0,
                 name: Optional[str] = None, rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.cement_content = cement_content
        self.consistency = consistency
        self.aggregate = aggregate


class CrushedStoneAggregate(Material):
    TAG = "CrushedStoneAggregate"
    KIND = MaterialKind.HARD

    grain_size = SpecField(float, "mm")
    decorative = SpecField(bool)
    density = SpecField(float, "kg/m3")

    def __init__(self, grain_size: float, decorative: bool, density: float,
                 unit_price: float, vat_percent: float, id: int = 0,
                 name: Optional[str] = None, rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.grain_size = grain_size
        self.decorative = decorative
        self.density = density


class MineralWool(Material):
    TAG = "MineralWool"
    KIND = MaterialKind.INSULATION

    thickness = SpecField(float, "cm")
    form = SpecField(WoolForm)

    def __init__(self, thickness: float, form: WoolForm, unit_price: float,
                 vat_percent: float, id: int = 0, name: Optional[str] = None,
                 rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.thickness = thickness
        self.form = form


class FoamBoard(Material):
    TAG = "FoamBoard"
    KIND = MaterialKind.INSULATION

    thickness = SpecField(float, "cm")
    step_resistant = SpecField(bool)
    board_size = SpecField(BoardSize, "cm")

    def __init__(self, thickness: float, step_resistant: bool, board_size: BoardSize,
                 unit_price: float, vat_percent: float, id: int = 0,
                 name: Optional[str] = None, rules: Optional[RuleBook] = None):
        super().__init__(unit_price, vat_percent, id=id, name=name, rules=rules)
        self.thickness = thickness
        self.step_resistant = step_resistant
        self.board_size = board_size
