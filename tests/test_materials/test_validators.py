from __future__ import annotations
import pytest
from builders_yard.core.errors import RangeError, ValidationError
from builders_yard.materials.validators import (
    Bounds, BrickRules, MaterialRules, PlankRules, RuleBook, as_number,
)


class TestBounds:
    def test_inclusive_limits(self):
        b = Bounds(10, 40, "cm")
        assert b.check("thickness", 10) == 10
        assert b.check("thickness", 40) == 40

    def test_below_minimum(self):
        with pytest.raises(RangeError) as exc:
            Bounds(10, 40, "cm").check("thickness", 9.5)
        assert exc.value.field == "thickness"
        assert exc.value.bound == "min"
        assert exc.value.limit == 10
        assert "thickness" in str(exc.value)
        assert "10" in str(exc.value)

    def test_above_maximum(self):
        with pytest.raises(RangeError) as exc:
            Bounds(10, 40).check("thickness", 40.5)
        assert exc.value.bound == "max"
        assert exc.value.limit == 40

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValueError):
            Bounds(5, 1)


class TestAsNumber:
    def test_int_becomes_float(self):
        assert as_number("x", 15) == 15.0
        assert isinstance(as_number("x", 15), float)

    @pytest.mark.parametrize("value", [True, "15", None, float("nan"), float("inf")])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValidationError):
            as_number("x", value)


class TestRuleSet:
    def test_validate_returns_value_unchanged(self):
        rules = BrickRules()
        assert rules.validate("thickness", 25) == 25

    def test_validate_out_of_range(self):
        with pytest.raises(RangeError):
            BrickRules().validate("thickness", 41)

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            BrickRules().validate("length", 5)

    def test_bounded_fields(self):
        assert PlankRules().bounded_fields() == ("length",)

    def test_rule_sets_are_immutable(self):
        rules = BrickRules()
        with pytest.raises(Exception):
            rules.thickness = Bounds(0, 100)

    def test_from_config_overrides_and_keeps_unit(self):
        rules = BrickRules.from_config({"thickness": [5, 50]})
        assert rules.thickness == Bounds(5.0, 50.0, "cm")

    def test_from_config_unknown_field(self):
        with pytest.raises(ValueError):
            BrickRules.from_config({"diameter": [1, 2]})


class TestMaterialRules:
    def test_id(self):
        rules = MaterialRules()
        assert rules.validate("id", 0) == 0
        assert rules.validate("id", 12) == 12
        with pytest.raises(RangeError):
            rules.validate("id", -1)
        with pytest.raises(ValidationError):
            rules.validate("id", 1.5)

    def test_name_is_trimmed(self):
        assert MaterialRules().validate("name", "  Red brick ") == "Red brick"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name(self, name):
        with pytest.raises(ValidationError):
            MaterialRules().validate("name", name)

    def test_unit_price_floor(self):
        rules = MaterialRules()
        assert rules.validate("unit_price", 0) == 0
        with pytest.raises(RangeError):
            rules.validate("unit_price", -0.01)

    def test_custom_unit_price_floor(self):
        rules = MaterialRules(min_unit_price=100)
        with pytest.raises(RangeError):
            rules.validate("unit_price", 99.99)

    def test_vat_bounds(self):
        rules = MaterialRules()
        assert rules.validate("vat_percent", 0) == 0
        assert rules.validate("vat_percent", 50) == 50
        with pytest.raises(RangeError):
            rules.validate("vat_percent", -0.01)
        with pytest.raises(RangeError):
            rules.validate("vat_percent", 50.01)


class TestRuleBook:
    def test_for_tag(self):
        book = RuleBook()
        assert isinstance(book.for_tag("Brick"), BrickRules)
        assert book.for_tag("CrushedStoneAggregate").density == Bounds(1200, 2400, "kg/m3")

    def test_from_config(self):
        book = RuleBook.from_config({
            "material": {"max_vat_percent": 30},
            "Beam": {"length": [1, 12]},
        })
        assert book.material.max_vat_percent == 30
        assert book.beam.length.maximum == 12
        assert book.beam.diameter.maximum == 25
        assert book.brick == BrickRules()

    def test_from_empty_config_equals_defaults(self):
        assert RuleBook.from_config(None) == RuleBook()
