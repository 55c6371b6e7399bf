from __future__ import annotations
import pytest
from builders_yard.core.errors import MissingFieldError, UnknownTagError
from builders_yard.materials import registry
from builders_yard.materials.variants import Beam, Brick, BrickForm, Material


class TestRegistry:
    def test_eight_variants(self):
        assert registry.TAGS == (
            "Brick", "AeratedBlock", "Beam", "Plank", "ReadyMixConcrete",
            "CrushedStoneAggregate", "MineralWool", "FoamBoard",
        )

    @pytest.mark.parametrize("tag", registry.TAGS)
    def test_tag_matches_class(self, tag):
        cls = registry.variant_class(tag)
        assert issubclass(cls, Material)
        assert cls.TAG == tag

    @pytest.mark.parametrize("tag", registry.TAGS)
    def test_default_for(self, tag):
        m = registry.default_for(tag)
        assert m.tag == tag
        assert m.id == 0

    def test_unknown_tag(self):
        with pytest.raises(UnknownTagError) as exc:
            registry.variant_class("Styrofoam")
        assert exc.value.tag == "Styrofoam"
        assert "Styrofoam" in str(exc.value)

    def test_unknown_tag_is_key_error(self):
        with pytest.raises(KeyError):
            registry.variant_class("Concrete")

    def test_construct(self):
        brick = registry.construct("Brick", 2, "Red brick", 1000, 27,
                                   {"form": BrickForm.SOLID, "thickness": 15.0})
        assert isinstance(brick, Brick)
        assert brick.id == 2
        assert brick.name == "Red brick"

    def test_construct_default_name(self):
        beam = registry.construct("Beam", 0, None, 1000, 27,
                                  {"diameter": 12, "length": 4, "insect_treated": False})
        assert isinstance(beam, Beam)
        assert beam.name == "Beam"

    def test_construct_missing_attribute(self):
        with pytest.raises(MissingFieldError) as exc:
            registry.construct("Beam", 0, None, 1000, 27, {"diameter": 12, "length": 4})
        assert exc.value.key == "insect_treated"
