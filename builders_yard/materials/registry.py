"""Static table from discriminant tag to material variant."""
from __future__ import annotations

from typing import Optional

from builders_yard.core.errors import UnknownTagError
from builders_yard.materials.validators import RuleBook
from builders_yard.materials.variants import (
    AeratedBlock, Beam, Brick, CrushedStoneAggregate, FoamBoard, Material,
    MineralWool, Plank, ReadyMixConcrete,
)

VARIANTS = {
    "Brick": Brick,
    "AeratedBlock": AeratedBlock,
    "Beam": Beam,
    "Plank": Plank,
    "ReadyMixConcrete": ReadyMixConcrete,
    "CrushedStoneAggregate": CrushedStoneAggregate,
    "MineralWool": MineralWool,
    "FoamBoard": FoamBoard,
}

TAGS = tuple(VARIANTS)


def variant_class(tag: str) -> type:
    if not isinstance(tag, str) or tag not in VARIANTS:
        raise UnknownTagError(tag)
    return VARIANTS[tag]


def construct(tag: str, id: int, name: Optional[str], unit_price: float,
              vat_percent: float, spec: dict, rules: Optional[RuleBook] = None) -> Material:
    """Build the variant named by ``tag`` from its typed specification map."""
    cls = variant_class(tag)
    return cls.from_specification(spec, unit_price=unit_price, vat_percent=vat_percent,
                                  id=id, name=name, rules=rules)


def default_for(tag: str, rules: Optional[RuleBook] = None) -> Material:
    return variant_class(tag).default(rules)
