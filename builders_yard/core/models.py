"""Core data models for BuildersYard."""
from __future__ import annotations

import enum
from dataclasses import dataclass, asdict
from typing import Any


class MaterialKind(enum.Enum):
    INSULATION = "Insulation"
    WOOD = "Wood"
    HARD = "Hard"


class UpsertState(enum.Enum):
    UNMATCHED = "unmatched"
    MATCHED = "matched"
    CREATED = "created"


@dataclass(frozen=True)
class AttributeDescriptor:
    """One editable attribute of a material, as shown by an editor."""
    name: str
    value: Any
    kind: Any
    editable: bool = True

    @property
    def kind_name(self) -> str:
        return getattr(self.kind, "__name__", str(self.kind))


@dataclass(frozen=True)
class Warehouse:
    id: int
    name: str


@dataclass(frozen=True)
class HoldingEntry:
    warehouse_id: int
    material_id: int
    quantity: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class UpsertResult:
    state: UpsertState
    material_id: int

    @property
    def created(self) -> bool:
        return self.state == UpsertState.CREATED
