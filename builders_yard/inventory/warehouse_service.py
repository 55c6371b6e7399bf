"""Warehouse operations built on the specification-keyed catalog.

A material is "the same" as a cataloged one when its tag and encoded
specification are byte-equal; price and VAT are mutable attributes of the
catalog row and never part of the key.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from builders_yard.core.database import Database
from builders_yard.core.errors import (
    InsertVerificationFailed, NonPositiveQuantityError, NotFoundError, ValidationError,
)
from builders_yard.core.logger import StructuredLogger
from builders_yard.core.models import HoldingEntry, MaterialKind, UpsertResult, UpsertState, Warehouse
from builders_yard.materials import codec
from builders_yard.materials.validators import DEFAULT_RULES, RuleBook
from builders_yard.materials.variants import Material

logger = logging.getLogger(__name__)


def _check_positive(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise NonPositiveQuantityError(quantity)


class WarehouseService:
    def __init__(self, database: Database, logger: Optional[StructuredLogger] = None,
                 rules: Optional[RuleBook] = None):
        self._db = database
        self._logger = logger
        self._rules = rules or DEFAULT_RULES

    @property
    def rules(self) -> RuleBook:
        return self._rules

    # --- Catalog access ---
    def get_all_materials(self) -> list:
        return [codec.decode_row(row, self._rules) for row in self._db.list_materials()]

    def get_material(self, material_id: int) -> Material:
        return codec.decode_row(self._db.get_material(material_id), self._rules)

    def find_material(self, material: Material) -> Optional[Material]:
        encoded = codec.encode(material)
        row = self._db.find_material_by_specification(encoded.tag, encoded.spec_text)
        return codec.decode_row(row, self._rules) if row else None

    def get_warehouses(self) -> list:
        return [Warehouse(id=r["id"], name=r["name"]) for r in self._db.list_warehouses()]

    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        row = self._db.get_warehouse(warehouse_id)
        return Warehouse(id=row["id"], name=row["name"])

    def get_warehouse_content(self, warehouse_id: int) -> list:
        """Return ``(material, quantity)`` pairs held in a warehouse."""
        self._db.get_warehouse(warehouse_id)
        return [(codec.decode_row(row, self._rules), row["quantity"])
                for row in self._db.list_holdings(warehouse_id)]

    # --- Upsert protocol ---
    def resolve(self, material: Material) -> UpsertResult:
        """Match ``material`` against the catalog by specification, inserting it if new."""
        encoded = codec.encode(material)
        row = self._db.find_material_by_specification(encoded.tag, encoded.spec_text)
        if row is not None:
            logger.debug("Matched %s %s to catalog id %s", encoded.tag, encoded.spec_text, row["id"])
            return UpsertResult(UpsertState.MATCHED, row["id"])

        self._db.insert_material(
            name=material.name, tag=encoded.tag, kind=material.kind.value,
            unit_price=encoded.unit_price, vat_percent=encoded.vat_percent,
            specification=encoded.spec_text,
        )
        row = self._db.find_material_by_specification(encoded.tag, encoded.spec_text)
        if row is None:
            raise InsertVerificationFailed(
                "Inserted %s %s but could not find it again" % (encoded.tag, encoded.spec_text))
        logger.debug("Created catalog id %s for %s %s", row["id"], encoded.tag, encoded.spec_text)
        return UpsertResult(UpsertState.CREATED, row["id"])

    def add_material(self, material: Material, warehouse_id: int, quantity: int) -> UpsertResult:
        """Catalog ``material`` if needed and add ``quantity`` of it to a warehouse."""
        _check_positive(quantity)
        self._db.get_warehouse(warehouse_id)
        try:
            result = self.resolve(material)
            self._db.add_quantity(warehouse_id, result.material_id, quantity)
        except Exception:
            self._log_failure("ADD", warehouse_id)
            raise
        action = "ADD_NEW" if result.created else "UPDATE_EXISTING"
        self._log_movement(action, warehouse_id, result.material_id, quantity, material.name)
        return result

    # --- Quantity changes ---
    def get_holding(self, warehouse_id: int, material_id: int) -> HoldingEntry:
        quantity = self._db.get_quantity(warehouse_id, material_id)
        if quantity is None:
            raise NotFoundError(
                "Material %s not found in warehouse %s" % (material_id, warehouse_id))
        return HoldingEntry(warehouse_id, material_id, quantity)

    def remove_material(self, warehouse_id: int, material_id: int, quantity: int) -> int:
        """Take ``quantity`` out of a warehouse; return what is left there."""
        _check_positive(quantity)
        holding = self.get_holding(warehouse_id, material_id)
        name = self._material_name(material_id)
        remaining = holding.quantity - quantity
        if remaining <= 0:
            self._drop_holding(warehouse_id, material_id)
            remaining = 0
        else:
            self._db.set_quantity(warehouse_id, material_id, remaining)
        self._log_movement("REMOVE", warehouse_id, material_id, quantity, name)
        return remaining

    def set_quantity(self, warehouse_id: int, material_id: int, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise ValidationError("quantity", "Quantity cannot be negative (got %r)" % (quantity,))
        self.get_holding(warehouse_id, material_id)
        name = self._material_name(material_id)
        if quantity == 0:
            self._drop_holding(warehouse_id, material_id)
        else:
            self._db.set_quantity(warehouse_id, material_id, quantity)
        self._log_movement("SET_QUANTITY", warehouse_id, material_id, quantity, name)

    def _drop_holding(self, warehouse_id: int, material_id: int) -> None:
        self._db.delete_holding(warehouse_id, material_id)
        if self._db.count_holdings(material_id) == 0:
            self._db.delete_material(material_id)
            logger.debug("Deleted catalog id %s with its last holding", material_id)

    # --- Catalog edits ---
    def update_material(self, material: Material) -> None:
        """Persist the current name, price, VAT and specification of a cataloged material."""
        if material.id <= 0:
            raise ValidationError("id", "Only cataloged materials can be updated")
        stored = self._db.get_material(material.id)
        if stored["tag"] != material.TAG:
            raise ValidationError("tag", "Material %s is a %s and cannot become a %s"
                                  % (material.id, stored["tag"], material.TAG))
        encoded = codec.encode(material)
        clash = self._db.find_material_by_specification(encoded.tag, encoded.spec_text)
        if clash is not None and clash["id"] != material.id:
            raise ValidationError("specification", "Material %s already has specification %s"
                                  % (clash["id"], encoded.spec_text))
        self._db.update_material(material.id, material.name, encoded.unit_price,
                                 encoded.vat_percent, encoded.spec_text)

    # --- Queries ---
    def total_value(self, warehouse_id: int) -> float:
        try:
            return sum(m.gross_price() * qty for m, qty in self.get_warehouse_content(warehouse_id))
        except Exception:
            self._log_failure("VALUE", warehouse_id)
            raise

    @staticmethod
    def filter_materials(materials: Iterable[Material], name: Optional[str] = None,
                         min_price: Optional[float] = None, max_price: Optional[float] = None,
                         kind: Optional[MaterialKind] = None) -> list:
        result = list(materials)
        if name:
            needle = name.lower()
            result = [m for m in result if needle in m.name.lower()]
        if min_price is not None:
            result = [m for m in result if m.unit_price >= min_price]
        if max_price is not None:
            result = [m for m in result if m.unit_price <= max_price]
        if kind is not None:
            result = [m for m in result if m.kind == kind]
        return result

    # --- Logging ---
    def _material_name(self, material_id: int) -> str:
        row = self._db.find_material(material_id)
        return row["name"] if row else "Unknown"

    def _log_movement(self, action: str, warehouse_id: int, material_id: int,
                      quantity: int, material_name: str) -> None:
        if self._logger:
            self._logger.log_movement(action, warehouse_id, material_id, quantity, material_name)

    def _log_failure(self, action: str, warehouse_id: int) -> None:
        if self._logger:
            self._logger.app.exception("Warehouse=%s, Action=%s failed", warehouse_id, action)
