"""SQLite storage for the material catalog and warehouse holdings."""
from __future__ import annotations

import sqlite3
from typing import Iterable, Optional

from builders_yard.core.errors import NotFoundError

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS materials (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    tag TEXT NOT NULL,
    kind TEXT NOT NULL,
    unit_price REAL NOT NULL,
    vat_percent REAL NOT NULL,
    specification TEXT NOT NULL DEFAULT '{}',
    UNIQUE (tag, specification)
);

CREATE TABLE IF NOT EXISTS warehouses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS warehouse_content (
    warehouse_id INTEGER NOT NULL REFERENCES warehouses(id),
    material_id INTEGER NOT NULL REFERENCES materials(id),
    quantity INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (warehouse_id, material_id)
);
"""


class Database:
    def __init__(self, db_path: str = "data/database.sqlite", check_same_thread: bool = True):
        self._db_path = db_path
        self._check_same_thread = check_same_thread
        self._conn: Optional[sqlite3.Connection] = None

    def initialize(self, seed_warehouses: Iterable[str] = ()) -> None:
        self._conn = sqlite3.connect(self._db_path, check_same_thread=self._check_same_thread)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()
        self._seed_warehouses(seed_warehouses)

    def _seed_warehouses(self, names: Iterable[str]) -> None:
        count = self.execute("SELECT COUNT(*) FROM warehouses").fetchone()[0]
        if count == 0:
            for name in names:
                self.execute("INSERT INTO warehouses (name) VALUES (?)", (name,))
            self._conn.commit()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        assert self._conn is not None, "Database not initialized"
        return self._conn.execute(sql, params)

    # --- Materials ---
    def insert_material(self, name: str, tag: str, kind: str, unit_price: float,
                        vat_percent: float, specification: str) -> None:
        self.execute(
            """INSERT INTO materials (name, tag, kind, unit_price, vat_percent, specification)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (name, tag, kind, unit_price, vat_percent, specification),
        )
        self._conn.commit()

    def find_material_by_specification(self, tag: str, specification: str) -> Optional[dict]:
        row = self.execute(
            "SELECT * FROM materials WHERE tag = ? AND specification = ?",
            (tag, specification),
        ).fetchone()
        return dict(row) if row else None

    def find_material(self, material_id: int) -> Optional[dict]:
        row = self.execute("SELECT * FROM materials WHERE id = ?", (material_id,)).fetchone()
        return dict(row) if row else None

    def get_material(self, material_id: int) -> dict:
        row = self.find_material(material_id)
        if row is None:
            raise NotFoundError("Material %s not found" % material_id)
        return row

    def list_materials(self, tag: str = "") -> list:
        if tag:
            rows = self.execute(
                "SELECT * FROM materials WHERE tag = ? ORDER BY id", (tag,)
            ).fetchall()
        else:
            rows = self.execute("SELECT * FROM materials ORDER BY id").fetchall()
        return [dict(r) for r in rows]

    def update_material(self, material_id: int, name: str, unit_price: float,
                        vat_percent: float, specification: str) -> None:
        cursor = self.execute(
            """UPDATE materials
            SET name = ?, unit_price = ?, vat_percent = ?, specification = ?
            WHERE id = ?""",
            (name, unit_price, vat_percent, specification, material_id),
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError("Material %s not found" % material_id)

    def delete_material(self, material_id: int) -> None:
        self.execute("DELETE FROM materials WHERE id = ?", (material_id,))
        self._conn.commit()

    # --- Warehouses ---
    def create_warehouse(self, name: str) -> int:
        cursor = self.execute("INSERT INTO warehouses (name) VALUES (?)", (name,))
        self._conn.commit()
        return cursor.lastrowid

    def get_warehouse(self, warehouse_id: int) -> dict:
        row = self.execute("SELECT * FROM warehouses WHERE id = ?", (warehouse_id,)).fetchone()
        if not row:
            raise NotFoundError("Warehouse %s not found" % warehouse_id)
        return dict(row)

    def list_warehouses(self) -> list:
        rows = self.execute("SELECT id, name FROM warehouses ORDER BY id").fetchall()
        return [dict(r) for r in rows]

    # --- Holdings ---
    def get_quantity(self, warehouse_id: int, material_id: int) -> Optional[int]:
        row = self.execute(
            "SELECT quantity FROM warehouse_content WHERE warehouse_id = ? AND material_id = ?",
            (warehouse_id, material_id),
        ).fetchone()
        return row[0] if row else None

    def add_quantity(self, warehouse_id: int, material_id: int, quantity: int) -> None:
        self.execute(
            """INSERT INTO warehouse_content (warehouse_id, material_id, quantity)
            VALUES (?, ?, ?)
            ON CONFLICT (warehouse_id, material_id)
            DO UPDATE SET quantity = quantity + excluded.quantity""",
            (warehouse_id, material_id, quantity),
        )
        self._conn.commit()

    def set_quantity(self, warehouse_id: int, material_id: int, quantity: int) -> None:
        self.execute(
            "UPDATE warehouse_content SET quantity = ? WHERE warehouse_id = ? AND material_id = ?",
            (quantity, warehouse_id, material_id),
        )
        self._conn.commit()

    def delete_holding(self, warehouse_id: int, material_id: int) -> None:
        self.execute(
            "DELETE FROM warehouse_content WHERE warehouse_id = ? AND material_id = ?",
            (warehouse_id, material_id),
        )
        self._conn.commit()

    def count_holdings(self, material_id: int) -> int:
        row = self.execute(
            "SELECT COUNT(*) FROM warehouse_content WHERE material_id = ?", (material_id,)
        ).fetchone()
        return row[0]

    def list_holdings(self, warehouse_id: int) -> list:
        rows = self.execute(
            """SELECT wc.quantity, m.id, m.name, m.tag, m.kind, m.unit_price,
                      m.vat_percent, m.specification
            FROM warehouse_content wc
            JOIN materials m ON m.id = wc.material_id
            WHERE wc.warehouse_id = ?
            ORDER BY m.id""",
            (warehouse_id,),
        ).fetchall()
        return [dict(r) for r in rows]
