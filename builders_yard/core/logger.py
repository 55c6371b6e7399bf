"""Application log plus a JSON-lines stock movement journal."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

MOVEMENT_ACTIONS = ("ADD_NEW", "UPDATE_EXISTING", "REMOVE", "SET_QUANTITY")


class StructuredLogger:
    def __init__(self, log_dir: str = "data/logs", level: str = "INFO"):
        self._log_dir = log_dir
        os.makedirs(log_dir, exist_ok=True)
        self._setup_app_logger(level)

    def _setup_app_logger(self, level: str) -> None:
        self._app_logger = logging.getLogger("builders_yard." + str(id(self)))
        self._app_logger.propagate = False
        if not self._app_logger.handlers:
            handler = RotatingFileHandler(
                os.path.join(self._log_dir, "app.log"),
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
            self._app_logger.addHandler(handler)
        self._app_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    @property
    def app(self) -> logging.Logger:
        return self._app_logger

    @property
    def movements_path(self) -> str:
        return os.path.join(self._log_dir, "movements.jsonl")

    def _write_jsonl(self, filename: str, record: dict) -> None:
        filepath = os.path.join(self._log_dir, filename)
        with open(filepath, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")

    def log_movement(
        self,
        action: str,
        warehouse_id: int,
        material_id: int,
        quantity: int,
        material_name: Optional[str] = None,
    ) -> None:
        if action not in MOVEMENT_ACTIONS:
            raise ValueError("Unknown movement action '%s'" % action)
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "action": action,
            "warehouse_id": warehouse_id,
            "material_id": material_id,
            "material_name": material_name or "Unknown",
            "quantity": quantity,
        }
        self._write_jsonl("movements.jsonl", record)
        self._app_logger.info(
            "Warehouse=%s, Action=%s, Material=%s, Quantity=%s",
            warehouse_id, action, record["material_name"], quantity,
        )

    def read_movements(self) -> list:
        if not os.path.exists(self.movements_path):
            return []
        with open(self.movements_path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]

    def close(self) -> None:
        for handler in list(self._app_logger.handlers):
            handler.close()
            self._app_logger.removeHandler(handler)
