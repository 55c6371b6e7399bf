"""Core engine - wires configuration, logging, storage and the warehouse service."""
from __future__ import annotations

import os
from typing import Optional

from builders_yard.core.config import AppConfig
from builders_yard.core.database import Database
from builders_yard.core.logger import StructuredLogger
from builders_yard.inventory.warehouse_service import WarehouseService
from builders_yard.materials.validators import RuleBook


class Engine:
    def __init__(self, config_path: Optional[str] = None, data_dir: str = "data",
                 db_check_same_thread: bool = True):
        self._config_path = config_path
        self._data_dir = data_dir
        self._db_check_same_thread = db_check_same_thread
        self.config: Optional[AppConfig] = None
        self.database: Optional[Database] = None
        self.logger: Optional[StructuredLogger] = None
        self.rules: Optional[RuleBook] = None
        self.warehouse: Optional[WarehouseService] = None

    def initialize(self) -> None:
        os.makedirs(self._data_dir, exist_ok=True)

        self.config = AppConfig(self._config_path)
        self.logger = StructuredLogger(
            log_dir=os.path.join(self._data_dir, "logs"),
            level=self.config.get("logging.level", "INFO"),
        )
        self.rules = self.config.rule_book()
        self.database = Database(
            os.path.join(self._data_dir, "database.sqlite"),
            check_same_thread=self._db_check_same_thread,
        )
        self.database.initialize(self.config.seed_warehouses)
        self.warehouse = WarehouseService(self.database, logger=self.logger, rules=self.rules)
        self.logger.app.info("Engine initialized")

    @property
    def data_dir(self) -> str:
        return self._data_dir

    def shutdown(self) -> None:
        if self.database:
            self.database.close()
        if self.logger:
            self.logger.app.info("Engine shutdown")
            self.logger.close()
