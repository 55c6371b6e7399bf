"""Global configuration manager using YAML."""
from __future__ import annotations

import copy
import os
from typing import Any, Optional

import yaml

from builders_yard.core.errors import ConfigError
from builders_yard.materials.validators import RuleBook

DEFAULT_CONFIG = {
    "app": {"name": "BuildersYard", "version": "0.1.0"},
    "database": {
        "seed_warehouses": ["Warehouse 1", "Warehouse 2", "Warehouse 3"],
    },
    "logging": {"level": "INFO"},
    "reports": {"dir": "reports"},
    # Inclusive [min, max] pairs; units follow the attribute (cm, m, mm, %, kg/m3).
    "validation": {
        "material": {"min_unit_price": 0, "min_vat_percent": 0, "max_vat_percent": 50},
        "Brick": {"thickness": [10, 40]},
        "AeratedBlock": {"thickness": [10, 30], "length": [40, 110]},
        "Beam": {"diameter": [10, 25], "length": [2, 8]},
        "Plank": {"length": [1, 6]},
        "ReadyMixConcrete": {"cement_content": [10, 32]},
        "CrushedStoneAggregate": {"grain_size": [5, 40], "density": [1200, 2400]},
        "MineralWool": {"thickness": [5, 20]},
        "FoamBoard": {"thickness": [5, 20]},
    },
}


class AppConfig:
    def __init__(self, config_path: Optional[str] = None):
        self._data: dict = {}
        self._deep_merge(self._data, copy.deepcopy(DEFAULT_CONFIG))
        if config_path and os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as f:
                file_data = yaml.safe_load(f) or {}
            if not isinstance(file_data, dict):
                raise ConfigError("Config file %s must hold a mapping" % config_path)
            self._deep_merge(self._data, file_data)

    def _deep_merge(self, base: dict, override: dict) -> None:
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, dotted_key: str, default: Any = None) -> Any:
        keys = dotted_key.split(".")
        node = self._data
        for k in keys:
            if isinstance(node, dict) and k in node:
                node = node[k]
            else:
                return default
        return node

    def set(self, dotted_key: str, value: Any) -> None:
        keys = dotted_key.split(".")
        node = self._data
        for k in keys[:-1]:
            if k not in node or not isinstance(node[k], dict):
                node[k] = {}
            node = node[k]
        node[keys[-1]] = value

    @property
    def seed_warehouses(self) -> list:
        return list(self.get("database.seed_warehouses") or [])

    def rule_book(self) -> RuleBook:
        """Build the validation rules from the ``validation`` section."""
        try:
            return RuleBook.from_config(self.get("validation"))
        except (AttributeError, TypeError, ValueError) as exc:
            raise ConfigError("Invalid validation section: %s" % exc) from exc

    @property
    def data(self) -> dict:
        return self._data
