"""JSON inventory report exporter."""
from __future__ import annotations

import json
import os
from datetime import datetime

from builders_yard.core.models import Warehouse
from builders_yard.exchange.report_data import inventory_rows, total_value


class JsonExporter:
    def export(self, warehouse: Warehouse, content: list, output_dir: str = ".") -> str:
        rows = inventory_rows(content)
        report = {
            "report_format": "json",
            "generated_at": datetime.now().isoformat(),
            "warehouse": {"id": warehouse.id, "name": warehouse.name},
            "materials": rows,
            "total_value": total_value(rows),
        }

        filename = "inventory_%s_%s.json" % (warehouse.id, datetime.now().strftime("%Y%m%d_%H%M%S"))
        path = os.path.join(output_dir, filename)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False, default=str)
        return path
