"""Excel inventory report generator using openpyxl."""
from __future__ import annotations

import os
from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side

from builders_yard.core.models import Warehouse
from builders_yard.exchange.report_data import inventory_rows, total_value


_HEADER_FONT = Font(bold=True, size=11)
_TITLE_FONT = Font(bold=True, size=14)
_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT_WHITE = Font(bold=True, size=11, color="FFFFFF")
_THIN_BORDER = Border(
    left=Side(style="thin"), right=Side(style="thin"),
    top=Side(style="thin"), bottom=Side(style="thin"),
)

_CONTENT_COLUMNS = [
    ("ID", "id", 8), ("Tag", "tag", 22), ("Name", "name", 24), ("Kind", "kind", 12),
    ("Net Price", "unit_price", 12), ("VAT %", "vat_percent", 8),
    ("Gross Price", "gross_price", 13), ("Quantity", "quantity", 10),
    ("Line Total", "line_total", 14), ("Specification", "specification", 60),
]


class ExcelGenerator:
    def export(self, warehouse: Warehouse, content: list, output_dir: str = ".") -> str:
        rows = inventory_rows(content)
        wb = Workbook()

        self._write_summary_sheet(wb.active, warehouse, rows)
        self._write_content_sheet(wb.create_sheet("Content"), rows)
        self._write_kinds_sheet(wb.create_sheet("By Kind"), rows)

        filename = "inventory_%s_%s.xlsx" % (warehouse.id, datetime.now().strftime("%Y%m%d_%H%M%S"))
        path = os.path.join(output_dir, filename)
        wb.save(path)
        return path

    def _write_summary_sheet(self, ws, warehouse, rows):
        ws.title = "Summary"
        ws["A1"] = "Warehouse Inventory Report"
        ws["A1"].font = _TITLE_FONT
        ws.merge_cells("A1:D1")

        ws["A3"] = "Warehouse"
        ws["B3"] = warehouse.name
        ws["A4"] = "Warehouse ID"
        ws["B4"] = warehouse.id
        ws["A5"] = "Generated"
        ws["B5"] = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        ws["A6"] = "Materials"
        ws["B6"] = len(rows)
        ws["A7"] = "Total Value (gross)"
        ws["B7"] = total_value(rows)
        for ref in ("A3", "A4", "A5", "A6", "A7"):
            ws[ref].font = _HEADER_FONT

        ws.column_dimensions["A"].width = 25
        ws.column_dimensions["B"].width = 30

    def _write_content_sheet(self, ws, rows):
        for col, (title, _, width) in enumerate(_CONTENT_COLUMNS, 1):
            cell = ws.cell(row=1, column=col, value=title)
            cell.font = _HEADER_FONT_WHITE
            cell.fill = _HEADER_FILL
            cell.alignment = Alignment(horizontal="center")
            ws.column_dimensions[cell.column_letter].width = width

        for r, data in enumerate(rows, 2):
            for col, (_, key, _) in enumerate(_CONTENT_COLUMNS, 1):
                ws.cell(row=r, column=col, value=data[key]).border = _THIN_BORDER

    def _write_kinds_sheet(self, ws, rows):
        ws["A1"] = "Value by Material Kind"
        ws["A1"].font = _TITLE_FONT

        totals: dict = {}
        for data in rows:
            qty, value = totals.get(data["kind"], (0, 0.0))
            totals[data["kind"]] = (qty + data["quantity"], value + data["line_total"])

        ws.cell(row=3, column=1, value="Kind").font = _HEADER_FONT
        ws.cell(row=3, column=2, value="Quantity").font = _HEADER_FONT
        ws.cell(row=3, column=3, value="Value").font = _HEADER_FONT
        row = 4
        for kind, (qty, value) in sorted(totals.items()):
            ws.cell(row=row, column=1, value=kind)
            ws.cell(row=row, column=2, value=qty)
            ws.cell(row=row, column=3, value=round(value, 2))
            row += 1

        ws.column_dimensions["A"].width = 20
        ws.column_dimensions["B"].width = 12
        ws.column_dimensions["C"].width = 15
