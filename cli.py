"""BuildersYard command-line interface."""
from __future__ import annotations

import argparse
import os
import sys


def _build_parser():
    parser = argparse.ArgumentParser(
        prog="builders-yard",
        description="Construction material catalog and warehouse stock tool",
    )
    parser.add_argument("--version", action="version", version="BuildersYard v0.1.0")
    parser.add_argument("--data-dir", default="data", help="Directory holding the database and logs")
    parser.add_argument("--config", help="YAML configuration file")

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("warehouses", help="List warehouses")

    mats = sub.add_parser("materials", help="List cataloged materials")
    mats.add_argument("--name", help="Case-insensitive name filter")
    mats.add_argument("--min-price", type=float)
    mats.add_argument("--max-price", type=float)
    mats.add_argument("--kind", choices=["Insulation", "Wood", "Hard"])

    content = sub.add_parser("content", help="Show the content and value of a warehouse")
    content.add_argument("--warehouse", type=int, required=True)

    add = sub.add_parser("add", help="Add material to a warehouse (matched by specification)")
    add.add_argument("tag", help="Material tag, e.g. Brick or Beam")
    add.add_argument("attributes", nargs="*", metavar="NAME=VALUE")
    add.add_argument("--warehouse", type=int, required=True)
    add.add_argument("--quantity", type=int, required=True)
    add.add_argument("--price", type=float, required=True, help="Net unit price")
    add.add_argument("--vat", type=float, required=True, help="VAT percent")
    add.add_argument("--name", help="Display name (defaults to the tag)")

    remove = sub.add_parser("remove", help="Take material out of a warehouse")
    remove.add_argument("--warehouse", type=int, required=True)
    remove.add_argument("--material", type=int, required=True)
    remove.add_argument("--quantity", type=int, required=True)

    setq = sub.add_parser("set-quantity", help="Set the quantity held in a warehouse")
    setq.add_argument("--warehouse", type=int, required=True)
    setq.add_argument("--material", type=int, required=True)
    setq.add_argument("--quantity", type=int, required=True)

    exp = sub.add_parser("export-csv", help="Export a cataloged material to CSV")
    exp.add_argument("--material", type=int, required=True)
    exp.add_argument("--output", required=True)

    imp = sub.add_parser("import-csv", help="Import a material from CSV into a warehouse")
    imp.add_argument("path")
    imp.add_argument("--warehouse", type=int, default=1)
    imp.add_argument("--quantity", type=int, default=1)

    rep = sub.add_parser("report", help="Write an inventory report for a warehouse")
    rep.add_argument("--warehouse", type=int, required=True)
    rep.add_argument("--output", help="Output directory for reports")
    rep.add_argument("--format", choices=["json", "excel", "all"], default="json")

    return parser


def _parse_attributes(cls, pairs):
    from builders_yard.core.errors import ValidationError

    spec = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValidationError(pair, "Attributes must be given as NAME=VALUE, got %r" % pair)
        try:
            field = cls.spec_field(key.strip())
        except KeyError:
            raise ValidationError(key, "%s has no attribute '%s' (expected: %s)"
                                  % (cls.TAG, key, ", ".join(cls.spec_field_names())))
        spec[field.name] = field.parse_text(value)
    return spec


def _print_materials(materials):
    print("  %-4s %-22s %-20s %-11s %10s %6s  %s" % (
        "ID", "Tag", "Name", "Kind", "Net", "VAT%", "Specification"))
    for m in materials:
        spec = ", ".join("%s=%s" % kv for kv in m.rendered_specification().items())
        print("  %-4s %-22s %-20s %-11s %10.2f %6.1f  %s" % (
            m.id, m.TAG, m.name, m.kind.value, m.unit_price, m.vat_percent, spec))


def _do_warehouses(engine, args):
    for w in engine.warehouse.get_warehouses():
        print("  %-4s %s" % (w.id, w.name))
    return 0


def _do_materials(engine, args):
    from builders_yard.core.models import MaterialKind

    kind = MaterialKind(args.kind) if args.kind else None
    materials = engine.warehouse.filter_materials(
        engine.warehouse.get_all_materials(), name=args.name,
        min_price=args.min_price, max_price=args.max_price, kind=kind,
    )
    _print_materials(materials)
    print("  Materials: %d" % len(materials))
    return 0


def _do_content(engine, args):
    warehouse = engine.warehouse.get_warehouse(args.warehouse)
    content = engine.warehouse.get_warehouse_content(args.warehouse)
    print("=" * 60)
    print("  %s (id %s)" % (warehouse.name, warehouse.id))
    print("=" * 60)
    for material, qty in content:
        print("  %-4s %-22s qty %-6s gross %10.2f" % (
            material.id, material.name, qty, material.gross_price()))
    if not content:
        print("  Empty.")
    print("  Total value: %.2f" % engine.warehouse.total_value(args.warehouse))
    return 0


def _do_add(engine, args):
    from builders_yard.materials import registry

    cls = registry.variant_class(args.tag)
    spec = _parse_attributes(cls, args.attributes)
    material = cls.from_specification(spec, unit_price=args.price, vat_percent=args.vat,
                                      name=args.name, rules=engine.rules)
    result = engine.warehouse.add_material(material, args.warehouse, args.quantity)
    print("  %s material %s, added %d to warehouse %s" % (
        result.state.value.capitalize(), result.material_id, args.quantity, args.warehouse))
    return 0


def _do_remove(engine, args):
    remaining = engine.warehouse.remove_material(args.warehouse, args.material, args.quantity)
    print("  Removed %d of material %s, %d left" % (args.quantity, args.material, remaining))
    return 0


def _do_set_quantity(engine, args):
    engine.warehouse.set_quantity(args.warehouse, args.material, args.quantity)
    print("  Material %s quantity set to %d" % (args.material, args.quantity))
    return 0


def _do_export_csv(engine, args):
    from builders_yard.exchange.csv_exchange import export_csv

    material = engine.warehouse.get_material(args.material)
    path = export_csv(material, args.output)
    print("  CSV export: %s" % path)
    return 0


def _do_import_csv(engine, args):
    from builders_yard.exchange.csv_exchange import import_csv

    material = import_csv(args.path, rules=engine.rules)
    result = engine.warehouse.add_material(material, args.warehouse, args.quantity)
    print("  Imported %s as material %s (%s)" % (
        material.TAG, result.material_id, result.state.value))
    return 0


def _do_report(engine, args):
    from builders_yard.exchange.json_exporter import JsonExporter
    from builders_yard.exchange.excel_generator import ExcelGenerator

    warehouse = engine.warehouse.get_warehouse(args.warehouse)
    content = engine.warehouse.get_warehouse_content(args.warehouse)
    output = args.output or os.path.join(engine.data_dir, engine.config.get("reports.dir", "reports"))
    os.makedirs(output, exist_ok=True)
    if args.format in ("json", "all"):
        print("  JSON report: %s" % JsonExporter().export(warehouse, content, output))
    if args.format in ("excel", "all"):
        print("  Excel report: %s" % ExcelGenerator().export(warehouse, content, output))
    return 0


_COMMANDS = {
    "warehouses": _do_warehouses,
    "materials": _do_materials,
    "content": _do_content,
    "add": _do_add,
    "remove": _do_remove,
    "set-quantity": _do_set_quantity,
    "export-csv": _do_export_csv,
    "import-csv": _do_import_csv,
    "report": _do_report,
}


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command not in _COMMANDS:
        parser.print_help()
        return 0

    from builders_yard.core.engine import Engine
    from builders_yard.core.errors import BuildersYardError

    engine = Engine(config_path=args.config, data_dir=args.data_dir)
    try:
        engine.initialize()
        return _COMMANDS[args.command](engine, args)
    except BuildersYardError as exc:
        print("Error: %s" % exc, file=sys.stderr)
        return 1
    finally:
        engine.shutdown()


if __name__ == "__main__":
    sys.exit(main())
