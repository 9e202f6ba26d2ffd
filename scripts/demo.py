#!/usr/bin/env python3
"""
Seed a small inventory and print the warehouse reports.

Registers three warehouses, runs four imports, two imports that are
rejected (capacity, category), two exports and one restock, then prints
the transaction log, the product listing of warehouse 1 and the aggregate
reports.

Usage:
    python3 scripts/demo.py [--config PATH] [--db-url URL] [--reset]
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

WAREHOUSES = (
    ("Warehouse A", "Location A", "Plants, Clothing, Meat", 125),
    ("Warehouse B", "Location B", "Books, Toys, Furniture", 300),
    ("Warehouse C", "Location C", "Electronics, Tools, Appliances", 250),
)

# (warehouse index, category, quantity)
IMPORTS = (
    (0, "Clothing", 50),
    (0, "Meat", 40),
    (1, "Toys", 300),
    (2, "Tools", 100),
)

REJECTED_IMPORTS = (
    (0, "Plants", 200),  # capacity
    (2, "Books", 10),  # category
)


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Seed demo warehouses and print reports")
    p.add_argument("--config", default=None, help="YAML settings file (default: packaged default)")
    p.add_argument("--db-url", default=None, help="Database URL overriding the settings file")
    p.add_argument("--reset", action="store_true", help="Drop all tables before seeding")
    p.add_argument("--verbose", action="store_true", help="Print structured logs to stderr")
    return p.parse_args()


def _print_log(service) -> None:
    print("\n  Transaction log")
    print("  " + "-" * 66)
    for entry in service.query_log():
        print(
            f"  {entry.id:>4}  {entry.type.value:<6}  {entry.category:<12} "
            f"wh={entry.warehouse_id:<3} qty={entry.quantity_changed:<5} "
            f"{entry.timestamp.isoformat()}"
        )


def main() -> int:
    args = _parse_args()
    if not args.verbose:
        logging.disable(logging.CRITICAL)

    from inventory_config import ConfigError, get_active_config
    from inventory_config.bridges import build_inventory_service, init_kernel
    from inventory_kernel.db.engine import (
        drop_tables,
        init_engine_from_url,
        reset_engine,
        session_scope,
    )
    from inventory_kernel.exceptions import ConstraintViolationError
    from inventory_kernel.selectors.report_selector import ReportSelector

    try:
        settings = get_active_config(args.config)
    except ConfigError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    if args.db_url:
        settings = dataclasses.replace(
            settings, database=dataclasses.replace(settings.database, url=args.db_url)
        )

    if args.reset:
        init_engine_from_url(settings.database.url)
        drop_tables()
        reset_engine()
    init_kernel(settings)
    service = build_inventory_service(settings, actor="demo")

    warehouses = [service.register_warehouse(*definition) for definition in WAREHOUSES]
    print("\n  Warehouses")
    for wh in warehouses:
        print(f"  {wh.id:>4}  {wh.name:<12} {wh.location:<12} cap={wh.capacity:<4} [{wh.allowed_categories}]")

    imported = []
    for index, category, quantity in IMPORTS:
        result = service.import_product(warehouses[index].id, category, quantity)
        imported.append(result.product)
        print(f"  imported {quantity:>4} {category:<10} -> product {result.product_id}")

    _print_log(service)

    for index, category, quantity in REJECTED_IMPORTS:
        try:
            service.import_product(warehouses[index].id, category, quantity)
        except ConstraintViolationError as exc:
            print(f"  rejected [{exc.code}] {exc}")

    # Export Meat and Toys
    for product in imported[1:3]:
        service.export_product(product.id)
        print(f"  exported product {product.id} ({product.category})")

    _print_log(service)

    service.import_product(warehouses[0].id, "Plants", 15)

    with session_scope() as session:
        reports = ReportSelector(session)
        print(f"\n  Products in {warehouses[0].name}")
        for line in reports.product_listing(warehouses[0].id).splitlines():
            print(f"  {line}")

        print("\n  Capacity report")
        for row in reports.capacity_report():
            print(
                f"  {row.warehouse_id:>4}  {row.name:<12} products={row.product_count:<3} "
                f"capacity={row.total_capacity:<4} free={row.free_capacity}"
            )

        busiest = reports.busiest_warehouse()
        if busiest is not None:
            print(
                f"\n  Busiest warehouse: {busiest.warehouse_id} "
                f"({busiest.transaction_count} transactions)"
            )

        print("\n  Largest product per warehouse")
        for row in reports.peak_product_per_warehouse():
            print(
                f"  {row.warehouse_name:<12} {row.category:<10} qty={row.quantity:<4} "
                f"filled={row.total_quantity}"
            )

    return 0


if __name__ == "__main__":
    sys.exit(main())
