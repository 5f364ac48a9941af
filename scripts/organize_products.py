#!/usr/bin/env python3
"""
Organize products in the local catalog database.
Classifies products into product types and tags, edits stock levels, and
reports on the catalog. Every write command is a dry-run preview unless
--apply is given.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd
from pydantic import ValidationError

# Add src/ to path when run from a checkout
PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from catalog_organizer.core.logging_setup import setup_logging
from catalog_organizer.core.models import ApplyReport, PreviewItem, Product
from catalog_organizer.core.organizer import CatalogOrganizer
from catalog_organizer.core.reporting import (
    describe_change,
    find_low_stock,
    preview_to_dataframe,
    summarize_catalog,
)
from catalog_organizer.core.settings_manager import settings
from catalog_organizer.core.store.sqlite_store import SQLiteProductStore


def print_preview(items: List[PreviewItem], noun: str = "products") -> List[PreviewItem]:
    """Print the changed items and return them."""
    changed = [item for item in items if item.has_changes]
    if not changed:
        print(f"No {noun} need updating.")
        return changed

    print(f"\nFound {len(changed)} {noun} to update:\n")
    for item in changed:
        for line in describe_change(item):
            print(line)
    return changed


def print_report(report: ApplyReport):
    for outcome in report.failures:
        print(f"❌ {outcome.entity_id}: {outcome.error}")
    print(f"\nDone! Updated {report.success_count} products, {report.error_count} errors.")


def cmd_classify(organizer: CatalogOrganizer, args) -> int:
    result = organizer.classify(args.title, args.tag or [])
    print(f"🏷️ {args.title}")
    print(f"  Product Type: {result.product_type}")
    print(f"  Tags: [{', '.join(sorted(result.tags))}]")
    return 0


def cmd_organize(organizer: CatalogOrganizer, args) -> int:
    print("Fetching products...")
    items = organizer.generate_preview(args.ids or None)
    print(f"Found {len(items)} products")

    changed = print_preview(items)

    if args.export:
        preview_to_dataframe(items).to_csv(args.export, index=False)
        print(f"📁 Preview written to {args.export}")

    if not changed or not args.apply:
        if changed:
            print("\nDry run: re-run with --apply to write these changes.")
        return 0

    print("\nApplying updates...")
    report = organizer.apply_changes(changed)
    print_report(report)
    return 0 if report.error_count == 0 else 1


def parse_assignments(assignments: List[str]) -> dict:
    """Parse ID=QTY pairs."""
    quantities = {}
    for assignment in assignments:
        product_id, sep, quantity = assignment.partition("=")
        if not sep or not product_id:
            raise ValueError(f"Expected ID=QTY, got {assignment!r}")
        quantities[product_id.strip()] = int(quantity)
    return quantities


def cmd_stock(organizer: CatalogOrganizer, args) -> int:
    try:
        quantities = parse_assignments(args.set)
    except ValueError as e:
        print(f"❌ {e}")
        return 2

    session = organizer.start_stock_session(quantities)
    for product_id, quantity in quantities.items():
        session = session.set_quantity(product_id, quantity)

    missing = [product_id for product_id in quantities if product_id not in session.baseline]
    for product_id in missing:
        print(f"⚠️ Unknown product: {product_id}")

    items = organizer.generate_stock_preview(session)
    changed = print_preview(items, noun="stock levels")

    if not changed or not args.apply:
        if changed:
            print("\nDry run: re-run with --apply to write these changes.")
        return 0

    print("\nApplying stock updates...")
    report = organizer.apply_changes(changed)
    print_report(report)
    return 0 if report.error_count == 0 else 1


def cmd_summary(organizer: CatalogOrganizer, args) -> int:
    summary = summarize_catalog(organizer.store.get_all())
    print(f"📊 {summary['total']} products")
    print("\nBy product type:")
    for product_type, count in summary["by_product_type"].items():
        print(f"  {product_type}: {count}")
    print("\nBy tag:")
    for tag, count in summary["by_tag"].items():
        print(f"  {tag}: {count}")
    return 0


def cmd_low_stock(organizer: CatalogOrganizer, args) -> int:
    threshold = args.threshold
    if threshold is None:
        threshold = int(settings.get("low_stock_threshold"))
    products = find_low_stock(organizer.store.get_all(), threshold)
    if not products:
        print(f"✅ No products at or below {threshold} units")
        return 0
    print(f"⚠️ {len(products)} products at or below {threshold} units:")
    for product in products:
        print(f"  {product.inventory_quantity:>4}  {product.title} ({product.id})")
    return 0


def cmd_import(organizer: CatalogOrganizer, args) -> int:
    df = pd.read_csv(args.csv, dtype={"id": str}, keep_default_na=False)
    if "id" not in df.columns:
        print("❌ CSV must have an 'id' column")
        return 2

    products = []
    for line_number, record in enumerate(df.astype(object).to_dict(orient="records"), start=2):
        # Blank cells fall back to the model defaults
        record = {key: value for key, value in record.items() if value != ""}
        try:
            products.append(Product(**record))
        except ValidationError as e:
            errors = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
            print(f"❌ Row {line_number} ({record.get('id', '?')}): {errors}")
            return 2

    count = organizer.store.add_products(products)
    print(f"✅ Imported {count} products from {args.csv}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Organize products: classify, restock and report")
    parser.add_argument("--db", help="SQLite database path (defaults to the configured database_path)")
    parser.add_argument("--rules", help="YAML classification rule file")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    classify_parser = subparsers.add_parser("classify", help="Classify a single title")
    classify_parser.add_argument("title", help="Product title")
    classify_parser.add_argument("--tag", action="append", help="Existing tag (repeatable)")
    classify_parser.set_defaults(func=cmd_classify)

    organize_parser = subparsers.add_parser("organize", help="Preview/apply classification for the catalog")
    organize_parser.add_argument("--apply", action="store_true", help="Write the changes")
    organize_parser.add_argument("--export", help="Write the preview to a CSV file")
    organize_parser.add_argument("--ids", nargs="+", help="Only these product IDs")
    organize_parser.set_defaults(func=cmd_organize)

    stock_parser = subparsers.add_parser("stock", help="Preview/apply stock level changes")
    stock_parser.add_argument("--set", nargs="+", required=True, metavar="ID=QTY", help="New quantities")
    stock_parser.add_argument("--apply", action="store_true", help="Write the changes")
    stock_parser.set_defaults(func=cmd_stock)

    summary_parser = subparsers.add_parser("summary", help="Counts by product type and tag")
    summary_parser.set_defaults(func=cmd_summary)

    low_stock_parser = subparsers.add_parser("low-stock", help="List products with low stock")
    low_stock_parser.add_argument("--threshold", type=int, help="Stock threshold (default from settings)")
    low_stock_parser.set_defaults(func=cmd_low_stock)

    import_parser = subparsers.add_parser("import", help="Load products from a CSV file")
    import_parser.add_argument("csv", help="CSV with id, title, product_type, tags, inventory_quantity")
    import_parser.set_defaults(func=cmd_import)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level or settings.get("log_level"))

    if args.rules:
        settings.set("rules_path", args.rules)
    store = SQLiteProductStore(args.db or settings.database_path)
    organizer = CatalogOrganizer.from_settings(store, settings)

    return args.func(organizer, args)


if __name__ == "__main__":
    sys.exit(main())
