#!/usr/bin/env python3
"""
Seed the Supabase product catalog.

Creates one limited-edition product per --name/--barcode pair. Products whose
base barcode already exists are skipped.

Usage:
    python scripts/seed_products.py --name "Genesis Hoodie" --barcode GENESIS-001 --price 120.00
    python scripts/seed_products.py --name "Genesis Hoodie" --barcode GENESIS-001 --price 120.00 --limit 50
    python scripts/seed_products.py --demo
"""

from __future__ import annotations

import argparse
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from uuid import uuid4

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.product import DEFAULT_INVENTORY_LIMIT, Product
from domain.time import utc_now
from repositories.client import get_supabase
from repositories.supabase_store import SupabaseRecordStore

DEMO_PRODUCTS = [
    ("Genesis Hoodie", "GENESIS-001", Decimal("120.00"), 100),
    ("Ledger Tee", "LEDGER-TEE-01", Decimal("45.00"), 500),
    ("Mint Condition Cap", "MINT-CAP-01", Decimal("35.00"), 250),
]


def seed_product(
    store: SupabaseRecordStore,
    name: str,
    barcode_id: str,
    price: Decimal,
    inventory_limit: int,
) -> bool:
    """Create one product. Returns False if the barcode is already taken."""

    if store.barcode_exists(barcode_id):
        print(f"[SKIP] Barcode already in use: {barcode_id}")
        return False

    product = store.create_product(Product(
        product_id=str(uuid4()),
        name=name,
        price=price,
        barcode_id=barcode_id,
        inventory_limit=inventory_limit,
        created_at=utc_now(),
    ))
    print(f"[SUCCESS] Created product: {product.name}")
    print(f"  Product ID: {product.product_id}")
    print(f"  Barcode: {product.barcode_id}")
    print(f"  Price: ${product.price}")
    print(f"  Inventory limit: {product.inventory_limit}")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed limited-edition products into Supabase")
    parser.add_argument("--name", help="Product name")
    parser.add_argument("--barcode", help="Base barcode (must be unique)")
    parser.add_argument("--price", help="Unit price, e.g. 120.00")
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_INVENTORY_LIMIT,
        help=f"Inventory limit (default: {DEFAULT_INVENTORY_LIMIT})"
    )
    parser.add_argument("--demo", action="store_true", help="Create the demo catalog")
    args = parser.parse_args()

    store = SupabaseRecordStore(get_supabase())

    if args.demo:
        created = sum(
            seed_product(store, name, barcode, price, limit)
            for name, barcode, price, limit in DEMO_PRODUCTS
        )
        print(f"\nCreated {created} of {len(DEMO_PRODUCTS)} demo products")
        return 0

    if not (args.name and args.barcode and args.price):
        parser.error("--name, --barcode and --price are required unless --demo is given")

    try:
        price = Decimal(args.price)
    except InvalidOperation:
        parser.error(f"Invalid price: {args.price}")

    seed_product(store, args.name, args.barcode, price, args.limit)
    return 0


if __name__ == "__main__":
    sys.exit(main())
