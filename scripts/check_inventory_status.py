"""
Check inventory status - how many units of each product are sold vs available,
and how purchase attempts ended.
"""

import sys
from collections import Counter
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from repositories.client import get_supabase
from repositories.supabase_store import SupabaseRecordStore


def check_inventory_status():
    """Print per-product sales against the inventory limit."""

    store = SupabaseRecordStore(get_supabase())
    products = store.list_products()

    print("=" * 70)
    print("INVENTORY STATUS")
    print("=" * 70)
    print(f"{'Product':<30} {'Sold':>8} {'Limit':>8} {'Left':>8}  Status")
    print("-" * 70)

    for product in sorted(products, key=lambda p: p.name):
        status = "available" if product.is_available else "SOLD OUT"
        print(
            f"{product.name[:30]:<30} {product.sales_count:>8} "
            f"{product.inventory_limit:>8} {product.remaining:>8}  {status}"
        )

    print("=" * 70)

    # Pending transactions here mean a purchase never reached a terminal status
    statuses = Counter(t.status.value for t in store.list_transactions())
    print("\nTransactions by status:")
    print("-" * 70)
    for status in ("completed", "failed", "pending"):
        print(f"{status}: {statuses.get(status, 0)}")

    if statuses.get("pending"):
        print("\nWARNING: pending transactions found; inspect them before restocking.")


if __name__ == "__main__":
    check_inventory_status()
