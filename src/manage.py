"""GlowMart database management CLI.

Creates and drops the schema, and gives operators direct access to the
stock ledger.

Usage:
    python src/manage.py setup-db                    # Create all tables
    python src/manage.py drop-db                     # Drop all tables
    python src/manage.py stock-level PRODUCT_ID      # Print available units
    python src/manage.py restock PRODUCT_ID QUANTITY # Receive units
"""

import argparse
import sys

from shared.database import configure_database
from shared.exceptions import GlowMartError
from shared.utils.logging import configure_logging


def setup_databases():
    from shared.utils.db import setup_db

    print("Creating GlowMart database schema...")
    setup_db()
    print("Done.")


def drop_databases():
    from shared.utils.db import drop_db

    print("Dropping GlowMart database schema...")
    drop_db()
    print("Done.")


def show_stock_level(product_id):
    from inventory.stock.adjustment import stock_level

    print(f"{product_id}: {stock_level(product_id)} available")


def receive_stock(product_id, quantity, reference=None):
    from inventory.stock.adjustment import restock

    available = restock(product_id, quantity, reference=reference)
    print(f"{product_id}: received {quantity}, {available} available")


def main(argv=None):
    parser = argparse.ArgumentParser(description="GlowMart database management")
    parser.add_argument("--database-url", help="Override DATABASE_URL for this run")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    level_parser = subparsers.add_parser("stock-level", help="Show available units for a product")
    level_parser.add_argument("product_id")

    restock_parser = subparsers.add_parser("restock", help="Receive units for a product")
    restock_parser.add_argument("product_id")
    restock_parser.add_argument("quantity", type=int)
    restock_parser.add_argument("--reference", help="Receiving document number")

    args = parser.parse_args(argv)

    configure_logging()
    configure_database(args.database_url)

    try:
        if args.command == "setup-db":
            setup_databases()
        elif args.command == "drop-db":
            drop_databases()
        elif args.command == "stock-level":
            show_stock_level(args.product_id)
        elif args.command == "restock":
            receive_stock(args.product_id, args.quantity, args.reference)
        else:
            parser.print_help()
            sys.exit(1)
    except GlowMartError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
