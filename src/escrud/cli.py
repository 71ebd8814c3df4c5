"""
escrud CLI — Command-Line Interface
===================================

Usage:
    escrud                         # interactive menu
    escrud menu
    escrud health
    escrud init
    escrud list --limit 20
    escrud get <id>
    escrud search --name widget
    escrud search --category tools
    escrud search --min-price 0 --max-price 15
    escrud delete <id> -f

Global options (override appsettings.json and ESCRUD_* variables):
    --config PATH  --url URL  --index NAME  --debug / --no-debug
"""

import argparse
import logging
import sys
from typing import List, Optional

from .cluster import IndexManager, IndexStatus, connect
from .config import Settings, load_settings
from .console import ProductConsole, print_product, print_products
from .core import ProductIndex
from .exceptions import ConfigError, EscrudError, InvalidInput, StoreError, Unavailable
from .models import CategoryMatch, NameMatch, PriceRange, parse_price

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

REMEDIATION = """
ERROR: Cannot connect to Elasticsearch!
==========================================
Elasticsearch is not running or not accessible at {url}.

To fix this, you need to start Elasticsearch:

Option 1 - Using Docker:
  docker run -d --name elasticsearch -p 9200:9200 -e "discovery.type=single-node" -e "xpack.security.enabled=false" elasticsearch:8.11.0

Option 2 - Manual Installation:
  1. Download from: https://www.elastic.co/downloads/elasticsearch
  2. Extract and run: bin/elasticsearch

Option 3 - Check if Elasticsearch is running:
  Visit: {url} in your browser

After starting Elasticsearch, restart this application."""


def configure_logging(debug: bool) -> None:
    """Debug mode traces every request through elastic_transport."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    logging.getLogger("elastic_transport").setLevel(level)


def print_remediation(settings: Settings, error: Exception) -> None:
    print(REMEDIATION.format(url=settings.url))
    print(f"\nDetails: {error}")


def get_settings(args) -> Settings:
    """Load settings and apply command-line overrides."""
    settings = load_settings(args.config)
    return settings.override(
        url=args.url,
        default_index=args.index,
        enable_debug_mode=args.debug
    )


def startup(manager: IndexManager, settings: Settings, ensure: bool = True) -> bool:
    """
    Connectivity check plus optional index creation.

    Returns:
        False after printing guidance when the store is unusable
    """
    try:
        manager.ping()
        print("Successfully connected to Elasticsearch!")
        if ensure:
            status = manager.ensure_index(settings.default_index)
            if status is IndexStatus.CREATED:
                print(f"Index '{settings.default_index}' created successfully!")
            else:
                print(f"Index '{settings.default_index}' already exists.")
    except Unavailable as e:
        print_remediation(settings, e)
        return False
    except StoreError as e:
        print(f"Error creating index: {e}")
        return False
    return True


def cmd_menu(args, manager: IndexManager, products: ProductIndex, settings: Settings) -> int:
    """Start the interactive menu."""
    if not startup(manager, settings):
        return 1
    ProductConsole(products).run()
    return 0


def cmd_health(args, manager: IndexManager, products: ProductIndex, settings: Settings) -> int:
    """Show cluster health."""
    if not startup(manager, settings, ensure=False):
        return 1

    health = manager.health()
    print(f"\nCluster: {health['cluster_name']}")
    print(f"Status: {health['status']}")
    print(f"Nodes: {health['number_of_nodes']}")

    if manager.exists(settings.default_index):
        print(f"Index '{settings.default_index}': {products.count():,} products")
    else:
        print(f"Index '{settings.default_index}': missing")
    return 0


def cmd_init(args, manager: IndexManager, products: ProductIndex, settings: Settings) -> int:
    """Create the product index if needed."""
    return 0 if startup(manager, settings) else 1


def cmd_list(args, manager: IndexManager, products: ProductIndex, settings: Settings) -> int:
    """List products."""
    print_products(products.list_all(args.limit))
    return 0


def cmd_get(args, manager: IndexManager, products: ProductIndex, settings: Settings) -> int:
    """Show one product."""
    print_product(products.get_by_id(args.id))
    return 0


def cmd_search(args, manager: IndexManager, products: ProductIndex, settings: Settings) -> int:
    """Search products by one criterion."""
    if args.name:
        criterion = NameMatch(args.name)
    elif args.category:
        criterion = CategoryMatch(args.category)
    elif args.min_price is not None or args.max_price is not None:
        if args.min_price is None or args.max_price is None:
            raise InvalidInput("--min-price and --max-price must be given together")
        criterion = PriceRange(
            parse_price(args.min_price, "minimum price"),
            parse_price(args.max_price, "maximum price")
        )
    else:
        raise InvalidInput("Give --name, --category or --min-price/--max-price")

    print_products(products.search(criterion, limit=args.limit), full=True)
    return 0


def cmd_delete(args, manager: IndexManager, products: ProductIndex, settings: Settings) -> int:
    """Delete one product."""
    if not args.force:
        try:
            confirm = input(f"Delete product '{args.id}'? [y/N] ")
        except (EOFError, KeyboardInterrupt):
            confirm = ""
            print()
        if confirm.strip().lower() != 'y':
            print("Aborted.")
            return 0

    products.delete(args.id)
    print(f"Deleted product: {args.id}")
    return 0


COMMANDS = {
    "menu": cmd_menu,
    "health": cmd_health,
    "init": cmd_init,
    "list": cmd_list,
    "get": cmd_get,
    "search": cmd_search,
    "delete": cmd_delete,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="escrud",
        description="Elasticsearch product CRUD console"
    )

    # Global options
    parser.add_argument("--config", help="Settings file (default: ./appsettings.json)", default=None)
    parser.add_argument("--url", help="Elasticsearch URL", default=None)
    parser.add_argument("--index", help="Product index name", default=None)
    parser.add_argument(
        "--debug",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Trace requests and responses"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("menu", help="Interactive menu (default)")
    subparsers.add_parser("health", help="Show cluster health")
    subparsers.add_parser("init", help="Create the product index if missing")

    list_parser = subparsers.add_parser("list", help="List products")
    list_parser.add_argument("--limit", type=int, default=100, help="Max results")

    get_parser = subparsers.add_parser("get", help="Show a product")
    get_parser.add_argument("id", help="Product ID")

    search_parser = subparsers.add_parser("search", help="Search products")
    search_parser.add_argument("--name", help="Match name tokens")
    search_parser.add_argument("--category", help="Exact category")
    search_parser.add_argument("--min-price", dest="min_price", help="Minimum price (inclusive)")
    search_parser.add_argument("--max-price", dest="max_price", help="Maximum price (inclusive)")
    search_parser.add_argument("--limit", type=int, default=None, help="Max results")

    delete_parser = subparsers.add_parser("delete", help="Delete a product")
    delete_parser.add_argument("id", help="Product ID")
    delete_parser.add_argument("-f", "--force", action="store_true", help="Skip confirmation")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.enable_debug_mode)
    command = COMMANDS[args.command or "menu"]

    print("=== Elasticsearch CRUD Demo ===")
    try:
        client = connect(settings)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    with client:
        manager = IndexManager(client, pretty_json=settings.pretty_json)
        products = ProductIndex(client, settings.default_index, pretty_json=settings.pretty_json)
        try:
            return command(args, manager, products, settings)
        except Unavailable as e:
            print_remediation(settings, e)
            return 1
        except EscrudError as e:
            print(f"Error: {e}")
            return 1


if __name__ == "__main__":
    sys.exit(main())
