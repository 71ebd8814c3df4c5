"""
escrud — Elasticsearch Product CRUD
===================================

Create/read/update/delete and search for Product documents kept in a
single Elasticsearch index, with an interactive console on top.

Components:
    connect()      -> one Elasticsearch client per process
    IndexManager   -> ping, ensure the index and its mapping exist
    ProductIndex   -> create / get_by_id / list_all / search / update / delete
    ProductConsole -> numbered text menu

Usage:
    from decimal import Decimal
    from escrud import IndexManager, ProductIndex, Product, PriceRange, connect, load_settings

    settings = load_settings()
    client = connect(settings)
    IndexManager(client).ensure_index(settings.default_index)

    products = ProductIndex(client, settings.default_index)
    product_id = products.create(Product("Widget", price=Decimal("9.99"), category="tools"))
    products.search(PriceRange(Decimal("0"), Decimal("15")))

License: MIT
"""

__version__ = "0.1.0"

from .cluster import IndexManager, IndexStatus, connect
from .config import Settings, load_settings
from .console import ProductConsole
from .core import ProductIndex
from .exceptions import (
    ConfigError,
    EscrudError,
    InvalidInput,
    NotFound,
    StoreError,
    Unavailable,
)
from .models import CategoryMatch, NameMatch, PriceRange, Product, ProductUpdate

__all__ = [
    "IndexManager",
    "IndexStatus",
    "connect",
    "Settings",
    "load_settings",
    "ProductConsole",
    "ProductIndex",
    "ConfigError",
    "EscrudError",
    "InvalidInput",
    "NotFound",
    "StoreError",
    "Unavailable",
    "CategoryMatch",
    "NameMatch",
    "PriceRange",
    "Product",
    "ProductUpdate",
]
