"""
Pytest configuration and shared fixtures
"""
import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Allow running the suite from a checkout without installing the package
src_path = Path(__file__).parent.parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from escrud.cluster import IndexManager  # noqa: E402
from escrud.core import ProductIndex  # noqa: E402
from escrud.models import Product  # noqa: E402
from tests.fakes import FakeElasticsearch  # noqa: E402

INDEX = "products"


@pytest.fixture
def client():
    """Fresh in-memory store with no indices."""
    return FakeElasticsearch()


@pytest.fixture
def manager(client):
    return IndexManager(client)


@pytest.fixture
def products(client, manager):
    """ProductIndex over an already-created index."""
    manager.ensure_index(INDEX)
    return ProductIndex(client, INDEX)


@pytest.fixture
def widget():
    return Product(
        name="Widget",
        description="A small widget",
        price=Decimal("9.99"),
        category="tools"
    )


@pytest.fixture
def gadget():
    return Product(
        name="Gadget",
        description="A shiny gadget",
        price=Decimal("19.99"),
        category="electronics"
    )
