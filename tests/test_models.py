"""
Unit tests for the Product model, criteria and input parsing
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from escrud.exceptions import InvalidInput
from escrud.models import (
    CategoryMatch,
    NameMatch,
    PriceRange,
    Product,
    ProductUpdate,
    parse_price,
    parse_timestamp,
    require_text,
)


class TestParsePrice:
    """Tests for parse_price"""

    def test_plain_decimal(self):
        assert parse_price("19.99") == Decimal("19.99")

    def test_strips_whitespace_and_dollar_sign(self):
        assert parse_price("  $5.50 ") == Decimal("5.50")

    def test_rejects_garbage(self):
        with pytest.raises(InvalidInput, match="format"):
            parse_price("cheap")

    def test_rejects_blank(self):
        with pytest.raises(InvalidInput, match="required"):
            parse_price("   ")

    def test_rejects_negative(self):
        with pytest.raises(InvalidInput, match="negative"):
            parse_price("-1")

    def test_rejects_non_finite(self):
        with pytest.raises(InvalidInput, match="finite"):
            parse_price("NaN")
        with pytest.raises(InvalidInput, match="finite"):
            parse_price("1e400")

    def test_field_name_in_message(self):
        with pytest.raises(InvalidInput, match="minimum price"):
            parse_price("x", "minimum price")


class TestRequireText:
    """Tests for require_text"""

    def test_strips(self):
        assert require_text("  abc ", "id") == "abc"

    def test_rejects_empty_and_none(self):
        with pytest.raises(InvalidInput):
            require_text("", "id")
        with pytest.raises(InvalidInput):
            require_text(None, "id")


class TestProductDocument:
    """Tests for Product <-> document mapping"""

    def test_to_document_field_names(self):
        created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        product = Product("Widget", "desc", Decimal("9.99"), "tools", id="abc", created_at=created)

        doc = product.to_document()

        assert doc == {
            "id": "abc",
            "name": "Widget",
            "description": "desc",
            "price": 9.99,
            "category": "tools",
            "createdAt": "2024-05-01T12:30:00+00:00",
        }

    def test_price_reads_back_as_exact_decimal(self):
        product = Product.from_document({"name": "Widget", "price": 9.99})
        assert product.price == Decimal("9.99")

    def test_price_beyond_double_precision_is_rounded(self):
        """Stored as double: digits past ~17 significant places are lost."""
        price = Decimal("0.12345678901234567890")
        stored = Product("Widget", price=price).to_document()["price"]

        assert Product.from_document({"name": "Widget", "price": stored}).price != price
        assert Product.from_document({"name": "Widget", "price": stored}).price == Decimal(repr(float(price)))

    def test_from_document_uses_doc_id_when_source_has_none(self):
        product = Product.from_document({"name": "Widget", "price": 1}, doc_id="xyz")
        assert product.id == "xyz"
        assert product.created_at is None

    def test_parse_timestamp_accepts_z_suffix(self):
        parsed = parse_timestamp("2024-05-01T12:30:00Z")
        assert parsed == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_parse_timestamp_assumes_utc_when_naive(self):
        assert parse_timestamp("2024-05-01T12:30:00").tzinfo == timezone.utc


class TestProductUpdate:
    """Tests for partial updates"""

    def test_apply_only_supplied_fields(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        product = Product("Widget", "desc", Decimal("9.99"), "tools", id="abc", created_at=created)

        merged = ProductUpdate(name="Sprocket", description="").apply(product)

        assert merged.name == "Sprocket"
        assert merged.description == "desc"
        assert merged.price == Decimal("9.99")
        assert merged.category == "tools"
        assert merged.id == "abc"
        assert merged.created_at == created

    def test_apply_does_not_mutate_original(self):
        product = Product("Widget")
        ProductUpdate(name="Other").apply(product)
        assert product.name == "Widget"

    def test_zero_price_counts_as_supplied(self):
        merged = ProductUpdate(price=Decimal("0")).apply(Product("Widget", price=Decimal("3")))
        assert merged.price == Decimal("0")

    def test_is_empty(self):
        assert ProductUpdate().is_empty()
        assert ProductUpdate(name="", category=None).is_empty()
        assert not ProductUpdate(category="tools").is_empty()

    def test_whitespace_only_counts_as_not_supplied(self):
        product = Product("Widget", "desc", Decimal("9.99"), "tools")
        changes = ProductUpdate(name="  ", description="\n", category=" \t ")

        assert changes.is_empty()
        assert changes.apply(product) == product


class TestCriteria:
    """Tests for query building"""

    def test_name_match_query(self):
        assert NameMatch("blue widget").to_query() == {"match": {"name": "blue widget"}}

    def test_category_term_query(self):
        assert CategoryMatch("tools").to_query() == {"term": {"category": "tools"}}

    def test_price_range_is_inclusive_double(self):
        query = PriceRange(Decimal("0"), Decimal("15")).to_query()
        assert query == {"range": {"price": {"gte": 0.0, "lte": 15.0}}}

    def test_price_range_rejects_inverted_bounds(self):
        with pytest.raises(InvalidInput):
            PriceRange(Decimal("20"), Decimal("10"))
