"""
escrud Models — Product and Search Criteria
===========================================

Maps the Product entity onto its Elasticsearch document shape.

Price handling:
    Python side: decimal.Decimal
    Store side:  double (JSON number)

Decimal -> float happens on write and in range queries; float -> Decimal
goes through ``str()`` so a stored 9.99 reads back as Decimal("9.99").
Values needing more than ~15 significant digits lose precision.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from .exceptions import InvalidInput


@dataclass
class Product:
    """A catalog product stored as one document."""

    name: str
    description: str = ""
    price: Decimal = Decimal("0")
    category: str = ""
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_document(self) -> Dict[str, Any]:
        """Render the full document body."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": price_to_store(self.price),
            "category": self.category,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_document(cls, source: Dict[str, Any], doc_id: Optional[str] = None) -> "Product":
        """Rebuild a product from a document ``_source``."""
        created = source.get("createdAt")
        return cls(
            id=source.get("id") or doc_id,
            name=source.get("name", ""),
            description=source.get("description", ""),
            price=price_from_store(source.get("price", 0)),
            category=source.get("category", ""),
            created_at=parse_timestamp(created) if created else None,
        )


@dataclass
class ProductUpdate:
    """
    Partial update of the mutable fields.

    ``None`` or a blank string means "keep the current value".
    """

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None

    def supplied(self) -> Dict[str, Any]:
        """Fields the caller actually set."""
        return {
            key: value
            for key, value in (
                ("name", self.name),
                ("description", self.description),
                ("price", self.price),
                ("category", self.category),
            )
            if value is not None and not (isinstance(value, str) and not value.strip())
        }

    def apply(self, product: Product) -> Product:
        """Return a copy of ``product`` with the supplied fields merged in."""
        return replace(product, **self.supplied())

    def is_empty(self) -> bool:
        return not self.supplied()


@dataclass(frozen=True)
class NameMatch:
    """Analyzed match on ``name`` (token match, not substring)."""

    text: str

    def to_query(self) -> dict:
        return {"match": {"name": self.text}}


@dataclass(frozen=True)
class CategoryMatch:
    """Case-sensitive exact match on ``category``."""

    category: str

    def to_query(self) -> dict:
        return {"term": {"category": self.category}}


@dataclass(frozen=True)
class PriceRange:
    """Inclusive range ``min_price <= price <= max_price``."""

    min_price: Decimal
    max_price: Decimal

    def __post_init__(self):
        if self.min_price > self.max_price:
            raise InvalidInput(
                f"Minimum price {self.min_price} is greater than maximum price {self.max_price}"
            )

    def to_query(self) -> dict:
        return {
            "range": {
                "price": {
                    "gte": price_to_store(self.min_price),
                    "lte": price_to_store(self.max_price),
                }
            }
        }


Criterion = Union[NameMatch, CategoryMatch, PriceRange]


def price_to_store(price: Decimal) -> float:
    """Decimal -> double, as mapped in the index."""
    return float(price)


def price_from_store(value: Any) -> Decimal:
    """double -> Decimal via the shortest float repr."""
    return Decimal(str(value))


def parse_price(text: Optional[str], field_name: str = "price") -> Decimal:
    """
    Parse user-entered text into a price.

    Raises:
        InvalidInput: blank, unparsable, non-finite or negative input
    """
    cleaned = (text or "").strip().lstrip("$")
    if not cleaned:
        raise InvalidInput(f"Invalid {field_name}: value is required")
    try:
        price = Decimal(cleaned)
    except InvalidOperation:
        raise InvalidInput(f"Invalid {field_name} format: {text!r}") from None
    if not price.is_finite() or not math.isfinite(float(price)):
        raise InvalidInput(f"Invalid {field_name}: {text!r} is not a finite number")
    if price < 0:
        raise InvalidInput(f"Invalid {field_name}: must not be negative")
    return price


def require_text(value: Optional[str], field_name: str) -> str:
    """Strip ``value`` and reject it when empty."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInput(f"Invalid {field_name}: value is required")
    return cleaned


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
