"""
escrud Core — Product Document Access
=====================================

CRUD and search for Product documents in a single Elasticsearch index.

Index layout:
    _id        = product id (client-assigned UUID4)
    name       = text, standard analyzer (token search)
    description= text, standard analyzer
    price      = double (range queries)
    category   = keyword (exact filter)
    createdAt  = date

Every read goes to the store; nothing is cached in-process.
"""

import logging
import uuid
from dataclasses import replace
from typing import List, Optional, Union

from elasticsearch import Elasticsearch

from .cluster import format_body
from .exceptions import InvalidInput, StoreError, store_errors
from .models import Criterion, Product, ProductUpdate, require_text, utcnow

logger = logging.getLogger(__name__)

# "wait_for" makes a write visible to the next search
Refresh = Union[bool, str]


class ProductIndex:
    """
    Product documents in one index.

    Example:
        client = connect(load_settings())
        products = ProductIndex(client, "products")
        product_id = products.create(Product("Widget", price=Decimal("9.99"), category="tools"))
        products.search(PriceRange(Decimal("0"), Decimal("15")))
    """

    INDEX_MAPPING = {
        "mappings": {
            "properties": {
                "id": {"type": "keyword"},
                "name": {"type": "text", "analyzer": "standard"},
                "description": {"type": "text", "analyzer": "standard"},
                "price": {"type": "double"},
                "category": {"type": "keyword"},
                "createdAt": {"type": "date"}
            }
        }
    }

    # Only these fields change on update
    MUTABLE_FIELDS = ("name", "description", "price", "category")

    def __init__(
        self,
        client: Elasticsearch,
        index_name: str,
        refresh: Refresh = "wait_for",
        search_size: int = 100,
        pretty_json: bool = True
    ):
        """
        Args:
            client: Shared Elasticsearch client
            index_name: Name of the product index
            refresh: Refresh policy for writes (False, True or "wait_for")
            search_size: Maximum hits returned by ``search``
            pretty_json: Indent bodies written to the debug log
        """
        self._client = client
        self.index_name = index_name
        self.refresh = refresh
        self.search_size = search_size
        self.pretty_json = pretty_json

    def create(self, product: Product) -> str:
        """
        Store a new product.

        The product gets a fresh UUID4 id and the current UTC timestamp;
        both are copied onto the passed object only once the write succeeds.

        Returns:
            The assigned id

        Raises:
            InvalidInput: product already has an id
            StoreError: the write was rejected
        """
        if product.id:
            raise InvalidInput(f"Product already has id {product.id!r}; use update instead")

        stored = replace(product, id=str(uuid.uuid4()), created_at=utcnow())
        document = stored.to_document()

        self._log_body("Indexing product %s: %s", stored.id, document)
        with store_errors(f"create product '{stored.name}'"):
            response = self._client.index(
                index=self.index_name,
                id=stored.id,
                document=document,
                refresh=self.refresh
            )

        product.id = stored.id
        product.created_at = stored.created_at
        logger.info("Created product %s (%s)", stored.id, response["result"])
        return stored.id

    def get_by_id(self, product_id: str) -> Product:
        """
        Point lookup by id.

        Raises:
            NotFound: no document with that id
            StoreError: the stored document could not be parsed
        """
        product_id = require_text(product_id, "product id")

        with store_errors(f"get product '{product_id}'"):
            response = self._client.get(index=self.index_name, id=product_id)

        hit = getattr(response, "body", response)
        self._log_body("Fetched product %s: %s", product_id, hit)
        return self._to_product(hit)

    def list_all(self, limit: int = 100) -> List[Product]:
        """
        Return up to ``limit`` products in the store's default order.

        Meant for small datasets; there is no pagination.
        """
        return self._search({"match_all": {}}, size=limit, action="list products")

    def search(self, criterion: Criterion, limit: Optional[int] = None) -> List[Product]:
        """
        Search by name tokens, exact category or inclusive price range.

        Args:
            criterion: NameMatch, CategoryMatch or PriceRange
            limit: Maximum results (default: ``search_size``)
        """
        return self._search(
            criterion.to_query(),
            size=self.search_size if limit is None else limit,
            action=f"search products by {type(criterion).__name__}"
        )

    def update(self, product_id: str, changes: ProductUpdate) -> Product:
        """
        Merge the supplied fields into an existing product.

        Fields left as None/empty keep their value; ``id`` and
        ``created_at`` never change.

        Returns:
            The product as stored after the update

        Raises:
            NotFound: no document with that id
        """
        current = self.get_by_id(product_id)
        merged = changes.apply(current)

        document = merged.to_document()
        partial = {key: document[key] for key in self.MUTABLE_FIELDS}

        self._log_body("Updating product %s: %s", current.id, partial)
        with store_errors(f"update product '{current.id}'"):
            self._client.update(
                index=self.index_name,
                id=current.id,
                doc=partial,
                refresh=self.refresh
            )

        logger.info("Updated product %s", current.id)
        return merged

    def delete(self, product_id: str) -> None:
        """
        Remove a product.

        Raises:
            NotFound: no document with that id
        """
        product_id = require_text(product_id, "product id")

        with store_errors(f"delete product '{product_id}'"):
            self._client.delete(index=self.index_name, id=product_id, refresh=self.refresh)

        logger.info("Deleted product %s", product_id)

    def count(self) -> int:
        """Number of products in the index."""
        with store_errors("count products"):
            return self._client.count(index=self.index_name)["count"]

    def _search(self, query: dict, size: int, action: str) -> List[Product]:
        if size < 1:
            raise InvalidInput("Limit must be at least 1")
        self._log_body("Search on '%s': %s", self.index_name, {"query": query, "size": size})
        with store_errors(action):
            response = self._client.search(index=self.index_name, query=query, size=size)

        return [self._to_product(hit) for hit in response["hits"]["hits"]]

    def _to_product(self, hit: dict) -> Product:
        doc_id = hit.get("_id")
        try:
            return Product.from_document(hit["_source"], doc_id=doc_id)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise StoreError(f"Malformed product document {doc_id!r}: {e}") from e

    def _log_body(self, message: str, key: str, body) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(message, key, format_body(body, self.pretty_json))
