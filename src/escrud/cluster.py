"""
escrud Cluster — Connection and Index Lifecycle
===============================================

Builds the process-wide Elasticsearch client and makes sure the product
index exists before any document is touched.

The client is created once (``connect``) and handed to ``IndexManager``
and ``ProductIndex``; neither of them constructs its own.
"""

import enum
import json
import logging
from typing import Any, Dict, Optional

from elasticsearch import Elasticsearch

from .config import Settings
from .exceptions import ConfigError, StoreError, Unavailable, store_errors

logger = logging.getLogger(__name__)


class IndexStatus(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


def connect(settings: Settings) -> Elasticsearch:
    """
    Create the Elasticsearch client for ``settings.url``.

    No request is sent; use ``IndexManager.ping`` to check connectivity.
    """
    conn_kwargs: Dict[str, Any] = {
        "hosts": [settings.url],
    }

    try:
        client = Elasticsearch(**conn_kwargs)
    except ValueError as e:
        raise ConfigError(f"Invalid Elasticsearch URL {settings.url!r}: {e}") from e

    logger.info("Elasticsearch client initialized for %s", settings.url)
    return client


def format_body(body: Any, pretty: bool = True) -> str:
    """Render a request/response body for debug logging."""
    if hasattr(body, "body"):
        body = body.body
    return json.dumps(body, indent=2 if pretty else None, default=str, sort_keys=pretty)


class IndexManager:
    """
    Index lifecycle operations against one client.

    Example:
        client = connect(load_settings())
        manager = IndexManager(client)
        manager.ping()
        manager.ensure_index("products", ProductIndex.INDEX_MAPPING["mappings"])
    """

    def __init__(self, client: Elasticsearch, pretty_json: bool = True):
        """
        Args:
            client: Shared Elasticsearch client
            pretty_json: Indent bodies written to the debug log
        """
        self._client = client
        self.pretty_json = pretty_json

    def ping(self) -> None:
        """
        Check that the store answers.

        Raises:
            Unavailable: ping failed or the store is unreachable
        """
        with store_errors("ping"):
            alive = self._client.ping()
        if not alive:
            raise Unavailable("Elasticsearch did not answer the ping")
        logger.debug("Ping succeeded")

    def health(self) -> dict:
        """Cluster name, status and node count, as shown by ``escrud health``."""
        with store_errors("cluster health"):
            response = self._client.cluster.health()
        return dict(response)

    def exists(self, name: str) -> bool:
        with store_errors(f"check index '{name}'"):
            return bool(self._client.indices.exists(index=name))

    def ensure_index(self, name: str, mappings: Optional[dict] = None) -> IndexStatus:
        """
        Create ``name`` with ``mappings`` unless it already exists.

        Safe to call on every startup. A concurrent creator winning the
        race shows up as ``resource_already_exists_exception`` and is
        reported as ALREADY_EXISTS.

        Args:
            name: Index name
            mappings: Field mapping (uses the product mapping if None)

        Returns:
            IndexStatus.CREATED or IndexStatus.ALREADY_EXISTS
        """
        if self.exists(name):
            logger.info("Index '%s' already exists", name)
            return IndexStatus.ALREADY_EXISTS

        try:
            self.create_index(name, mappings)
        except StoreError as e:
            if e.error_type == "resource_already_exists_exception":
                logger.info("Index '%s' was created concurrently", name)
                return IndexStatus.ALREADY_EXISTS
            raise

        return IndexStatus.CREATED

    def create_index(self, name: str, mappings: Optional[dict] = None) -> dict:
        """
        Unconditionally create ``name``; ``ensure_index`` is the idempotent form.

        Raises:
            StoreError: index exists already or the mapping was rejected
        """
        from .core import ProductIndex

        if mappings is None:
            mappings = ProductIndex.INDEX_MAPPING["mappings"]

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Creating index '%s' with mappings %s", name, format_body(mappings, self.pretty_json))

        with store_errors(f"create index '{name}'"):
            response = self._client.indices.create(index=name, mappings=mappings)

        logger.info("Index '%s' created", name)
        return dict(response)

    def delete_index(self, name: str) -> dict:
        """
        Drop ``name`` together with every product in it.

        Raises:
            NotFound: index does not exist
        """
        with store_errors(f"delete index '{name}'"):
            response = self._client.indices.delete(index=name)
        logger.info("Index '%s' deleted", name)
        return dict(response)

    def refresh(self, name: str) -> dict:
        """Make product writes issued without ``wait_for`` visible to search."""
        with store_errors(f"refresh index '{name}'"):
            return dict(self._client.indices.refresh(index=name))
