"""
Unit tests for connection setup and index lifecycle
"""
from unittest.mock import MagicMock, patch

import pytest
from elasticsearch import ConnectionError as ESConnectionError

from escrud.cluster import IndexManager, IndexStatus, connect, format_body
from escrud.config import Settings
from escrud.core import ProductIndex
from escrud.exceptions import ConfigError, NotFound, StoreError, Unavailable
from tests.fakes import FakeElasticsearch, bad_request


class TestConnect:
    """Tests for connect"""

    @patch("escrud.cluster.Elasticsearch")
    def test_uses_settings_url(self, mock_es):
        client = connect(Settings(url="http://es:9200"))

        mock_es.assert_called_once_with(hosts=["http://es:9200"])
        assert client is mock_es.return_value

    @patch("escrud.cluster.Elasticsearch", side_effect=ValueError("URL must include a 'scheme'"))
    def test_bad_url_is_config_error(self, mock_es):
        with pytest.raises(ConfigError, match="localhost:9200"):
            connect(Settings(url="localhost:9200"))


class TestPing:
    """Tests for IndexManager.ping"""

    def test_ping_ok(self, manager):
        manager.ping()

    def test_ping_false_is_unavailable(self):
        with pytest.raises(Unavailable):
            IndexManager(FakeElasticsearch(available=False)).ping()

    def test_transport_error_is_unavailable(self):
        client = MagicMock()
        client.ping.side_effect = ESConnectionError("connection refused")

        with pytest.raises(Unavailable, match="ping"):
            IndexManager(client).ping()


class TestEnsureIndex:
    """Tests for IndexManager.ensure_index"""

    def test_creates_with_product_mapping(self, client, manager):
        status = manager.ensure_index("products")

        assert status is IndexStatus.CREATED
        assert client.indices.created == [
            ("products", ProductIndex.INDEX_MAPPING["mappings"])
        ]

    def test_mapping_field_types(self, client, manager):
        manager.ensure_index("products")
        properties = client.mappings["products"]["properties"]

        assert properties["name"]["type"] == "text"
        assert properties["description"]["type"] == "text"
        assert properties["price"]["type"] == "double"
        assert properties["category"]["type"] == "keyword"
        assert properties["createdAt"]["type"] == "date"

    def test_second_call_reports_already_exists(self, client, manager):
        first = manager.ensure_index("products")
        second = manager.ensure_index("products")

        assert first is IndexStatus.CREATED
        assert second is IndexStatus.ALREADY_EXISTS
        assert len(client.indices.created) == 1

    def test_custom_mapping(self, client, manager):
        mapping = {"properties": {"sku": {"type": "keyword"}}}
        manager.ensure_index("other", mapping)
        assert client.mappings["other"] == mapping

    def test_concurrent_creator_counts_as_success(self):
        client = MagicMock()
        client.indices.exists.return_value = False
        client.indices.create.side_effect = bad_request(
            "resource_already_exists_exception", "index [products/xyz] already exists"
        )

        assert IndexManager(client).ensure_index("products") is IndexStatus.ALREADY_EXISTS

    def test_other_rejection_is_store_error(self):
        client = MagicMock()
        client.indices.exists.return_value = False
        client.indices.create.side_effect = bad_request(
            "mapper_parsing_exception", "No handler for type [strnig]"
        )

        with pytest.raises(StoreError, match="No handler for type") as excinfo:
            IndexManager(client).ensure_index("products")
        assert excinfo.value.status == 400
        assert excinfo.value.error_type == "mapper_parsing_exception"

    def test_unreachable_store_is_unavailable(self):
        client = MagicMock()
        client.indices.exists.side_effect = ESConnectionError("connection refused")

        with pytest.raises(Unavailable):
            IndexManager(client).ensure_index("products")
        client.indices.create.assert_not_called()


class TestIndexAdmin:
    """Tests for health, delete and refresh"""

    def test_health(self, manager):
        assert manager.health()["status"] == "green"

    def test_delete_missing_index_is_not_found(self, manager):
        with pytest.raises(NotFound, match="no such index"):
            manager.delete_index("missing")

    def test_delete_then_ensure_recreates(self, manager):
        manager.ensure_index("products")
        manager.delete_index("products")

        assert not manager.exists("products")
        assert manager.ensure_index("products") is IndexStatus.CREATED

    def test_refresh(self, manager):
        manager.ensure_index("products")
        assert manager.refresh("products")["_shards"]["failed"] == 0


class TestFormatBody:
    """Tests for debug body rendering"""

    def test_pretty(self):
        assert format_body({"b": 1, "a": 2}) == '{\n  "a": 2,\n  "b": 1\n}'

    def test_compact(self):
        assert format_body({"b": 1}, pretty=False) == '{"b": 1}'
