"""Tests for JsonExporter."""
import json

import pytest

from schemamap.exporter.json_exporter import JsonExporter
from schemamap.mapper.mapping import MappingSuggestion
from schemamap.mapper.store import MappingStore


@pytest.fixture
def store():
    store = MappingStore()
    store.set_document_mappings(
        "orders",
        [
            MappingSuggestion("id", "user_id", confidence=0.95),
            MappingSuggestion("name", "full_name", confidence=0.8),
            MappingSuggestion("fax", "phone", confidence=0.4),
        ],
    )
    store.update_mapping("mapping-orders-2", status="disabled")
    return store


class TestJsonExporter:
    """Test configuration export."""

    def test_build_config(self, store):
        """Test the document holds active mappings and metadata."""
        data = JsonExporter().build_config(store, name="orders map", chat_interactions=2)

        assert data["name"] == "orders map"
        assert data["document_id"] == "orders"
        assert [m["source_field"] for m in data["mappings"]] == ["id", "name"]
        assert data["metadata"] == {
            "total_mappings": 2,
            "high_confidence_mappings": 1,
            "chat_interactions": 2,
        }

    def test_default_name(self, store):
        """Test the name defaults to the document id and date."""
        data = JsonExporter().build_config(store)
        assert data["name"].startswith("orders_")

    def test_export_writes_file(self, store, tmp_path):
        """Test export writes JSON and creates parent directories."""
        output_file = tmp_path / "out" / "mappings.json"

        data = JsonExporter().export(output_file, store, description="test")

        saved = json.loads(output_file.read_text())
        assert saved == data
        assert saved["description"] == "test"

    def test_load(self, store, tmp_path):
        """Test exported mappings load back."""
        output_file = tmp_path / "mappings.json"
        JsonExporter().export(output_file, store)

        mappings = JsonExporter.load(output_file)

        assert [m.to_dict() for m in mappings] == [m.to_dict() for m in store.export_mappings()]
