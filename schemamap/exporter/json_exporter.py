"""JSON exporter for mapping configurations."""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from schemamap.mapper.mapping import Mapping
from schemamap.mapper.store import HIGH_CONFIDENCE, MappingStore

logger = logging.getLogger(__name__)


class JsonExporter:
    """Export the active mappings of a store to a JSON configuration."""

    def build_config(
        self,
        store: MappingStore,
        name: Optional[str] = None,
        description: str = "",
        chat_interactions: int = 0,
    ) -> Dict[str, Any]:
        """Build the configuration document."""
        mappings = store.export_mappings()
        created = datetime.now()

        return {
            "name": name or f"{store.document_id or 'mapping'}_{created.date().isoformat()}",
            "description": description,
            "created": created.isoformat(),
            "document_id": store.document_id,
            "mappings": [m.to_dict() for m in mappings],
            "metadata": {
                "total_mappings": len(mappings),
                "high_confidence_mappings": sum(
                    1 for m in mappings if m.confidence >= HIGH_CONFIDENCE
                ),
                "chat_interactions": chat_interactions,
            },
        }

    def export(self, output_file: Path, store: MappingStore, **options) -> Dict[str, Any]:
        """Export to JSON file."""
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        data = self.build_config(store, **options)

        with open(output_file, "w") as f:
            json.dump(data, f, indent=2, default=str)

        logger.info(f"Exported {len(data['mappings'])} mappings to {output_file}")
        return data

    @staticmethod
    def load(input_file: Path) -> List[Mapping]:
        """Read the mappings back from an exported configuration."""
        with open(input_file, "r") as f:
            data = json.load(f)

        return [Mapping.from_dict(m) for m in data.get("mappings", [])]
