"""In-memory mapping store: the single owner of mappings and conflicts."""
import copy
import logging
import uuid
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from schemamap.mapper.mapping import (
    Conflict,
    Mapping,
    MappingStatus,
    MappingSuggestion,
)
from schemamap.validator.conflict_validator import ConflictValidator

logger = logging.getLogger(__name__)

# Fields callers may set; id and timestamps are managed by the store
EDITABLE_FIELDS = frozenset(
    f.name for f in fields(Mapping) if f.name not in ("id", "created_at", "updated_at")
)

RESOLUTIONS = ("accept", "reject", "modify")

HIGH_CONFIDENCE = 0.9


@dataclass
class MappingSummary:
    """Counts shown by status indicators and saved configurations."""

    total: int = 0
    active: int = 0
    user_modified: int = 0
    conflicts: int = 0
    high_confidence: int = 0
    average_confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "active": self.active,
            "user_modified": self.user_modified,
            "conflicts": self.conflicts,
            "high_confidence": self.high_confidence,
            "average_confidence": self.average_confidence,
        }


class MappingStore:
    """
    Authoritative collection of mappings and conflicts for one workflow.

    Create one store per session, seed it with ``set_document_mappings`` and
    tear it down with ``clear``. Mappings keep insertion order. Accessors hand
    out copies so only the store can mutate its records.
    """

    def __init__(self, validator: Optional[ConflictValidator] = None):
        """Initialize an empty store."""
        self.validator = validator or ConflictValidator()
        self.document_id: Optional[str] = None
        self._mappings: List[Mapping] = []
        self._conflicts: List[Conflict] = []

    @property
    def mappings(self) -> List[Mapping]:
        """All mappings, any status."""
        return copy.deepcopy(self._mappings)

    @property
    def conflicts(self) -> List[Conflict]:
        """Conflicts found by the last validation, minus removed mapping ids."""
        return copy.deepcopy(self._conflicts)

    def __len__(self) -> int:
        return len(self._mappings)

    def set_document_mappings(
        self, document_id: str, suggestions: Iterable[MappingSuggestion]
    ) -> List[Conflict]:
        """
        Replace the whole collection with mappings built from suggestions.

        Ids are derived from the document id and the suggestion index, so
        seeding the same document twice yields the same ids.
        """
        now = datetime.now()
        self.document_id = document_id
        self._mappings = [
            Mapping(
                id=f"mapping-{document_id}-{index}",
                source_field=suggestion.source_field,
                target_field=suggestion.target_field,
                transformation_type=suggestion.transformation_type,
                confidence=suggestion.confidence,
                reasoning=suggestion.reasoning,
                transformation_logic=suggestion.transformation_logic,
                potential_issues=list(suggestion.potential_issues),
                status=MappingStatus.ACTIVE,
                user_modified=False,
                created_at=now,
                updated_at=now,
                original_mapping=copy.deepcopy(suggestion),
            )
            for index, suggestion in enumerate(suggestions)
        ]
        self._conflicts = []

        logger.info(f"Loaded {len(self._mappings)} mappings for document {document_id}")
        return self.validate_mappings()

    def add_mapping(self, source_field: str, target_field: str, **values) -> str:
        """
        Append a new mapping and re-validate.

        Args:
            source_field: Source field name
            target_field: Target field name
            **values: Any other editable Mapping field

        Returns:
            str: The new mapping id
        """
        self._check_fields(values)

        now = datetime.now()
        mapping = Mapping(
            id=f"mapping-{uuid.uuid4().hex}",
            source_field=source_field,
            target_field=target_field,
            created_at=now,
            updated_at=now,
            **values,
        )
        self._mappings.append(mapping)

        logger.info(f"Added mapping {mapping.id}: {source_field} -> {target_field}")
        self.validate_mappings()
        return mapping.id

    def update_mapping(self, mapping_id: str, **updates) -> bool:
        """
        Merge updates into a mapping and re-validate.

        An unknown id is a no-op and returns False. Unknown field names or
        invalid values raise ValueError and leave the mapping untouched.
        """
        self._check_fields(updates)

        index = self._index_of(mapping_id)
        if index is None:
            logger.warning(f"Cannot update unknown mapping {mapping_id}")
            return False

        changes = dict(updates, user_modified=True, updated_at=datetime.now())
        self._mappings[index] = replace(self._mappings[index], **changes)

        logger.debug(f"Updated mapping {mapping_id}: {sorted(updates)}")
        self.validate_mappings()
        return True

    def remove_mapping(self, mapping_id: str) -> bool:
        """
        Delete a mapping.

        The id is stripped from every conflict but validation is not re-run;
        conflicts left with nothing to point at are dropped by the next
        validation pass.
        """
        index = self._index_of(mapping_id)
        if index is None:
            logger.warning(f"Cannot remove unknown mapping {mapping_id}")
            return False

        del self._mappings[index]
        for conflict in self._conflicts:
            if mapping_id in conflict.affected_mappings:
                conflict.affected_mappings = [
                    m for m in conflict.affected_mappings if m != mapping_id
                ]

        logger.info(f"Removed mapping {mapping_id}")
        return True

    def resolve_conflict(
        self, conflict_id: str, resolution: str, data: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Resolve one conflict and drop it.

        - accept: affected mappings stay as they are and become active
        - reject: affected mappings are disabled
        - modify: ``data`` is merged into every affected mapping, which becomes active

        Validation is not re-run here.
        """
        if resolution not in RESOLUTIONS:
            raise ValueError(f"Unknown resolution '{resolution}', expected one of {RESOLUTIONS}")

        data = dict(data or {})
        if resolution == "modify":
            self._check_fields(data)

        conflict = next((c for c in self._conflicts if c.id == conflict_id), None)
        if conflict is None:
            logger.warning(f"Cannot resolve unknown conflict {conflict_id}")
            return False

        now = datetime.now()
        for index, mapping in enumerate(self._mappings):
            if mapping.id not in conflict.affected_mappings:
                continue

            if resolution == "accept":
                self._mappings[index] = replace(
                    mapping, status=MappingStatus.ACTIVE, updated_at=now
                )
            elif resolution == "reject":
                self._mappings[index] = replace(
                    mapping, status=MappingStatus.DISABLED, updated_at=now
                )
            else:
                changes = dict(
                    data, status=MappingStatus.ACTIVE, user_modified=True, updated_at=now
                )
                self._mappings[index] = replace(mapping, **changes)

        self._conflicts = [c for c in self._conflicts if c.id != conflict_id]

        logger.info(f"Resolved conflict {conflict_id} with '{resolution}'")
        return True

    def clear(self) -> None:
        """Drop every mapping and conflict and forget the document."""
        self._mappings = []
        self._conflicts = []
        self.document_id = None
        logger.info("Mapping store cleared")

    def get_mapping(self, mapping_id: str) -> Optional[Mapping]:
        """Return a copy of a mapping by id."""
        index = self._index_of(mapping_id)
        return copy.deepcopy(self._mappings[index]) if index is not None else None

    def get_mapping_by_fields(
        self,
        source_field: str,
        target_field: Optional[str] = None,
        active_only: bool = False,
    ) -> Optional[Mapping]:
        """Return the first mapping with this source field (and target field, if given)."""
        for mapping in self._mappings:
            if active_only and not mapping.is_active:
                continue
            if mapping.source_field != source_field:
                continue
            if target_field is not None and mapping.target_field != target_field:
                continue
            return copy.deepcopy(mapping)
        return None

    def validate_mappings(self) -> List[Conflict]:
        """Recompute all conflicts from the active mappings."""
        self._conflicts = self.validator.validate(self._mappings)

        if self._conflicts:
            logger.info(f"Validation found {len(self._conflicts)} conflicts")
        return self.conflicts

    def export_mappings(self) -> List[Mapping]:
        """Active mappings in collection order."""
        return [copy.deepcopy(m) for m in self._mappings if m.is_active]

    def summary(self) -> MappingSummary:
        """Aggregate counts over the collection."""
        active = [m for m in self._mappings if m.is_active]
        average = sum(m.confidence for m in active) / len(active) if active else 0.0

        return MappingSummary(
            total=len(self._mappings),
            active=len(active),
            user_modified=sum(1 for m in self._mappings if m.user_modified),
            conflicts=len(self._conflicts),
            high_confidence=sum(1 for m in active if m.confidence >= HIGH_CONFIDENCE),
            average_confidence=round(average, 4),
        )

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data copy of the persistent state (document id and mappings)."""
        return {
            "document_id": self.document_id,
            "mappings": [m.to_dict() for m in self._mappings],
        }

    def restore(self, snapshot: Dict[str, Any]) -> List[Conflict]:
        """Replace the state with a snapshot and recompute conflicts."""
        self.document_id = snapshot.get("document_id")
        self._mappings = [Mapping.from_dict(d) for d in snapshot.get("mappings", [])]

        logger.info(f"Restored {len(self._mappings)} mappings from snapshot")
        return self.validate_mappings()

    def _index_of(self, mapping_id: str) -> Optional[int]:
        for index, mapping in enumerate(self._mappings):
            if mapping.id == mapping_id:
                return index
        return None

    @staticmethod
    def _check_fields(values: Dict[str, Any]) -> None:
        unknown = set(values) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown mapping fields: {', '.join(sorted(unknown))}")
