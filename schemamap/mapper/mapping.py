"""Field mapping data model."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class TransformationType(str, Enum):
    """How a source value becomes a target value."""

    DIRECT_MAPPING = "direct_mapping"
    DATA_TYPE_CONVERSION = "data_type_conversion"
    FORMAT_STANDARDIZATION = "format_standardization"
    VALUE_NORMALIZATION = "value_normalization"
    FIELD_COMBINATION = "field_combination"
    FIELD_SPLITTING = "field_splitting"
    LOOKUP_TRANSFORMATION = "lookup_transformation"
    CONDITIONAL_MAPPING = "conditional_mapping"
    AGGREGATION = "aggregation"
    FILTERING = "filtering"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class MappingStatus(str, Enum):
    """Lifecycle status of a mapping. Only ACTIVE ones are validated and exported."""

    ACTIVE = "active"
    PENDING = "pending"
    CONFLICT = "conflict"
    DISABLED = "disabled"


class ConflictType(str, Enum):
    """Kinds of structural inconsistency among active mappings."""

    DUPLICATE_SOURCE = "duplicate_source"
    DUPLICATE_TARGET = "duplicate_target"
    CIRCULAR_REFERENCE = "circular_reference"  # reserved
    TYPE_MISMATCH = "type_mismatch"  # reserved


def _check_confidence(value: float) -> float:
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"Confidence must be between 0 and 1, got {value}")
    return value


@dataclass
class MappingSuggestion:
    """A generated mapping proposal, before it enters the store."""

    source_field: str
    target_field: str
    transformation_type: TransformationType = TransformationType.DIRECT_MAPPING
    confidence: float = 0.0
    reasoning: str = ""
    transformation_logic: str = ""
    potential_issues: List[str] = field(default_factory=list)
    sample_transformation: Optional[Dict[str, Any]] = None  # {"input": ..., "output": ...}

    def __post_init__(self):
        self.transformation_type = TransformationType(self.transformation_type)
        self.confidence = _check_confidence(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_field": self.source_field,
            "target_field": self.target_field,
            "transformation_type": self.transformation_type.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "transformation_logic": self.transformation_logic,
            "potential_issues": list(self.potential_issues),
            "sample_transformation": self.sample_transformation,
        }


@dataclass
class Mapping:
    """A single field-to-field rule owned by the mapping store."""

    id: str
    source_field: str
    target_field: str
    transformation_type: TransformationType = TransformationType.DIRECT_MAPPING
    confidence: float = 0.0
    reasoning: str = ""
    transformation_logic: str = ""
    potential_issues: List[str] = field(default_factory=list)
    status: MappingStatus = MappingStatus.ACTIVE
    user_modified: bool = False
    user_command: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    original_mapping: Optional[MappingSuggestion] = None
    conflict_reason: Optional[str] = None

    def __post_init__(self):
        self.transformation_type = TransformationType(self.transformation_type)
        self.status = MappingStatus(self.status)
        self.confidence = _check_confidence(self.confidence)

    @property
    def is_active(self) -> bool:
        return self.status == MappingStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "source_field": self.source_field,
            "target_field": self.target_field,
            "transformation_type": self.transformation_type.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "transformation_logic": self.transformation_logic,
            "potential_issues": list(self.potential_issues),
            "status": self.status.value,
            "user_modified": self.user_modified,
            "user_command": self.user_command,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "original_mapping": (
                self.original_mapping.to_dict() if self.original_mapping else None
            ),
            "conflict_reason": self.conflict_reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mapping":
        """Build a mapping from its dictionary form."""
        original = data.get("original_mapping")
        return cls(
            id=data["id"],
            source_field=data["source_field"],
            target_field=data["target_field"],
            transformation_type=data.get("transformation_type", "direct_mapping"),
            confidence=data.get("confidence", 0.0),
            reasoning=data.get("reasoning", ""),
            transformation_logic=data.get("transformation_logic", ""),
            potential_issues=list(data.get("potential_issues", [])),
            status=data.get("status", "active"),
            user_modified=data.get("user_modified", False),
            user_command=data.get("user_command"),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
            original_mapping=MappingSuggestion(**original) if original else None,
            conflict_reason=data.get("conflict_reason"),
        )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        return datetime.fromisoformat(value)
    return datetime.now()


@dataclass
class Conflict:
    """A detected inconsistency among active mappings."""

    id: str
    type: ConflictType
    description: str
    affected_mappings: List[str] = field(default_factory=list)
    suggested_resolution: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type.value,
            "description": self.description,
            "affected_mappings": list(self.affected_mappings),
            "suggested_resolution": self.suggested_resolution,
        }
