"""Instruction processing inputs and outputs."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ChangeType(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    MODIFIED = "modified"


@dataclass
class MappingChange:
    """One change applied to the mapping store."""

    type: ChangeType
    source_field: str
    target_field: Optional[str] = None
    details: str = ""
    mapping_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "mapping_id": self.mapping_id,
            "source_field": self.source_field,
            "target_field": self.target_field,
            "details": self.details,
        }


@dataclass
class ProcessingResult:
    """Uniform outcome of processing one instruction."""

    success: bool
    message: str
    applied_changes: List[MappingChange] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    needs_clarification: bool = False
    clarification_question: Optional[str] = None
    queued: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "message": self.message,
            "applied_changes": [c.to_dict() for c in self.applied_changes],
            "suggestions": list(self.suggestions),
            "needs_clarification": self.needs_clarification,
            "clarification_question": self.clarification_question,
            "queued": self.queued,
        }


@dataclass
class ProcessingContext:
    """Field vocabularies an instruction is interpreted against."""

    source_fields: List[str] = field(default_factory=list)
    target_fields: List[str] = field(default_factory=list)
    conversation_history: List[Dict[str, str]] = field(default_factory=list)
