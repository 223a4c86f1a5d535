"""Mapping model, similarity heuristics and the mapping store."""

from .heuristic import HeuristicMapper
from .mapping import (
    Conflict,
    ConflictType,
    Mapping,
    MappingStatus,
    MappingSuggestion,
    TransformationType,
)
from .similarity import best_match, find_similar_fields, similarity
from .store import MappingStore, MappingSummary

__all__ = [
    "HeuristicMapper",
    "Conflict",
    "ConflictType",
    "Mapping",
    "MappingStatus",
    "MappingSuggestion",
    "TransformationType",
    "best_match",
    "find_similar_fields",
    "similarity",
    "MappingStore",
    "MappingSummary",
]
