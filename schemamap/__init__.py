"""
Schema Mapping Assistant

Maps fields between a source and a target schema from natural-language
instructions:
- Field name similarity scoring
- Pattern-based command parsing with "did you mean" suggestions
- Mapping store with duplicate source/target conflict detection
- Instruction processing with bulk heuristics and single-flight queueing
"""

from .commands import MappingCommandParser, parse_command
from .mapper import HeuristicMapper, MappingStore, similarity, best_match
from .processor import InstructionProcessor, ProcessingContext, ProcessingResult

__version__ = "0.1.0"

__all__ = [
    "MappingCommandParser",
    "parse_command",
    "HeuristicMapper",
    "MappingStore",
    "similarity",
    "best_match",
    "InstructionProcessor",
    "ProcessingContext",
    "ProcessingResult",
]
