"""Instruction processing."""

from .instruction_processor import InstructionProcessor
from .queue import InstructionQueue
from .results import ChangeType, MappingChange, ProcessingContext, ProcessingResult

__all__ = [
    "InstructionProcessor",
    "InstructionQueue",
    "ChangeType",
    "MappingChange",
    "ProcessingContext",
    "ProcessingResult",
]
