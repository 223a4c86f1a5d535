"""Natural-language command parsing."""

from .parser import (
    COMMAND_PATTERNS,
    CommandParseResult,
    CommandPattern,
    CommandType,
    MappingCommand,
    MappingCommandParser,
    parse_command,
)

__all__ = [
    "COMMAND_PATTERNS",
    "CommandParseResult",
    "CommandPattern",
    "CommandType",
    "MappingCommand",
    "MappingCommandParser",
    "parse_command",
]
