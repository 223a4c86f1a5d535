"""Natural-language mapping command parser."""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from schemamap.mapper.mapping import TransformationType
from schemamap.mapper.similarity import find_field_mentions, find_similar_fields

logger = logging.getLogger(__name__)

RESOLVED_CONFIDENCE = 0.9
AMBIGUOUS_CONFIDENCE = 0.6
UNKNOWN_CONFIDENCE = 0.3

USAGE_EXAMPLES = [
    'Try: "Map [source field] to [target field]"',
    'Try: "Delete mapping for [field name]"',
    'Try: "Change transformation for [field] to [type]"',
]

# Optional quote around a field token, and the token itself
_Q = r"[\"'`]?"
_FIELD = r"([^\"'`\s]+)"
_TRAILING_PUNCTUATION = ".,;:!?"


class CommandType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MODIFY_TRANSFORMATION = "modify_transformation"
    SET_CONFIDENCE = "set_confidence"
    UNKNOWN = "unknown"


@dataclass
class MappingCommand:
    """Structured instruction extracted from free text."""

    type: CommandType
    original_command: str
    source_field: Optional[str] = None
    target_field: Optional[str] = None
    transformation_type: Optional[str] = None
    confidence: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "source_field": self.source_field,
            "target_field": self.target_field,
            "transformation_type": self.transformation_type,
            "confidence": self.confidence,
            "original_command": self.original_command,
        }


@dataclass
class CommandParseResult:
    """Parser output: the command (if any) and how sure we are about it."""

    command: Optional[MappingCommand]
    confidence: float
    ambiguities: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


def _clean_token(token: str) -> str:
    return token.rstrip(_TRAILING_PUNCTUATION)


def _source_and_target(match: "re.Match") -> Dict[str, Any]:
    return {
        "source_field": _clean_token(match.group(1)),
        "target_field": _clean_token(match.group(2)),
    }


def _source_only(match: "re.Match") -> Dict[str, Any]:
    return {"source_field": _clean_token(match.group(1))}


def _source_and_transformation(match: "re.Match") -> Dict[str, Any]:
    return {
        "source_field": _clean_token(match.group(1)),
        "transformation_type": match.group(2).lower(),
    }


def _source_and_confidence(match: "re.Match") -> Dict[str, Any]:
    return {
        "source_field": _clean_token(match.group(1)),
        "confidence": float(match.group(2)),
    }


@dataclass(frozen=True)
class CommandPattern:
    """One recognised instruction shape."""

    command_type: CommandType
    regex: "re.Pattern"
    extract: Callable[["re.Match"], Dict[str, Any]]

    def match(self, text: str) -> Optional[Dict[str, Any]]:
        """Return the raw extracted values if the text has this shape."""
        found = self.regex.search(text)
        return self.extract(found) if found else None


def _pattern(command_type: CommandType, regex: str, extract) -> CommandPattern:
    return CommandPattern(command_type, re.compile(regex, re.IGNORECASE), extract)


# Tried in order, first match wins
COMMAND_PATTERNS = (
    _pattern(
        CommandType.CREATE,
        rf"map\s+(?:field\s+)?{_Q}{_FIELD}{_Q}\s+to\s+{_Q}{_FIELD}{_Q}",
        _source_and_target,
    ),
    _pattern(
        CommandType.CREATE,
        rf"create\s+(?:a\s+)?mapping\s+(?:from\s+)?{_Q}{_FIELD}{_Q}\s+(?:to\s+)?{_Q}{_FIELD}{_Q}",
        _source_and_target,
    ),
    _pattern(
        CommandType.CREATE,
        rf"connect\s+{_Q}{_FIELD}{_Q}\s+(?:with|to)\s+{_Q}{_FIELD}{_Q}",
        _source_and_target,
    ),
    _pattern(
        CommandType.UPDATE,
        rf"(?:update|change|modify)\s+(?:the\s+)?mapping\s+(?:for\s+)?{_Q}{_FIELD}{_Q}\s+to\s+{_Q}{_FIELD}{_Q}",
        _source_and_target,
    ),
    _pattern(
        CommandType.DELETE,
        rf"(?:delete|remove|unmap)\s+(?:the\s+)?mapping\s+(?:for\s+)?{_Q}{_FIELD}{_Q}",
        _source_only,
    ),
    _pattern(
        CommandType.MODIFY_TRANSFORMATION,
        rf"(?:set|change)\s+(?:the\s+)?transformation\s+(?:type\s+)?(?:for\s+)?{_Q}{_FIELD}{_Q}\s+to\s+([a-z_]+)",
        _source_and_transformation,
    ),
    _pattern(
        CommandType.SET_CONFIDENCE,
        rf"(?:set|change)\s+(?:the\s+)?confidence\s+(?:for\s+)?{_Q}{_FIELD}{_Q}\s+to\s+(\d+(?:\.\d+)?)",
        _source_and_confidence,
    ),
)


class MappingCommandParser:
    """Turn free-text instructions into MappingCommands."""

    def __init__(self, patterns: Sequence[CommandPattern] = COMMAND_PATTERNS):
        """Initialize parser with an ordered pattern list."""
        self.patterns = tuple(patterns)

    def parse_command(
        self,
        text: str,
        source_fields: Sequence[str] = (),
        target_fields: Sequence[str] = (),
    ) -> CommandParseResult:
        """
        Parse one instruction against the known field vocabularies.

        Never raises: unrecognised input yields ``command=None`` and confidence 0.

        Args:
            text: Free-text instruction
            source_fields: Known source field names
            target_fields: Known target field names

        Returns:
            CommandParseResult: 0.9 when every field resolved, 0.6 with
            ambiguities, 0.3 for an unrecognised instruction that mentions
            known fields
        """
        instruction = (text or "").strip()

        if instruction:
            for pattern in self.patterns:
                extracted = pattern.match(instruction)
                if extracted is not None:
                    return self._build_result(
                        pattern.command_type, text, extracted, source_fields, target_fields
                    )

            mentions = find_field_mentions(instruction, list(source_fields) + list(target_fields))
            if mentions:
                logger.debug(f"No command pattern matched, detected fields: {mentions}")
                return CommandParseResult(
                    command=MappingCommand(type=CommandType.UNKNOWN, original_command=text),
                    confidence=UNKNOWN_CONFIDENCE,
                    ambiguities=["Command not recognized"],
                    suggestions=USAGE_EXAMPLES + [f"Detected fields: {', '.join(mentions)}"],
                )

        return CommandParseResult(
            command=None,
            confidence=0.0,
            ambiguities=["No mapping command detected"],
            suggestions=[
                'Try: "Map field1 to field2"',
                'Try: "Delete mapping for field1"',
                'Try: "Update mapping for field1 to field3"',
            ],
        )

    def _build_result(
        self,
        command_type: CommandType,
        text: str,
        extracted: Dict[str, Any],
        source_fields: Sequence[str],
        target_fields: Sequence[str],
    ) -> CommandParseResult:
        ambiguities: List[str] = []
        suggestions: List[str] = []

        if extracted.get("source_field"):
            extracted["source_field"] = self._resolve_field(
                extracted["source_field"], source_fields, "Source", ambiguities, suggestions
            )

        if extracted.get("target_field"):
            extracted["target_field"] = self._resolve_field(
                extracted["target_field"], target_fields, "Target", ambiguities, suggestions
            )

        if extracted.get("transformation_type"):
            self._check_transformation(extracted["transformation_type"], ambiguities, suggestions)

        if extracted.get("confidence") is not None:
            # Percentages come in as 0-100
            if extracted["confidence"] > 1:
                extracted["confidence"] = extracted["confidence"] / 100
            if not 0 <= extracted["confidence"] <= 1:
                ambiguities.append("Confidence must be between 0 and 1 (or 0% and 100%)")

        command = MappingCommand(type=command_type, original_command=text, **extracted)
        return CommandParseResult(
            command=command,
            confidence=RESOLVED_CONFIDENCE if not ambiguities else AMBIGUOUS_CONFIDENCE,
            ambiguities=ambiguities,
            suggestions=suggestions,
        )

    @staticmethod
    def _resolve_field(
        token: str,
        vocabulary: Sequence[str],
        side: str,
        ambiguities: List[str],
        suggestions: List[str],
    ) -> str:
        """Return the canonical spelling of a field token, recording misses."""
        if not vocabulary:
            return token

        token_lower = token.lower()
        for candidate in vocabulary:
            if candidate.lower() == token_lower:
                return candidate

        similar = find_similar_fields(token, vocabulary)
        if similar:
            ambiguities.append(
                f'{side} field "{token}" not found. Did you mean: {", ".join(similar)}?'
            )
            suggestions.extend(s for s in similar if s not in suggestions)
        else:
            ambiguities.append(f'{side} field "{token}" not found')

        return token

    @staticmethod
    def _check_transformation(
        transformation_type: str, ambiguities: List[str], suggestions: List[str]
    ) -> None:
        valid = TransformationType.values()
        if transformation_type in valid:
            return

        ambiguities.append(f'Unknown transformation type "{transformation_type}"')
        suggestions.extend(find_similar_fields(transformation_type, valid) or valid[:3])


_default_parser = MappingCommandParser()


def parse_command(
    text: str,
    source_fields: Sequence[str] = (),
    target_fields: Sequence[str] = (),
) -> CommandParseResult:
    """Parse with the default pattern list."""
    return _default_parser.parse_command(text, source_fields, target_fields)
