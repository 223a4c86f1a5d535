"""Apply free-text mapping instructions to a mapping store."""
import logging
import re
from typing import List, Optional

from config import EngineConfig, app_config
from schemamap.commands.parser import (
    CommandType,
    MappingCommand,
    MappingCommandParser,
)
from schemamap.mapper.mapping import MappingStatus, TransformationType
from schemamap.mapper.similarity import best_match, find_field_mentions, similarity
from schemamap.mapper.store import MappingStore
from schemamap.processor.queue import InstructionQueue, ResultListener
from schemamap.processor.results import (
    ChangeType,
    MappingChange,
    ProcessingContext,
    ProcessingResult,
)

logger = logging.getLogger(__name__)

# Compound instructions: "map a to b, then map c to d"
FRAGMENT_SEPARATORS = re.compile(r",|\s+and\s+|\s+then\s+|\s+also\s+", re.IGNORECASE)

ALL_WORD = re.compile(r"\ball\b", re.IGNORECASE)
MAP_WORD = re.compile(r"map", re.IGNORECASE)
SIMILAR_WORDS = re.compile(r"\b(?:similar|like)\b", re.IGNORECASE)
REMOVAL_WORDS = re.compile(r"\b(?:remove|clear|delete)\b", re.IGNORECASE)

GENERIC_SUGGESTIONS = [
    'Try: "Map [source field] to [target field]"',
    'Try: "Delete mapping for [field name]"',
    'Try: "Map all customer fields to user fields"',
]


class InstructionProcessor:
    """
    Interprets instructions and applies them to a MappingStore.

    The local pattern parser is tried first. Instructions it is not sure
    about are split into fragments, and if that fails a few contextual
    heuristics (bulk auto-map, similar fields, bulk clear, field mentions)
    get a turn. The public entry point never raises: every outcome is a
    ProcessingResult.
    """

    def __init__(
        self,
        store: MappingStore,
        config: Optional[EngineConfig] = None,
        parser: Optional[MappingCommandParser] = None,
        on_result: Optional[ResultListener] = None,
    ):
        """
        Initialize processor.

        Args:
            store: Mapping store the instructions are applied to
            config: Engine thresholds (defaults to app_config.engine)
            parser: Command parser (defaults to the built-in patterns)
            on_result: Receives results of instructions that had to wait in the queue
        """
        self.store = store
        self.config = config or app_config.engine
        self.parser = parser or MappingCommandParser()
        self.queue = InstructionQueue(
            self._process_instruction,
            max_pending=self.config.max_pending_instructions,
            on_result=on_result,
        )

    def process_user_instruction(
        self, instruction: str, context: ProcessingContext
    ) -> ProcessingResult:
        """Process one instruction, or queue it while another is in flight."""
        return self.queue.submit(instruction, context)

    def _process_instruction(
        self, instruction: str, context: ProcessingContext
    ) -> ProcessingResult:
        try:
            result = self._interpret(instruction, context)
        except Exception as e:
            logger.error(f"Error processing instruction {instruction!r}: {e}")
            return ProcessingResult(success=False, message=f"Error processing instruction: {e}")

        logger.info(f"Instruction {instruction!r}: {result.message}")
        return result

    def _interpret(self, instruction: str, context: ProcessingContext) -> ProcessingResult:
        parse_result = self.parser.parse_command(
            instruction, context.source_fields, context.target_fields
        )

        if (
            parse_result.command
            and parse_result.command.type != CommandType.UNKNOWN
            and parse_result.confidence > self.config.direct_confidence_threshold
        ):
            return self.execute_command(parse_result.command)

        commands = self._extract_multiple_commands(instruction, context)
        if commands:
            return self._execute_all(commands)

        return self._contextual_interpretation(instruction, context)

    def execute_command(self, command: MappingCommand) -> ProcessingResult:
        """
        Apply one resolved command to the store.

        Also the entry point for commands produced outside the local parser.
        """
        try:
            if command.type in (CommandType.CREATE, CommandType.UPDATE):
                return self._redirect_or_create(command)
            if command.type == CommandType.DELETE:
                return self._delete(command)
            if command.type == CommandType.MODIFY_TRANSFORMATION:
                return self._modify_transformation(command)
            if command.type == CommandType.SET_CONFIDENCE:
                return self._set_confidence(command)
        except Exception as e:
            logger.error(f"Error executing {command.type.value} command: {e}")
            return ProcessingResult(success=False, message=f"Error executing command: {e}")

        return ProcessingResult(success=False, message="Could not execute command")

    def _redirect_or_create(self, command: MappingCommand) -> ProcessingResult:
        source, target = command.source_field, command.target_field
        if not source or not target:
            return ProcessingResult(success=False, message="Could not execute command")

        existing = self.store.get_mapping_by_fields(source, active_only=True)

        if existing:
            self.store.update_mapping(
                existing.id,
                target_field=target,
                user_command=command.original_command,
                reasoning=f'Updated via command: "{command.original_command}"',
            )
            return ProcessingResult(
                success=True,
                message=f"Updated mapping: {source} → {target}",
                applied_changes=[
                    MappingChange(
                        type=ChangeType.UPDATED,
                        mapping_id=existing.id,
                        source_field=source,
                        target_field=target,
                        details=f"Updated mapping from {existing.target_field} to {target}",
                    )
                ],
            )

        if command.type == CommandType.UPDATE:
            return self._missing_mapping(source)

        mapping_id = self.store.add_mapping(
            source,
            target,
            transformation_type=TransformationType.DIRECT_MAPPING,
            confidence=self.config.command_confidence,
            reasoning=f'Created via command: "{command.original_command}"',
            transformation_logic=f"{source} -> {target}",
            status=MappingStatus.ACTIVE,
            user_modified=True,
            user_command=command.original_command,
        )
        return ProcessingResult(
            success=True,
            message=f"Created mapping: {source} → {target}",
            applied_changes=[
                MappingChange(
                    type=ChangeType.CREATED,
                    mapping_id=mapping_id,
                    source_field=source,
                    target_field=target,
                    details="Created new mapping",
                )
            ],
        )

    def _delete(self, command: MappingCommand) -> ProcessingResult:
        existing = self.store.get_mapping_by_fields(command.source_field, active_only=True)
        if not existing:
            return self._missing_mapping(command.source_field)

        self.store.remove_mapping(existing.id)
        return ProcessingResult(
            success=True,
            message=f"Deleted mapping for: {command.source_field}",
            applied_changes=[
                MappingChange(
                    type=ChangeType.DELETED,
                    mapping_id=existing.id,
                    source_field=command.source_field,
                    target_field=existing.target_field,
                    details="Deleted mapping",
                )
            ],
        )

    def _modify_transformation(self, command: MappingCommand) -> ProcessingResult:
        existing = self.store.get_mapping_by_fields(command.source_field, active_only=True)
        if not existing or not command.transformation_type:
            return self._missing_mapping(command.source_field)

        self.store.update_mapping(
            existing.id,
            transformation_type=command.transformation_type,
            user_command=command.original_command,
            reasoning=f'Transformation updated via command: "{command.original_command}"',
        )
        return ProcessingResult(
            success=True,
            message=(
                f"Updated transformation for {command.source_field} "
                f"to {command.transformation_type}"
            ),
            applied_changes=[
                MappingChange(
                    type=ChangeType.MODIFIED,
                    mapping_id=existing.id,
                    source_field=command.source_field,
                    target_field=existing.target_field,
                    details=f"Changed transformation to {command.transformation_type}",
                )
            ],
        )

    def _set_confidence(self, command: MappingCommand) -> ProcessingResult:
        existing = self.store.get_mapping_by_fields(command.source_field, active_only=True)
        if not existing or command.confidence is None:
            return self._missing_mapping(command.source_field)

        self.store.update_mapping(
            existing.id,
            confidence=command.confidence,
            user_command=command.original_command,
        )
        percent = round(command.confidence * 100)
        return ProcessingResult(
            success=True,
            message=f"Set confidence for {command.source_field} to {percent}%",
            applied_changes=[
                MappingChange(
                    type=ChangeType.MODIFIED,
                    mapping_id=existing.id,
                    source_field=command.source_field,
                    target_field=existing.target_field,
                    details=f"Set confidence to {percent}%",
                )
            ],
        )

    def _missing_mapping(self, source_field: Optional[str]) -> ProcessingResult:
        mapped = [m.source_field for m in self.store.export_mappings()]
        return ProcessingResult(
            success=False,
            message=f'No mapping found for "{source_field}"',
            suggestions=[f"Available source fields: {', '.join(mapped) or 'none'}"],
        )

    def _extract_multiple_commands(
        self, instruction: str, context: ProcessingContext
    ) -> List[MappingCommand]:
        """
        Parse each fragment of the instruction on its own.

        An instruction without separators is a single fragment, so a
        command the parser was only fairly sure about still runs here.
        """
        fragments = [f.strip() for f in FRAGMENT_SEPARATORS.split(instruction) if f.strip()]

        commands = []
        for fragment in fragments:
            parsed = self.parser.parse_command(
                fragment, context.source_fields, context.target_fields
            )
            if parsed.command and parsed.confidence > self.config.fragment_confidence_threshold:
                commands.append(parsed.command)

        logger.debug(f"Extracted {len(commands)} commands from {len(fragments)} fragments")
        return commands

    def _execute_all(self, commands: List[MappingCommand]) -> ProcessingResult:
        changes: List[MappingChange] = []
        suggestions: List[str] = []
        succeeded = 0

        for command in commands:
            result = self.execute_command(command)
            succeeded += 1 if result.success else 0
            changes.extend(result.applied_changes)
            suggestions.extend(result.suggestions)

        return ProcessingResult(
            success=succeeded > 0,
            message=f"{succeeded}/{len(commands)} changes applied.",
            applied_changes=changes,
            suggestions=suggestions,
        )

    def _contextual_interpretation(
        self, instruction: str, context: ProcessingContext
    ) -> ProcessingResult:
        removal = REMOVAL_WORDS.search(instruction)

        if ALL_WORD.search(instruction) and MAP_WORD.search(instruction) and not removal:
            return self._bulk_mapping(instruction, context)

        if SIMILAR_WORDS.search(instruction):
            return self._similar_field_mapping(instruction, context)

        if removal:
            return self._bulk_removal()

        source_mentions = find_field_mentions(instruction, context.source_fields)
        target_mentions = find_field_mentions(instruction, context.target_fields)

        if source_mentions and target_mentions:
            return ProcessingResult(
                success=False,
                message="I detected fields but need clarification on the mapping action.",
                needs_clarification=True,
                clarification_question=(
                    f"Do you want to map {', '.join(source_mentions)} "
                    f"to {', '.join(target_mentions)}?"
                ),
                suggestions=[
                    f'Try: "Map {source_mentions[0]} to {target_mentions[0]}"',
                    f'Try: "Delete mapping for {source_mentions[0]}"',
                ],
            )

        return ProcessingResult(
            success=False,
            message="I couldn't understand that instruction. Please be more specific.",
            suggestions=list(GENERIC_SUGGESTIONS),
        )

    def _bulk_mapping(self, instruction: str, context: ProcessingContext) -> ProcessingResult:
        """Auto-map a handful of unmapped source fields to their closest targets."""
        unmapped = [
            field
            for field in context.source_fields
            if self.store.get_mapping_by_fields(field, active_only=True) is None
        ]

        changes = []
        for source_field in unmapped[: self.config.bulk_map_limit]:
            match = best_match(source_field, context.target_fields)
            if match is None or match.score <= self.config.bulk_map_threshold:
                continue

            mapping_id = self.store.add_mapping(
                source_field,
                match.field,
                transformation_type=TransformationType.DIRECT_MAPPING,
                confidence=match.score,
                reasoning=f'Bulk mapping via instruction: "{instruction}"',
                transformation_logic=f"{source_field} -> {match.field}",
                status=MappingStatus.ACTIVE,
                user_modified=True,
                user_command=instruction,
            )
            changes.append(
                MappingChange(
                    type=ChangeType.CREATED,
                    mapping_id=mapping_id,
                    source_field=source_field,
                    target_field=match.field,
                    details=f"Auto-mapped based on similarity ({match.score:.0%})",
                )
            )

        if not changes:
            return ProcessingResult(
                success=False,
                message="No confident automatic mappings found.",
                suggestions=['Try: "Map [source field] to [target field]"'],
            )

        return ProcessingResult(
            success=True,
            message=f"Created {len(changes)} automatic mappings",
            applied_changes=changes,
        )

    def _similar_field_mapping(
        self, instruction: str, context: ProcessingContext
    ) -> ProcessingResult:
        """Propose source fields similar to the one named in the instruction."""
        mentions = find_field_mentions(instruction, context.source_fields)
        if not mentions:
            return ProcessingResult(
                success=False,
                message="Please specify which field you want to find similar mappings for.",
            )

        reference = mentions[0]
        similar_fields = [
            field
            for field in context.source_fields
            if field != reference
            and similarity(reference, field) > self.config.similar_field_threshold
        ]

        if not similar_fields:
            return ProcessingResult(
                success=False,
                message=f'No similar fields found for "{reference}"',
            )

        return ProcessingResult(
            success=False,
            message=f"Found similar fields: {', '.join(similar_fields)}",
            needs_clarification=True,
            clarification_question=(
                f"Should I create mappings for these similar fields: "
                f"{', '.join(similar_fields)}?"
            ),
        )

    def _bulk_removal(self) -> ProcessingResult:
        """Delete every active mapping."""
        changes = []
        for mapping in self.store.export_mappings():
            self.store.remove_mapping(mapping.id)
            changes.append(
                MappingChange(
                    type=ChangeType.DELETED,
                    mapping_id=mapping.id,
                    source_field=mapping.source_field,
                    target_field=mapping.target_field,
                    details="Bulk removal",
                )
            )

        if not changes:
            return ProcessingResult(success=False, message="No active mappings to remove")

        return ProcessingResult(
            success=True,
            message=f"Removed {len(changes)} mappings",
            applied_changes=changes,
        )
