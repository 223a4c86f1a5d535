"""Interactive mapping session."""
import json
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click
import questionary
from colorama import Fore, Style

from config import app_config
from schemamap.exporter.json_exporter import JsonExporter
from schemamap.mapper.heuristic import HeuristicMapper
from schemamap.mapper.store import MappingStore
from schemamap.processor.instruction_processor import InstructionProcessor
from schemamap.processor.results import ChangeType, ProcessingContext, ProcessingResult

CHANGE_ICONS = {
    ChangeType.CREATED: "+",
    ChangeType.UPDATED: "~",
    ChangeType.DELETED: "-",
    ChangeType.MODIFIED: "*",
}

HELP_TEXT = """Instructions:
  Map [source] to [target]
  Delete mapping for [source]
  Change transformation for [source] to [type]
  Set confidence for [source] to 95%
  Map all fields
  Clear all mappings

Commands:
  :list                     Show active mappings
  :conflicts                Show conflicts
  :resolve ID accept|reject Resolve a conflict
  :resolve                  Pick a conflict to resolve
  :export [FILE]            Save the mapping configuration
  :help                     Show this help
  :quit                     Leave the session"""


def split_fields(value: Optional[str]) -> List[str]:
    """Split a comma separated field list."""
    if not value:
        return []
    return [f.strip() for f in value.split(",") if f.strip()]


def load_fields(
    source: Optional[str] = None,
    target: Optional[str] = None,
    fields_file: Optional[str] = None,
) -> Tuple[List[str], List[str]]:
    """
    Resolve the source and target field vocabularies.

    Args:
        source: Comma separated source fields
        target: Comma separated target fields
        fields_file: JSON file with "source_fields" and "target_fields" lists

    Returns:
        (source_fields, target_fields); explicit options win over the file
    """
    source_fields, target_fields = [], []

    if fields_file:
        with open(fields_file, "r") as f:
            data = json.load(f)
        source_fields = list(data.get("source_fields", []))
        target_fields = list(data.get("target_fields", []))

    return (
        split_fields(source) or source_fields,
        split_fields(target) or target_fields,
    )


class InteractiveCLI:
    """Interactive chat-style mapping session."""

    def __init__(
        self,
        source_fields: Sequence[str],
        target_fields: Sequence[str],
        document_id: str = "session",
    ):
        """Initialize CLI."""
        self.document_id = document_id
        self.context = ProcessingContext(list(source_fields), list(target_fields))
        self.store = MappingStore()
        self.processor = InstructionProcessor(self.store, on_result=self._on_queued_result)
        self.exporter = JsonExporter()

    def print_header(self, title: str):
        """Print a section header."""
        click.echo(f"\n{Fore.CYAN}{'━' * 45}")
        click.echo(f"{Fore.CYAN}{title}")
        click.echo(f"{Fore.CYAN}{'━' * 45}{Style.RESET_ALL}\n")

    def seed(self, auto_suggest: bool = True):
        """Load initial suggestions into the store."""
        self.print_header("Initial Mapping")

        suggestions = []
        if auto_suggest:
            suggestions = HeuristicMapper().suggest_mappings(
                self.context.source_fields, self.context.target_fields
            )

        self.store.set_document_mappings(self.document_id, suggestions)
        click.echo(f"{Fore.CYAN}Generated {len(suggestions)} mappings")
        self.print_mappings()
        self.print_conflicts()

    def run(self, auto_suggest: bool = True):
        """Run the interactive session."""
        self.seed(auto_suggest)
        self.print_header("Mapping Chat")
        click.echo(HELP_TEXT)

        while True:
            try:
                text = click.prompt(f"\n{Fore.YELLOW}You", default="", show_default=False)
            except click.Abort:
                break

            text = text.strip()
            if not text:
                continue

            if text.startswith(":"):
                if not self.handle_meta(text):
                    break
                continue

            self.handle_instruction(text)

        click.echo(f"{Fore.YELLOW}Goodbye!")

    def handle_meta(self, text: str) -> bool:
        """Handle a ':' command. Returns False when the session should end."""
        parts = text[1:].split()
        command = parts[0].lower() if parts else ""

        if command in ("quit", "exit", "q"):
            return False
        if command == "list":
            self.print_mappings()
        elif command == "conflicts":
            self.print_conflicts()
        elif command == "resolve" and len(parts) == 3:
            self.resolve(parts[1], parts[2].lower())
        elif command == "resolve" and len(parts) == 1:
            self.pick_resolution()
        elif command == "export":
            self.export(Path(parts[1]) if len(parts) > 1 else None)
        elif command == "help":
            click.echo(HELP_TEXT)
        else:
            click.echo(f"{Fore.RED}Unknown command: {text}")

        return True

    def handle_instruction(self, text: str) -> ProcessingResult:
        """Process one instruction and print the outcome."""
        self.context.conversation_history.append({"role": "user", "content": text})

        result = self.processor.process_user_instruction(text, self.context)
        self.print_result(result)

        self.context.conversation_history.append({"role": "assistant", "content": result.message})
        return result

    def print_result(self, result: ProcessingResult):
        """Print a processing result."""
        color = Fore.GREEN if result.success else (Fore.YELLOW if result.needs_clarification else Fore.RED)
        icon = "✅" if result.success else ("❓" if result.needs_clarification else "❌")
        click.echo(f"{color}{icon} {result.message}")

        for change in result.applied_changes:
            target = f" → {change.target_field}" if change.target_field else ""
            click.echo(
                f"   {CHANGE_ICONS[change.type]} {change.source_field}{target} ({change.details})"
            )

        if result.clarification_question:
            click.echo(f"{Fore.YELLOW}   {result.clarification_question}")

        for suggestion in result.suggestions:
            click.echo(f"   • {suggestion}")

        if result.applied_changes:
            self.print_conflicts(quiet=True)

    def print_mappings(self):
        """Print active mappings."""
        mappings = self.store.export_mappings()

        if not mappings:
            click.echo(f"{Fore.YELLOW}No active mappings")
            return

        for m in mappings:
            marker = "✎" if m.user_modified else "✓"
            click.echo(
                f"{Fore.GREEN}{marker} {m.source_field} → {m.target_field} "
                f"{Style.DIM}[{m.transformation_type.value}, {m.confidence:.0%}]"
            )

        summary = self.store.summary()
        click.echo(
            f"\n   Active: {summary.active}  Modified: {summary.user_modified}  "
            f"Conflicts: {summary.conflicts}  Avg confidence: {summary.average_confidence:.0%}"
        )

    def print_conflicts(self, quiet: bool = False):
        """Print current conflicts."""
        conflicts = self.store.conflicts

        if not conflicts:
            if not quiet:
                click.echo(f"{Fore.GREEN}No conflicts")
            return

        click.echo(f"{Fore.RED}⚠️  {len(conflicts)} conflict(s):")
        for conflict in conflicts:
            click.echo(f"{Fore.RED}   • {conflict.id}: {conflict.description}")
            click.echo(f"     {conflict.suggested_resolution}")

    def resolve(self, conflict_id: str, resolution: str):
        """Resolve a conflict from the prompt."""
        if resolution not in ("accept", "reject"):
            click.echo(f"{Fore.RED}Resolution must be 'accept' or 'reject'")
            return

        if self.store.resolve_conflict(conflict_id, resolution):
            click.echo(f"{Fore.GREEN}✅ Conflict {conflict_id} resolved ({resolution})")
        else:
            click.echo(f"{Fore.RED}No conflict with id {conflict_id}")

    def pick_resolution(self):
        """Choose a conflict and its resolution from a menu."""
        conflicts = self.store.conflicts
        if not conflicts:
            click.echo(f"{Fore.GREEN}No conflicts")
            return

        conflict_id = questionary.select(
            "Which conflict?",
            choices=[
                questionary.Choice(f"{c.id}: {c.description}", value=c.id) for c in conflicts
            ],
        ).ask()
        if conflict_id is None:
            return

        resolution = questionary.select(
            "Resolution:",
            choices=[
                questionary.Choice("Keep all affected mappings", value="accept"),
                questionary.Choice("Disable all affected mappings", value="reject"),
            ],
        ).ask()
        if resolution is None:
            return

        self.resolve(conflict_id, resolution)

    def export(self, output_file: Optional[Path] = None) -> Optional[Path]:
        """Save the mapping configuration."""
        if output_file is None:
            output_file = Path(app_config.output_dir) / f"{self.document_id}_mappings.json"

        try:
            data = self.exporter.export(
                output_file,
                self.store,
                chat_interactions=sum(
                    1 for m in self.context.conversation_history if m["role"] == "user"
                ),
            )
        except Exception as e:
            click.echo(f"{Fore.RED}Export failed: {e}")
            return None

        click.echo(f"{Fore.GREEN}✅ Saved {len(data['mappings'])} mappings to {output_file}")
        return output_file

    def _on_queued_result(self, instruction: str, result: ProcessingResult):
        click.echo(f"{Fore.CYAN}Queued instruction finished: {instruction}")
        self.print_result(result)
