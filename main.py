#!/usr/bin/env python3
"""Schema Mapping Assistant - Entry point."""
import logging
import sys
from pathlib import Path

import click
from colorama import Fore, Style, init

from config import app_config
from schemamap import __version__
from schemamap.cli.interactive import InteractiveCLI, load_fields
from schemamap.mapper.heuristic import HeuristicMapper

# Initialize colorama
init(autoreset=True)

fields_options = [
    click.option("--source", help="Comma separated source field names"),
    click.option("--target", help="Comma separated target field names"),
    click.option(
        "--fields-file",
        type=click.Path(exists=True),
        help='JSON file with "source_fields" and "target_fields"',
    ),
]


def with_fields(func):
    for option in reversed(fields_options):
        func = option(func)
    return func


def print_banner():
    """Print application banner."""
    click.echo(f"{Fore.CYAN}{'=' * 44}")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Schema Mapping Assistant{Fore.CYAN}             ║")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Natural-language field mapping{Fore.CYAN}       ║")
    click.echo(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    click.echo()


def require_fields(source, target, fields_file):
    try:
        source_fields, target_fields = load_fields(source, target, fields_file)
    except (OSError, ValueError) as e:
        click.echo(f"{Fore.RED}Failed to read fields file: {e}")
        sys.exit(1)

    if not source_fields or not target_fields:
        click.echo(f"{Fore.RED}Both source and target fields are required")
        sys.exit(1)

    return source_fields, target_fields


@click.group()
@click.version_option(version=__version__)
def cli():
    """Schema Mapping Assistant - Map fields between schemas with plain instructions."""
    logging.basicConfig(
        level=getattr(logging, app_config.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@with_fields
def suggest(source, target, fields_file):
    """Print initial mapping suggestions."""
    source_fields, target_fields = require_fields(source, target, fields_file)

    suggestions = HeuristicMapper().suggest_mappings(source_fields, target_fields)

    for s in suggestions:
        click.echo(
            f"{Fore.GREEN}{s.source_field} → {s.target_field} "
            f"[{s.transformation_type.value}, {s.confidence:.0%}]"
        )
        for issue in s.potential_issues:
            click.echo(f"{Fore.YELLOW}   ! {issue}")

    click.echo(f"\n{len(suggestions)} suggestions")


@cli.command()
@with_fields
@click.option("--document-id", default="session", help="Identifier of the mapped document")
@click.option("--no-suggest", is_flag=True, help="Start with an empty mapping set")
def chat(source, target, fields_file, document_id, no_suggest):
    """Start an interactive mapping session."""
    print_banner()

    source_fields, target_fields = require_fields(source, target, fields_file)

    cli_tool = InteractiveCLI(source_fields, target_fields, document_id=document_id)
    cli_tool.run(auto_suggest=not no_suggest)


@cli.command()
@with_fields
@click.option(
    "--instruction",
    "-i",
    "instructions",
    multiple=True,
    help="Instruction to apply (repeatable)",
)
@click.option(
    "--instructions-file",
    type=click.Path(exists=True),
    help="Text file with one instruction per line",
)
@click.option("--document-id", default="session", help="Identifier of the mapped document")
@click.option("--no-suggest", is_flag=True, help="Start with an empty mapping set")
@click.option("--output", "-o", type=click.Path(), help="Output JSON file")
def export(
    source, target, fields_file, instructions, instructions_file, document_id, no_suggest, output
):
    """Apply instructions and save the mapping configuration."""
    source_fields, target_fields = require_fields(source, target, fields_file)

    steps = list(instructions)
    if instructions_file:
        with open(instructions_file, "r") as f:
            steps.extend(line.strip() for line in f if line.strip())

    cli_tool = InteractiveCLI(source_fields, target_fields, document_id=document_id)
    cli_tool.seed(auto_suggest=not no_suggest)

    for step in steps:
        click.echo(f"\n{Fore.YELLOW}> {step}")
        cli_tool.handle_instruction(step)

    if cli_tool.export(Path(output) if output else None) is None:
        sys.exit(1)


if __name__ == "__main__":
    cli()
