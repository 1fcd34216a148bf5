"""Main CLI application for the storyforge pipeline."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from storyforge.cli.display import (
    display_content,
    display_error,
    display_json,
    display_kb_section,
    display_storyline,
    display_templates,
    display_validation,
    progress_spinner,
)
from storyforge.config import get_settings
from storyforge.content import (
    ContentGenerationInput,
    ContentHints,
    KBGroundedHints,
    KBGroundedSectionInput,
    generate_content,
    generate_kb_grounded_section_content,
    plan_sections,
    validate_content,
)
from storyforge.exceptions import ConfigurationError
from storyforge.knowledge import Workspace, load_workspace
from storyforge.llm import get_synthesizer
from storyforge.storyline import (
    NARRATIVE_TEMPLATES,
    NarrativeRole,
    PageType,
    StorylineGenerationInput,
    generate_storyline,
)

app = typer.Typer(
    name="storyforge",
    help="Turn knowledge facts into a persona-aware page narrative and section copy",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """StoryForge - narrative and content generation pipeline.

    Run commands against a JSON workspace file holding entities, personas
    and brand voices.
    """
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _load(path: Path) -> Workspace:
    try:
        return load_workspace(path)
    except FileNotFoundError:
        display_error(f"Workspace file not found: {path}")
        raise typer.Exit(1)
    except (json.JSONDecodeError, ValidationError) as e:
        display_error(f"Invalid workspace file {path}: {e}")
        raise typer.Exit(1)


def _parse_components(values: list[str]) -> dict[NarrativeRole, str]:
    components = {}
    for value in values:
        role, _, component_id = value.partition("=")
        try:
            components[NarrativeRole(role)] = component_id
        except ValueError:
            display_error(f"Invalid --component '{value}', expected ROLE=COMPONENT_ID")
            raise typer.Exit(1)
    return components


def _run(coro):
    try:
        return asyncio.run(coro)
    except ConfigurationError as e:
        display_error(str(e))
        raise typer.Exit(1)


@app.command()
def storyline(
    workspace_file: Path = typer.Argument(..., help="JSON workspace file"),
    page_type: PageType = typer.Option(PageType.LANDING, "--page-type", "-p", help="Page type"),
    persona: list[str] = typer.Option([], "--persona", help="Persona id (repeatable)"),
    synthesizer: Optional[str] = typer.Option(None, "--synthesizer", help="provider:model override"),
    optimize: bool = typer.Option(True, "--optimize/--no-optimize", help="Reorder blocks to fix flow issues"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """Generate a storyline for one page."""
    workspace = _load(workspace_file)
    request = StorylineGenerationInput(
        workspace_id=workspace.workspace_id,
        page_type=page_type,
        persona_ids=persona,
        brand_config_id=workspace.brand_config_id,
        auto_optimize=optimize,
    )
    synth = get_synthesizer(synthesizer)

    with progress_spinner("Generating storyline..."):
        result = _run(
            generate_storyline(
                request,
                fact_store=workspace.store,
                persona_store=workspace.store,
                brand_store=workspace.store,
                synthesizer=synth,
            )
        )

    if as_json:
        display_json(result)
    else:
        display_storyline(result)


@app.command()
def content(
    workspace_file: Path = typer.Argument(..., help="JSON workspace file"),
    page_type: PageType = typer.Option(PageType.LANDING, "--page-type", "-p", help="Page type"),
    persona: list[str] = typer.Option([], "--persona", help="Persona id (repeatable)"),
    component: list[str] = typer.Option(
        [], "--component", "-c", help="Component for a stage, e.g. hook=hero-split (repeatable)"
    ),
    keyword: list[str] = typer.Option([], "--keyword", "-k", help="Focus keyword (repeatable)"),
    page_id: str = typer.Option("page-1", "--page-id", help="Page id for the result"),
    synthesizer: Optional[str] = typer.Option(None, "--synthesizer", help="provider:model override"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """Plan sections from a storyline and populate them with copy."""
    workspace = _load(workspace_file)
    components = _parse_components(component)
    synth = get_synthesizer(synthesizer)
    stores = dict(
        fact_store=workspace.store,
        persona_store=workspace.store,
        brand_store=workspace.store,
        synthesizer=synth,
    )

    with progress_spinner("Generating storyline..."):
        story = _run(
            generate_storyline(
                StorylineGenerationInput(
                    workspace_id=workspace.workspace_id,
                    page_type=page_type,
                    persona_ids=persona,
                    brand_config_id=workspace.brand_config_id,
                ),
                **stores,
            )
        )

    request = ContentGenerationInput(
        workspace_id=workspace.workspace_id,
        page_id=page_id,
        page_type=page_type,
        sections=plan_sections(story, components),
        persona_ids=persona,
        brand_config_id=workspace.brand_config_id,
        hints=ContentHints(focus_keywords=keyword) if keyword else None,
    )
    with progress_spinner(f"Populating {len(request.sections)} sections..."):
        result = _run(generate_content(request, **stores))

    if as_json:
        display_json(result)
    else:
        display_content(result)


@app.command("kb-section")
def kb_section(
    workspace_file: Path = typer.Argument(..., help="JSON workspace file"),
    component: str = typer.Option(..., "--component", "-c", help="Component id, e.g. testimonials-grid"),
    role: NarrativeRole = typer.Option(..., "--role", "-r", help="Narrative role of the section"),
    keyword: list[str] = typer.Option([], "--keyword", "-k", help="Focus keyword (repeatable)"),
    max_length: Optional[int] = typer.Option(None, "--max-length", help="Description length cap"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """Populate one section directly from the knowledge base, no synthesis."""
    workspace = _load(workspace_file)
    request = KBGroundedSectionInput(
        workspace_id=workspace.workspace_id,
        component_id=component,
        narrative_role=role,
        hints=KBGroundedHints(focus_keywords=keyword, max_length=max_length),
    )
    result = _run(generate_kb_grounded_section_content(request, fact_store=workspace.store))

    if as_json:
        display_json(result)
    else:
        display_kb_section(result)


@app.command()
def validate(
    content_file: Path = typer.Argument(..., help="JSON file with slot-keyed content"),
    component: str = typer.Option(..., "--component", "-c", help="Component id to validate against"),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
) -> None:
    """Validate section content against a component's slot schema.

    Exits with status 1 when the content is invalid.
    """
    try:
        data = json.loads(content_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        display_error(f"Content file not found: {content_file}")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        display_error(f"Invalid JSON in {content_file}: {e}")
        raise typer.Exit(1)
    if not isinstance(data, dict):
        display_error("Content file must hold a JSON object")
        raise typer.Exit(1)

    result = validate_content(data, component)
    if as_json:
        display_json(result)
    else:
        display_validation(component, result)
    if not result.valid:
        raise typer.Exit(1)


@app.command()
def templates() -> None:
    """List narrative templates by page type."""
    display_templates(list(NARRATIVE_TEMPLATES.values()))


if __name__ == "__main__":
    app()
