"""Rich display helpers for CLI output."""

from contextlib import contextmanager

import typer
from pydantic import TypeAdapter
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from storyforge.content.types import (
    ContentGenerationResult,
    KBGroundedSectionContent,
    PopulatedContent,
    ValidationResult,
)
from storyforge.storyline.templates import NarrativeTemplate
from storyforge.storyline.types import StorylineGenerationResult


# Shared console instance
console = Console()


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def display_success(message: str) -> None:
    console.print(f"[bold green]{message}[/bold green]")


def display_info(message: str) -> None:
    console.print(f"[dim]{message}[/dim]")


def display_json(result: object) -> None:
    """Print a result record as plain JSON for piping.

    Pydantic models use their camelCase aliases; dataclass fields keep their names.
    """
    payload = TypeAdapter(type(result)).dump_json(result, indent=2, by_alias=True)
    typer.echo(payload.decode("utf-8"))


def _content_summary(content: PopulatedContent) -> str:
    slots = content.to_slots()
    parts = []
    for name, value in slots.items():
        if isinstance(value, list):
            parts.append(f"{name}: {len(value)} items")
        elif isinstance(value, dict):
            parts.append(f"{name}: {value.get('text') or value.get('src') or '{...}'}")
        else:
            text = str(value)
            parts.append(f"{name}: {text[:60]}{'...' if len(text) > 60 else ''}")
    return "\n".join(parts) or "[dim]empty[/dim]"


def display_storyline(result: StorylineGenerationResult) -> None:
    """Display a generated storyline with Rich panels and tables.

    Args:
        result: Storyline generation result.
    """
    narrative = result.core_narrative
    fallback = " [yellow](fallback)[/yellow]" if result.metadata.narrative_fallback_used else ""
    console.print()
    console.print(Panel(
        f"[bold]{narrative.central_theme}[/bold]\n\n"
        f"[cyan]Value:[/cyan] {narrative.value_proposition}\n"
        f"[cyan]Audience:[/cyan] {narrative.target_audience or '-'}\n"
        f"[cyan]Transformation:[/cyan] {narrative.transformation.before} -> {narrative.transformation.after}",
        title=f"Core Narrative{fallback}",
        border_style="cyan",
    ))

    flow = Table(title="Story Flow", box=box.ROUNDED)
    flow.add_column("Stage", style="cyan")
    flow.add_column("Tone", style="yellow")
    flow.add_column("Description", style="white")
    for stage in result.default_flow.stages:
        flow.add_row(stage.narrative_role.value, stage.emotional_tone.value, stage.description)
    console.print(flow)

    blocks = Table(title="Content Blocks", box=box.ROUNDED)
    blocks.add_column("Stage", style="cyan")
    blocks.add_column("Priority", justify="right")
    blocks.add_column("Type", style="green")
    blocks.add_column("Headline", style="white")
    blocks.add_column("Source", style="dim")
    for block in result.content_blocks:
        blocks.add_row(
            block.stage.value,
            str(block.priority),
            block.content.content_type.value,
            block.content.headline,
            "placeholder" if block.is_placeholder else ", ".join(block.content.entity_ids),
        )
    console.print(blocks)

    if result.persona_variations:
        personas = Table(title="Persona Variations", box=box.ROUNDED)
        personas.add_column("Persona", style="cyan")
        personas.add_column("Hook", style="white")
        personas.add_column("CTA", style="white")
        personas.add_column("Density", style="dim")
        for variation in result.persona_variations:
            adaptation = variation.adaptation
            personas.add_row(
                variation.persona_id,
                adaptation.hook_strategy.value,
                adaptation.cta_strategy.value,
                adaptation.content_density,
            )
        console.print(personas)

    score_style = "green" if result.optimization_score >= 80 else "yellow"
    console.print(
        f"[bold]Optimization score:[/bold] [{score_style}]{result.optimization_score}[/{score_style}]  "
        f"[bold]Journey peak:[/bold] {result.emotional_journey.peak_position}%  "
        f"[dim]{result.metadata.knowledge_items_used} facts, {result.metadata.tokens_used} tokens, "
        f"{result.metadata.generation_time_ms}ms[/dim]"
    )
    console.print()


def display_content(result: ContentGenerationResult) -> None:
    """Display populated sections and generation stats."""
    console.print()
    for section in result.sections:
        meta = section.metadata
        title = f"{section.order + 1}. {section.component_id} ({section.narrative_role.value})"
        if meta.used_fallback:
            title += " [yellow]fallback[/yellow]"
        console.print(Panel(
            _content_summary(section.content),
            title=title,
            subtitle=f"confidence {meta.confidence_score:.2f}",
            border_style="yellow" if meta.used_fallback else "green",
        ))

    stats = result.generation_stats
    table = Table(title="Generation Stats", box=box.ROUNDED)
    table.add_column("Metric", style="white")
    table.add_column("Value", justify="right", style="cyan")
    table.add_row("Sections", f"{stats.sections_generated}/{stats.total_sections}")
    table.add_row("Tokens", str(stats.total_tokens_used))
    table.add_row("Time (ms)", str(stats.total_time_ms))
    table.add_row("Avg confidence", f"{stats.average_confidence:.2f}")
    table.add_row("Fallbacks", str(stats.fallbacks_used))
    table.add_row("Persona fallbacks", str(stats.persona_fallbacks_used))
    console.print(table)
    console.print(f"[bold]Title:[/bold] {result.page_metadata.title}")
    console.print(f"[bold]Description:[/bold] {result.page_metadata.description}")
    console.print()


def display_kb_section(result: KBGroundedSectionContent) -> None:
    trace = result.traceability
    style = "yellow" if trace.is_generic_fallback else "green"
    console.print()
    console.print(Panel(
        _content_summary(result.content),
        title="Generic fallback" if trace.is_generic_fallback else "Grounded content",
        subtitle=f"confidence {trace.confidence:.2f}",
        border_style=style,
    ))
    if result.field_sources:
        table = Table(title="Field Sources", box=box.ROUNDED)
        table.add_column("Field", style="cyan")
        table.add_column("Entities", style="white")
        for field_name, ids in result.field_sources.items():
            table.add_row(field_name, ", ".join(ids) or "[dim]default[/dim]")
        console.print(table)
    console.print()


def display_validation(component_id: str, result: ValidationResult) -> None:
    if result.valid:
        display_success(f"Content is valid for {component_id}")
        return
    console.print(f"[bold red]Content is invalid for {component_id}:[/bold red]")
    for error in result.errors:
        console.print(f"  - {error}")


def display_templates(templates: list[NarrativeTemplate]) -> None:
    table = Table(title="Narrative Templates", box=box.ROUNDED)
    table.add_column("Page type", style="cyan")
    table.add_column("Required", style="white")
    table.add_column("Optional", style="dim")
    table.add_column("Arc", style="yellow")
    for template in templates:
        table.add_row(
            template.page_type.value,
            ", ".join(r.value for r in template.required_stages),
            ", ".join(r.value for r in template.optional_stages) or "-",
            template.recommended_arc.value,
        )
    console.print(table)


@contextmanager
def progress_spinner(description: str = "Processing..."):
    """Context manager for spinner during operations.

    Args:
        description: Text to show next to spinner.

    Yields:
        Tuple of (progress, task_id) for optional updates.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)
        yield progress, task
