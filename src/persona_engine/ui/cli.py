"""CLI interface for the persona engine.

This module provides a Typer-based command-line interface for browsing the
built-in persona templates and model catalog, and for running a single chat
turn against a local Ollama service.
"""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from persona_engine.config import ConfigLoadError, load_model_catalog, settings
from persona_engine.engine import PersonaEngine
from persona_engine.llm_client import (
    LLMClientError,
    ModelConfigurationError,
    ModelProgress,
    is_ollama_available,
)
from persona_engine.orchestrator import ChatResponse
from persona_engine.persona import (
    PERSONA_TEMPLATES,
    Persona,
    create_persona_from_template,
    get_template,
)

app = typer.Typer(help="Persona Engine - NPC personas with memory and quests")
console = Console()


def _parse_context(pairs: list[str] | None) -> dict[str, str] | None:
    """Turn ["key=value", ...] into a dict. Raises typer.BadParameter on malformed pairs."""
    if not pairs:
        return None
    context: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--context")
        context[key.strip()] = value.strip()
    return context


@app.command(name="templates")
def templates_command() -> None:
    """List the built-in persona templates."""
    table = Table(title=f"Persona Templates ({len(PERSONA_TEMPLATES)})")
    table.add_column("Type", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Personality (F/Fo/V/H)", style="blue")
    table.add_column("Temperature", style="magenta", justify="right")

    for template in PERSONA_TEMPLATES:
        p = template["personality"]
        table.add_row(
            template["type"].value,
            template["name"],
            f"{p['friendliness']}/{p['formality']}/{p['verbosity']}/{p['humor']}",
            f"{template['model_params']['temperature']:.1f}",
        )
    console.print(table)


@app.command(name="models")
def models_command() -> None:
    """List the models in the catalog."""
    try:
        catalog = load_model_catalog()
    except ConfigLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e

    table = Table(title="Available Models")
    table.add_column("ID", style="cyan", overflow="fold")
    table.add_column("Name", style="green")
    table.add_column("Size", style="blue")
    table.add_column("Ollama Model", style="magenta")
    table.add_column("Description", style="white", overflow="fold")

    for model in catalog.models:
        marker = " [dim](default)[/dim]" if model.id == settings.default_model_id else ""
        table.add_row(
            model.id + marker,
            model.name,
            model.size,
            model.backend_model or "-",
            model.description,
        )
    console.print(table)


@app.command(name="chat")
def chat_command(
    message: str = typer.Argument(..., help="Message to send to the persona"),
    persona_type: str = typer.Option(
        "barkeep", "--persona-type", "-p", help="Template type (see 'templates')"
    ),
    model_id: Optional[str] = typer.Option(
        None, "--model", "-m", help="Catalog model id (defaults to settings.default_model_id)"
    ),
    context: Optional[list[str]] = typer.Option(
        None, "--context", "-c", help="Context entry as key=value (repeatable)"
    ),
) -> None:
    """Run one chat turn with a persona built from a template.

    Examples:
        persona-engine chat "Any rumors tonight?"
        persona-engine chat "We need work" -p quest-npc -c partySize=4 -c level=3
    """
    try:
        template = get_template(persona_type)
    except KeyError as e:
        console.print(f"[red]Error: unknown persona type '{persona_type}'[/red]")
        raise typer.Exit(1) from e

    context_map = _parse_context(context)
    persona = create_persona_from_template(template)

    try:
        response = asyncio.run(
            _run_turn(persona, message, model_id or settings.default_model_id, context_map)
        )
    except (LLMClientError, ModelConfigurationError, ConfigLoadError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from e

    console.print(f"\n[bold blue]{persona.name}:[/bold blue]")
    if response.narration:
        console.print(f"[italic dim]{response.narration}[/italic dim]")
    console.print(response.message)

    for quest in response.quests or []:
        body = (
            f"{quest.description}\n\n"
            f"[bold]Party size:[/bold] {quest.party_size}   [bold]Level:[/bold] {quest.level}"
        )
        if quest.rewards:
            body += f"\n[bold]Rewards:[/bold] {quest.rewards}"
        console.print(Panel(body, title=f"Quest: {quest.title}", border_style="yellow"))

    if persona.memory:
        console.print(f"\n[dim]Memories: {len(persona.memory)}[/dim]")


def _print_progress(progress: ModelProgress) -> None:
    console.print(f"[dim]{progress['text']} ({progress['progress']:.0%})[/dim]")


async def _run_turn(
    persona: Persona, message: str, model_id: str, context: dict[str, str] | None
) -> ChatResponse:
    """Initialize the Ollama backend and run one turn.

    Args:
        persona: Persona to speak as.
        message: The user's message.
        model_id: Catalog model id.
        context: Optional context map.

    Returns:
        The persona's reply.
    """
    if not await is_ollama_available():
        raise LLMClientError(
            f"Ollama service not available at {settings.ollama_base_url}. "
            "Make sure Ollama is running."
        )

    engine = PersonaEngine()
    try:
        await engine.init_model(model_id, progress_callback=_print_progress)
        return await engine.chat(persona, message, context=context)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    app()
