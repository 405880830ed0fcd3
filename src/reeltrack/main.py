"""Main CLI entry point for Reeltrack.

Usage:
    reeltrack serve --port 5000
    reeltrack script --purpose educational --tone casual --length 20
    reeltrack enhance "a fox in the snow" --type image
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from reeltrack.config import ReeltrackConfig, load_config
from reeltrack.generation.fallback import CannedScriptWriter
from reeltrack.generation.llm_client import ChatCompletionClient
from reeltrack.generation.script import (
    GenerationError,
    GeneratorUnavailableError,
    PromptKind,
    ScriptGenerator,
    ScriptRequest,
    ScriptResult,
    duration_window,
    target_word_count,
)
from reeltrack.logging import setup_logging
from reeltrack.models import Purpose, Tone

app = typer.Typer(
    name="reeltrack",
    help="Reeltrack: project tracking for short-form video production",
    no_args_is_help=True,
)

console = Console()

_config: ReeltrackConfig | None = None


def get_config() -> ReeltrackConfig:
    """Return the configuration loaded by the CLI callback.

    Raises:
        RuntimeError: If called before the callback ran
    """
    if _config is None:
        raise RuntimeError("Configuration not loaded. Run through the reeltrack CLI.")
    return _config


def _build_generator(config: ReeltrackConfig) -> ScriptGenerator:
    return ScriptGenerator(
        ChatCompletionClient(config.llm),
        enhance_temperature=config.llm.enhance_temperature,
    )


async def _generate_script(config: ReeltrackConfig, request: ScriptRequest) -> tuple[ScriptResult, bool]:
    generator = _build_generator(config)
    try:
        return await generator.generate(request), False
    except GeneratorUnavailableError:
        if not config.llm.fallback_enabled:
            raise
        return await CannedScriptWriter().generate(request), True
    finally:
        await generator.close()


async def _enhance_prompt(config: ReeltrackConfig, prompt: str, kind: PromptKind) -> tuple[str, bool]:
    generator = _build_generator(config)
    try:
        return await generator.enhance_prompt(prompt, kind), False
    except GeneratorUnavailableError:
        if not config.llm.fallback_enabled:
            raise
        return await CannedScriptWriter().enhance_prompt(prompt, kind), True
    finally:
        await generator.close()


@app.command()
def serve(
    host: Annotated[
        Optional[str],
        typer.Option("--host", "-h", help="Host to bind to (default from config)"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to bind to (default from config)"),
    ] = None,
) -> None:
    """Start the Reeltrack API server."""
    import uvicorn

    from reeltrack.web.app import create_app

    config = get_config()
    bind_host = host or config.web.host
    bind_port = port or config.web.port

    console.print("[bold cyan]Starting Reeltrack API Server[/bold cyan]")
    console.print(f"[dim]Host:[/dim] {bind_host}")
    console.print(f"[dim]Port:[/dim] {bind_port}")
    console.print(f"[dim]Store:[/dim] {config.storage.backend}")
    console.print()

    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_level=config.logging.level.lower(),
    )


@app.command()
def script(
    purpose: Annotated[Purpose, typer.Option("--purpose", help="What the video is for")],
    tone: Annotated[Tone, typer.Option("--tone", help="Voice of the script")],
    key_phrase: Annotated[
        Optional[str],
        typer.Option("--key-phrase", help="Phrase the script must include"),
    ] = None,
    keyword: Annotated[
        Optional[str],
        typer.Option("--keyword", help="Keyword the script must emphasize"),
    ] = None,
    length: Annotated[
        int,
        typer.Option("--length", "-l", min=1, max=600, help="Target video length in seconds"),
    ] = 15,
) -> None:
    """Generate a script with image and video prompts."""
    config = get_config()
    request = ScriptRequest(
        purpose=purpose,
        tone=tone,
        key_phrase=key_phrase,
        keyword=keyword,
        video_length=length,
    )

    try:
        result, used_fallback = asyncio.run(_generate_script(config, request))
    except GenerationError as e:
        console.print(f"[red]Script generation failed:[/red] {e}")
        raise typer.Exit(code=1)

    low, high = duration_window(length)
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Script", result.script)
    table.add_row("Image prompt", result.image_prompt)
    table.add_row("Video prompt", result.video_prompt)
    table.add_row("Target", f"~{target_word_count(length)} words, {low}-{high} seconds")

    subtitle = "[yellow]canned content: no LLM configured[/yellow]" if used_fallback else None
    console.print(Panel(table, title=result.title, subtitle=subtitle))


@app.command()
def enhance(
    prompt: Annotated[str, typer.Argument(help="Prompt to enhance")],
    kind: Annotated[
        PromptKind,
        typer.Option("--type", "-t", help="Prompt kind"),
    ] = PromptKind.image,
) -> None:
    """Enhance an image or video generation prompt."""
    config = get_config()
    try:
        enhanced, used_fallback = asyncio.run(_enhance_prompt(config, prompt, kind))
    except GenerationError as e:
        console.print(f"[red]Prompt enhancement failed:[/red] {e}")
        raise typer.Exit(code=1)

    if used_fallback:
        console.print("[yellow]No LLM configured, using canned enhancements[/yellow]")
    console.print(enhanced)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (TOML format)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Load configuration and configure logging."""
    global _config

    try:
        config = load_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(code=1)

    log_config = config.logging
    if verbose:
        log_config = log_config.model_copy(update={"level": "DEBUG"})
    elif ctx.invoked_subcommand != "serve" and log_config.file is None:
        # one-shot commands print their own output to stdout
        log_config = log_config.model_copy(update={"level": "WARNING", "format": "console"})
    setup_logging(log_config)

    _config = config

    if verbose:
        console.print("[dim]Debug logging enabled[/dim]")


if __name__ == "__main__":
    app()
