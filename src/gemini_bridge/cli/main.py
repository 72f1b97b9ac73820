"""gemini-bridge CLI entry point."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from gemini_bridge.cache import ResponseCache
from gemini_bridge.config import get_logging_settings
from gemini_bridge.container import get_container
from gemini_bridge.exceptions import GeminiError
from gemini_bridge.llm import GeminiResponse
from gemini_bridge.utils.logging import setup_logging

app = typer.Typer(name="gemini-bridge", help="Gemini API client utilities")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs")) -> None:
    """Gemini API client utilities"""
    setup_logging(level="DEBUG" if verbose else get_logging_settings().level)


@app.command()
def test(
    prompt: str = typer.Argument(..., help="The prompt to send to the Gemini API"),
    model: str | None = typer.Option(None, "--model", "-m", help="The model to use"),
) -> None:
    """Send a prompt and show the reply with token usage"""
    console.print("Sending prompt to Gemini API...", style="blue")

    try:
        response = asyncio.run(_generate(prompt, model))
    except GeminiError as e:
        console.print(f"Error: {e.message}", style="bold red")
        raise typer.Exit(code=1) from e

    console.print("Response:", style="bold green")
    console.print(response.content(), markup=False)

    usage = response.token_usage()
    table = Table(title="Token Usage")
    table.add_column("Prompt Tokens", justify="right")
    table.add_column("Completion Tokens", justify="right")
    table.add_column("Total Tokens", justify="right")
    table.add_column("Estimated Cost", justify="right")
    table.add_row(
        str(usage.prompt_tokens),
        str(usage.completion_tokens),
        str(usage.total_tokens),
        f"${response.estimated_cost():.6f}",
    )
    console.print(table)


@app.command("cache-clear")
def cache_clear(
    key: str | None = typer.Argument(None, help="Specific fingerprint to clear"),
) -> None:
    """Clear cached responses (one fingerprint, or everything under the prefix)"""
    try:
        removed = asyncio.run(_clear(key))
    except GeminiError as e:
        console.print(f"Error: {e.message}", style="bold red")
        raise typer.Exit(code=1) from e

    if key is None:
        console.print(f"Cleared {removed} cached Gemini responses.", style="green")
    elif removed:
        console.print(f"Cache key '{key}' cleared successfully.", style="green")
    else:
        console.print(f"Cache key '{key}' not found or could not be cleared.", style="yellow")


async def _generate(prompt: str, model: str | None) -> GeminiResponse:
    container = get_container()
    container.initialize()
    try:
        options = {"model": model} if model else None
        return await container.gemini.generate(prompt, options)
    finally:
        await container.close()


async def _clear(key: str | None) -> int:
    cache = ResponseCache.from_settings()
    try:
        if key is None:
            return await cache.clear()
        return int(await cache.forget(key))
    finally:
        await cache.close()


if __name__ == "__main__":
    app()
