"""
adapters.cli.main - CLI adapter for the tool-routing agent.

Mirrors src/adapters/rest/ but for terminal use. Uses the same
ServiceFactory and Orchestrator as the REST API so all behaviour
(dispatching, hosted tools, workflows) is identical.

Commands
--------
  ask        One-shot request (--enable/--disable flags for this run)
  chat       Interactive session (/flags, /toggle <flag>, /tools inside)
  tools      List registered tools, hosted tools and workflows
  flags      Show feature flags as configured by the environment
  workflow   Run weather or search workflow directly

Feature flags live in the process, so a change made here lasts until the
command exits. Persistent defaults come from FLAG_<NAME> in the environment.

Usage
-----
  python src/adapters/cli/main.py ask "Calculate 15 * 23"
  python src/adapters/cli/main.py ask --disable hosted-search "search for python news"
  python src/adapters/cli/main.py workflow weather Paris --unit celsius
  python src/adapters/cli/main.py chat
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# ── Ensure src/ is on the path ──
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from agent.executor import Orchestrator
from application.dto import AgentOptions
from domain.exceptions import UnknownFlagError, UpstreamServiceError
from domain.models import AgentResponse
from factory import ServiceFactory
from infrastructure.config import Settings

__version__ = "0.1.0"

console = Console()
app = typer.Typer(
    help="Tool-Routing Agent CLI",
    add_completion=False,
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _make_orchestrator() -> Orchestrator:
    config = Settings.from_env()
    logging.basicConfig(level=config.log_level.upper())
    return ServiceFactory(config).create_orchestrator()


def _apply_flags(orchestrator: Orchestrator, enable: List[str], disable: List[str]) -> None:
    try:
        for name in enable:
            orchestrator.enable_flag(name)
        for name in disable:
            orchestrator.disable_flag(name)
    except UnknownFlagError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1)


def _flags_table(flags: dict[str, bool]) -> Table:
    t = Table(box=box.SIMPLE, show_header=True, padding=(0, 2))
    t.add_column("Flag", style="bold")
    t.add_column("Enabled")
    for name, value in flags.items():
        t.add_row(name.replace("_", "-"), "[green]yes[/green]" if value else "[dim]no[/dim]")
    return t


def _print_response(response: AgentResponse, *, show_tools: bool) -> None:
    if response.structured_output is not None:
        body = Markdown(f"```json\n{json.dumps(response.structured_output, indent=2)}\n```")
    else:
        body = Markdown(response.content)
    console.print(Panel(body, title="Agent", border_style="green"))

    if show_tools and response.tool_results:
        t = Table(box=box.SIMPLE, show_header=True, padding=(0, 2))
        t.add_column("Tool", style="bold")
        t.add_column("Result")
        for entry in response.tool_results:
            t.add_row(entry["name"], json.dumps(entry["result"], default=str)[:200])
        console.print(Panel(t, title="Tool results", border_style="blue"))


async def _ask(orchestrator: Orchestrator, message: str, options: AgentOptions) -> Optional[AgentResponse]:
    try:
        with console.status("[bold cyan]Thinking…", spinner="dots"):
            return await orchestrator.run_agent(message, options)
    except UpstreamServiceError as exc:
        console.print(Panel(f"[bold red]{exc}[/bold red]", title="Upstream error", border_style="red"))
        return None


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"toolroute-agent v{__version__}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands: Agent
# ---------------------------------------------------------------------------

@app.command()
def ask(
    message: str = typer.Argument(..., help="Your request."),
    temperature: Optional[float] = typer.Option(None, help="Sampling temperature."),
    max_output_tokens: Optional[int] = typer.Option(None, help="Cap on answer length."),
    enable: List[str] = typer.Option([], "--enable", "-e", help="Enable a feature flag for this run."),
    disable: List[str] = typer.Option([], "--disable", "-d", help="Disable a feature flag for this run."),
    show_tools: bool = typer.Option(False, "--show-tools", help="Print the tool results too."),
) -> None:
    """Send one message to the agent."""
    orchestrator = _make_orchestrator()
    _apply_flags(orchestrator, enable, disable)
    options = AgentOptions(temperature=temperature, max_output_tokens=max_output_tokens)

    async def _run() -> None:
        response = await _ask(orchestrator, message, options)
        if response is None:
            raise typer.Exit(code=1)
        _print_response(response, show_tools=show_tools)

    asyncio.run(_run())


@app.command()
def chat() -> None:
    """Start an interactive session."""
    orchestrator = _make_orchestrator()

    async def _run() -> None:
        console.print(Panel(
            f"[bold]Tool-Routing Agent[/bold] (mode: {orchestrator.mode})\n"
            "Type a request, [bold]/flags[/bold], [bold]/toggle <flag>[/bold], "
            "[bold]/tools[/bold], or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
            border_style="cyan",
        ))

        while True:
            try:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
            except (KeyboardInterrupt, EOFError):
                console.print("\n[dim]Goodbye![/dim]")
                break

            text = user_input.strip()
            if text.lower() in ("exit", "quit", "q", "bye"):
                console.print("[dim]Goodbye![/dim]")
                break
            if not text:
                continue

            if text == "/flags":
                console.print(_flags_table(orchestrator.flags.as_dict()))
                continue
            if text.startswith("/toggle"):
                name = text[len("/toggle"):].strip()
                try:
                    console.print(_flags_table(orchestrator.toggle_flag(name)))
                except UnknownFlagError as exc:
                    console.print(f"[bold red]{exc}[/bold red]")
                continue
            if text == "/tools":
                _print_tools(orchestrator)
                continue

            response = await _ask(orchestrator, text, AgentOptions())
            if response is not None:
                console.print()
                _print_response(response, show_tools=False)

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Commands: Listings
# ---------------------------------------------------------------------------

def _print_tools(orchestrator: Orchestrator) -> None:
    available = orchestrator.get_available_tools()
    t = Table(box=box.SIMPLE, show_header=True, padding=(0, 2))
    t.add_column("Kind", style="bold")
    t.add_column("Names")
    t.add_row("Local tools", ", ".join(available.custom_tools) or "[dim]none[/dim]")
    t.add_row("Hosted tools", ", ".join(available.built_in_tools) or "[dim]none[/dim]")
    t.add_row("Workflows", ", ".join(available.workflows) or "[dim]none[/dim]")
    console.print(Panel(t, title="Available tools", border_style="blue"))


@app.command()
def tools(
    schemas: bool = typer.Option(False, "--schemas", help="Print full function declarations."),
) -> None:
    """List registered tools, enabled hosted tools and workflows."""
    orchestrator = _make_orchestrator()
    _print_tools(orchestrator)
    if schemas:
        console.print_json(json.dumps(orchestrator.describe_tools()))


@app.command()
def flags() -> None:
    """Show feature flags as configured for this process."""
    orchestrator = _make_orchestrator()
    console.print(Panel(_flags_table(orchestrator.flags.as_dict()), title="Feature flags", border_style="yellow"))


# ---------------------------------------------------------------------------
# Commands: Workflows
# ---------------------------------------------------------------------------

@app.command()
def workflow(
    name: str = typer.Argument(..., help="'weather' or 'search'."),
    value: str = typer.Argument(..., help="Location (weather) or query (search)."),
    unit: str = typer.Option("fahrenheit", help="Temperature unit for the weather workflow."),
) -> None:
    """Run a workflow directly, bypassing intent classification."""
    orchestrator = _make_orchestrator()

    async def _run() -> None:
        with console.status(f"[bold cyan]Running {name} workflow…", spinner="dots"):
            if name == "weather":
                result = await orchestrator.run_weather_workflow(value, unit)
            elif name == "search":
                result = await orchestrator.run_search_workflow(value)
            else:
                console.print(f"[bold red]Unknown workflow '{name}'.[/bold red] Use 'weather' or 'search'.")
                raise typer.Exit(code=1)

        if not result.success:
            console.print(Panel(f"[bold red]{result.error}[/bold red]", border_style="red"))
            raise typer.Exit(code=1)

        data = result.data
        if name == "weather":
            weather = data["weather_data"]
            lines = [
                f"[bold]{data['location']}[/bold]: {weather['temperature']}° "
                f"({data['unit']}), {weather['condition']}",
                "",
                *(f"• {r}" for r in data["recommendations"]),
            ]
            console.print(Panel("\n".join(lines), title="Weather", border_style="green"))
        else:
            console.print(Panel(Markdown(data["summary"]), title=f"Search: {data['query']}", border_style="green"))

    asyncio.run(_run())


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Tool-Routing Agent CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
