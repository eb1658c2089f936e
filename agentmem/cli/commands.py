"""CLI commands for agentmem."""

import asyncio
import json
from pathlib import Path

import typer

from agentmem import __version__
from agentmem.agent.tools.memory import build_memory_tools
from agentmem.agent.tools.registry import ToolRegistry
from agentmem.agent.tools.tool_details import MUTATING_OPS
from agentmem.config.loader import load_config
from agentmem.config.schema import Config
from agentmem.logging import setup_logging
from agentmem.memory.persistence import MemoryPersistence
from agentmem.session.registry import ManagerRegistry

app = typer.Typer(
    name="agentmem",
    help="Persistent lane/persona memory for long-lived agents",
    no_args_is_help=True,
)


def version_callback(value: bool):
    if value:
        typer.echo(f"agentmem v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
):
    """agentmem - persistent memory for agents."""


def _build(config: Config, root: Path | None) -> tuple[ManagerRegistry, ToolRegistry]:
    setup_logging(json_output=config.logging.json_output, level=config.logging.level)
    persistence = MemoryPersistence(root or config.storage.root_path)
    managers = ManagerRegistry(persistence, config.memory)
    return managers, build_memory_tools(managers, ToolRegistry(audit=False))


@app.command()
def status(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    root: Path = typer.Option(None, "--root", help="Override storage root"),
):
    """Show persona counts, buffer size and advisory flags for an agent."""
    managers, _ = _build(load_config(), root)
    manager = managers.get_or_create(agent_id)
    if not manager.load():
        typer.echo(f"No stored memory for {agent_id}", err=True)
    typer.echo(json.dumps(manager.status().to_dict(), indent=2, ensure_ascii=False))


@app.command()
def context(
    agent_id: str = typer.Argument(..., help="Agent identifier"),
    root: Path = typer.Option(None, "--root", help="Override storage root"),
):
    """Print the rendered system-prompt context for an agent."""
    managers, _ = _build(load_config(), root)
    manager = managers.get_or_create(agent_id)
    manager.load()
    typer.echo(manager.render_context())


@app.command()
def tools(
    as_json: bool = typer.Option(False, "--json", help="Print full tool schemas"),
):
    """List the memory tools."""
    _, registry = _build(load_config(), None)
    if as_json:
        typer.echo(json.dumps(registry.get_definitions(), indent=2, ensure_ascii=False))
        return
    for definition in registry.get_definitions():
        fn = definition["function"]
        typer.echo(f"{fn['name']}: {fn['description']}")


@app.command()
def call(
    tool_name: str = typer.Argument(..., help="Tool name, e.g. memory_status"),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object"),
    root: Path = typer.Option(None, "--root", help="Override storage root"),
    save: bool = typer.Option(False, "--save", help="Persist state after a mutating tool"),
):
    """Run one memory tool against freshly loaded state."""
    try:
        params = json.loads(args)
    except json.JSONDecodeError as e:
        typer.echo(f"Invalid --args JSON: {e}", err=True)
        raise typer.Exit(2)
    if not isinstance(params, dict):
        typer.echo("--args must be a JSON object", err=True)
        raise typer.Exit(2)

    managers, registry = _build(load_config(), root)
    agent_id = params.get("agent_id")
    if isinstance(agent_id, str) and tool_name != "memory_load":
        managers.get_or_create(agent_id).load()

    result = asyncio.run(registry.execute_result(tool_name, params))
    typer.echo(result.text)

    if result.is_error:
        raise typer.Exit(1)
    if save and isinstance(agent_id, str) and tool_name in MUTATING_OPS:
        managers.get_or_create(agent_id).save()


if __name__ == "__main__":
    app()
