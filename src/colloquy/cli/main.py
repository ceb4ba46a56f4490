"""Colloquy command-line interface."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .. import __version__
from ..core.config import (
    CONFIG_FILENAME,
    get_effective_config,
    load_agents,
    load_api_config,
    write_default_config,
)
from ..core.errors import OrchestrationError
from ..core.orchestrator import Orchestrator
from ..formatters.thread import export_thread_json, render_thread
from ..models.agent import Agent
from ..models.message import Message, MessageStore
from ..providers.base import get_completion_client

console = Console()

EXIT_FAILED = 1
EXIT_CONFIG = 2


class ConsoleListener:
    """Print orchestration progress as agents take their turn."""

    def __init__(self, out: Console):
        self.out = out

    def on_agent_started(self, agent: Agent, parent_id: str) -> None:
        self.out.print(f"  [{agent.color}]u/{escape(agent.name)}[/] [dim]is typing...[/dim]")

    def on_agent_replied(self, agent: Agent, message: Message) -> None:
        self.out.print(f"  [green]OK[/green] u/{escape(agent.name)} replied")

    def on_run_failed(self, error: OrchestrationError) -> None:
        self.out.print(f"  [red]ERROR[/red] {escape(str(error))}")


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


def _build_overrides(
    model: Optional[str], base_url: Optional[str], delay: Optional[float]
) -> Optional[dict]:
    overrides: dict = {}
    if model:
        overrides.setdefault("api", {})["model"] = model
    if base_url:
        overrides.setdefault("api", {})["base_url"] = base_url
    if delay is not None:
        overrides.setdefault("orchestration", {})["reply_delay_seconds"] = delay
    return overrides or None


def _build_orchestrator(config: dict, listener: Optional[ConsoleListener]) -> Orchestrator:
    return Orchestrator(
        client=get_completion_client(config),
        api_config=load_api_config(config),
        agents=load_agents(config),
        reply_delay=float(config.get("orchestration", {}).get("reply_delay_seconds", 1.0)),
        listener=listener,
    )


def _require_api_key(config: dict) -> bool:
    if load_api_config(config).api_key:
        return True
    env_var = config.get("api", {}).get("api_key_env", "COLLOQUY_API_KEY")
    console.print(
        f"  [red]ERROR[/red] No API key configured. Set api.api_key in {CONFIG_FILENAME} "
        f"or the {env_var} environment variable."
    )
    return False


config_option = click.option(
    "--config", "-c", "config_path", type=click.Path(dir_okay=False, path_type=Path),
    help=f"Config file (default: ./{CONFIG_FILENAME})",
)


@click.group()
@click.version_option(__version__, prog_name="colloquy")
def cli() -> None:
    """Colloquy - post to a thread and let a panel of AI agents reply."""


@cli.command()
@click.argument("content")
@config_option
@click.option("--attach", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Attach a text file to the post")
@click.option("--model", type=str, help="Default model override")
@click.option("--base-url", type=str, help="Chat-completion endpoint base URL")
@click.option("--delay", type=float, help="Pause between agent replies, in seconds")
@click.option("--json", "as_json", is_flag=True, help="Print the thread as JSON")
@click.option("--verbose", "-v", is_flag=True)
def post(
    content: str,
    config_path: Optional[Path],
    attach: Optional[Path],
    model: Optional[str],
    base_url: Optional[str],
    delay: Optional[float],
    as_json: bool,
    verbose: bool,
) -> None:
    """Start a new thread with CONTENT and collect every agent's reply."""
    _configure_logging(verbose)
    config = get_effective_config(config_path, _build_overrides(model, base_url, delay))
    if not _require_api_key(config):
        sys.exit(EXIT_CONFIG)

    attachment = attach.read_text(encoding="utf-8", errors="replace") if attach else None
    listener = None if as_json else ConsoleListener(console)
    orchestrator = _build_orchestrator(config, listener)
    store = MessageStore()

    exit_code = 0
    try:
        asyncio.run(orchestrator.post(store, content, attachment=attachment))
    except OrchestrationError as e:
        if as_json:
            click.echo(str(e), err=True)
        exit_code = EXIT_FAILED

    if as_json:
        click.echo(export_thread_json(store.messages))
    else:
        console.print()
        console.print(render_thread(store.messages, orchestrator.agents))
    if exit_code:
        sys.exit(exit_code)


@cli.command()
@config_option
@click.option("--model", type=str, help="Default model override")
@click.option("--base-url", type=str, help="Chat-completion endpoint base URL")
@click.option("--delay", type=float, help="Pause between agent replies, in seconds")
@click.option("--verbose", "-v", is_flag=True)
def chat(
    config_path: Optional[Path],
    model: Optional[str],
    base_url: Optional[str],
    delay: Optional[float],
    verbose: bool,
) -> None:
    """Interactive thread kept in memory for the session.

    Each input replies to a chosen message (default: the latest one).
    Type /thread to reprint the thread and /quit to leave.
    """
    _configure_logging(verbose)
    config = get_effective_config(config_path, _build_overrides(model, base_url, delay))
    if not _require_api_key(config):
        sys.exit(EXIT_CONFIG)

    orchestrator = _build_orchestrator(config, ConsoleListener(console))
    store = MessageStore()

    while True:
        try:
            content = click.prompt("Post" if not len(store) else "Reply", type=str)
        except click.Abort:
            break
        content = content.strip()
        if content == "/quit":
            break
        if content == "/thread":
            console.print(render_thread(store.messages, orchestrator.agents, numbered=True))
            continue
        if not content:
            continue

        parent_id = None
        if len(store):
            target = click.prompt("Reply to #", default=len(store), type=click.IntRange(1, len(store)))
            parent_id = store.messages[target - 1].id

        try:
            asyncio.run(orchestrator.post(store, content, parent_id=parent_id))
        except OrchestrationError:
            # already reported by the listener; replies so far are kept
            pass
        console.print(render_thread(store.messages, orchestrator.agents, numbered=True))


@cli.command()
@config_option
def agents(config_path: Optional[Path]) -> None:
    """List the configured agents."""
    config = get_effective_config(config_path)
    for agent in load_agents(config):
        model = agent.model or "(default model)"
        console.print(
            f"  [{agent.color}]{escape(agent.name)}[/] [dim]{escape(agent.persona)} - {escape(model)}[/dim]"
        )
        console.print(f"    {escape(agent.role)}")


@cli.command()
@click.option("--path", "-p", type=click.Path(file_okay=False, path_type=Path), default=Path("."))
def init(path: Path) -> None:
    """Write a starter colloquy.yaml."""
    target = path / CONFIG_FILENAME
    if write_default_config(target):
        console.print(f"  [green]Initialized[/green] {target}")
    else:
        console.print(f"  [yellow]WARN[/yellow] {target} already exists")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
