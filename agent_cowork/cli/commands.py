"""CLI commands for agent-cowork."""

from __future__ import annotations

import asyncio
import shlex
import sys
from typing import TYPE_CHECKING

import typer
from loguru import logger
from rich.console import Console

from agent_cowork import __logo__, __version__

if TYPE_CHECKING:
    from agent_cowork.bridge import CoworkBridge
    from agent_cowork.bus.events import ServerEvent
    from agent_cowork.session.prompt_store import PromptStore

app = typer.Typer(
    name="agent_cowork",
    help="agent-cowork - drive a coding-agent backend from your terminal",
    no_args_is_help=True,
)
prompts_app = typer.Typer(help="Manage the saved prompt library.")
app.add_typer(prompts_app, name="prompts")
console = Console()

CHAT_HELP = """\
Commands:
  /stop              stop the active session
  /new               start a new task (next message creates a session)
  /use ID            make an existing session active
  /sessions          list known sessions
  /attach PATH...    add file contents to the pending prompt
  /cwd [DIR]         set the working directory, or show recent ones
  /insert PROMPT_ID  insert a saved prompt into the pending prompt
  /quit              exit"""


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} agent-cowork v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """agent-cowork entrypoint."""
    del version


@app.command()
def status() -> None:
    """Show agent-cowork configuration status."""
    from agent_cowork.config.loader import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()

    console.print(f"{__logo__} agent-cowork Status\n")
    console.print(f"Config: {config_path} {'[green]OK[/green]' if config_path.exists() else '[dim]defaults[/dim]'}")
    console.print(f"Data dir: {config.data_path}")
    backend = config.backend.command or "[red]not set[/red]"
    console.print(f"Backend: [cyan]{backend}[/cyan]")
    console.print(f"Default cwd: {config.compose.default_cwd or '[dim](none)[/dim]'}")
    console.print(f"Allowed tools: [cyan]{config.compose.allowed_tools}[/cyan]")


@app.command()
def chat(
    backend: str = typer.Option("", "--backend", "-b", help="Backend command (overrides config)."),
    cwd: str = typer.Option("", "--cwd", help="Working directory for new sessions."),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logs."),
) -> None:
    """Interactive session with the agent backend over stdio."""
    from agent_cowork.bridge import CoworkBridge
    from agent_cowork.bus.channel import EventChannel
    from agent_cowork.bus.transport import SubprocessTransport
    from agent_cowork.config.loader import load_config
    from agent_cowork.providers.local import HeuristicTitleGenerator, LocalFileReader
    from agent_cowork.session.prompt_store import PromptStore
    from agent_cowork.utils.helpers import get_data_path

    _configure_logging(verbose)
    config = load_config()
    command = (backend or config.backend.command).strip()
    if not command:
        console.print("[red]No backend command. Use --backend or set backend.command in config.[/red]")
        raise typer.Exit(1)
    if cwd:
        config.compose.default_cwd = cwd

    channel = EventChannel(SubprocessTransport(command, cwd=config.backend.cwd))
    bridge = CoworkBridge(
        channel=channel,
        title_generator=HeuristicTitleGenerator(max_length=config.titles.max_length),
        file_reader=LocalFileReader(max_bytes=config.attachments.max_bytes),
        config=config,
    )
    store = PromptStore(get_data_path(config.data_dir))
    bridge.context.errors.add_listener(lambda message: console.print(f"[red]{message}[/red]"))
    channel.subscribe(_print_server_event)

    async def run() -> None:
        await bridge.open()
        console.print(f"{__logo__} agent-cowork v{__version__}  (/help for commands)")
        try:
            while True:
                line = await asyncio.to_thread(console.input, _prompt_marker(bridge))
                if not await _handle_line(bridge, store, line):
                    break
        finally:
            await bridge.close()

    try:
        asyncio.run(run())
    except (KeyboardInterrupt, EOFError):
        console.print("\nBye.")


def _prompt_marker(bridge: "CoworkBridge") -> str:
    return "[red]■[/red] " if bridge.affordances().is_running else "[cyan]>[/cyan] "


async def _handle_line(bridge: "CoworkBridge", store: "PromptStore", line: str) -> bool:
    """Handle one input line. Returns False to quit."""
    orchestrator = bridge.orchestrator
    ctx = bridge.context
    text = line.strip()

    if not text.startswith("/"):
        if text:
            ctx.buffer.set(f"{ctx.buffer.value}\n{line}" if ctx.buffer.value else line)
        outcome = await bridge.send() if text else await orchestrator.submit()
        logger.debug(f"compose outcome: {outcome.value}")
        return True

    name, _, rest = text.partition(" ")
    args = shlex.split(rest) if rest else []
    if name in ("/quit", "/exit"):
        return False
    if name == "/help":
        console.print(CHAT_HELP)
    elif name == "/stop":
        orchestrator.stop()
    elif name == "/new":
        orchestrator.new_task()
        console.print("[dim]Next message starts a new session.[/dim]")
    elif name == "/use" and args:
        if not orchestrator.select_session(args[0]):
            console.print(f"[yellow]Unknown session {args[0]}[/yellow]")
    elif name == "/sessions":
        for session in bridge.registry.sessions():
            marker = "*" if session.session_id == ctx.active_session_id else " "
            console.print(f"{marker} {session.session_id}  [{session.status.value}]  {session.title}")
    elif name == "/attach" and args:
        report = await bridge.attachments.attach(args)
        for attached in report.attached:
            console.print(f"[green]attached[/green] {attached}")
        for path, error in report.failed.items():
            console.print(f"[red]failed[/red] {path}: {error}")
    elif name == "/cwd" and not rest.strip():
        console.print(f"[dim]cwd = {ctx.cwd or '(none)'}[/dim]")
        for recent in bridge.registry.recent_cwds():
            console.print(f"  {recent}")
    elif name == "/cwd":
        ctx.cwd = rest.strip()
        console.print(f"[dim]cwd = {ctx.cwd}[/dim]")
    elif name == "/insert" and args:
        saved = store.get_prompt(args[0])
        if saved is None:
            console.print(f"[yellow]Unknown prompt {args[0]}[/yellow]")
        else:
            orchestrator.insert_saved_prompt(saved.content)
            console.print(f"[dim]Inserted '{saved.title}'.[/dim]")
    else:
        console.print(f"[yellow]Unknown command {name}. /help lists commands.[/yellow]")
    return True


def _print_server_event(event: "ServerEvent") -> None:
    from agent_cowork.bus.events import RunnerErrorEvent, SessionStatusEvent, StreamMessageEvent

    if isinstance(event, SessionStatusEvent):
        p = event.payload
        console.print(f"[dim]session {p.session_id}: {p.status.value}[/dim]")
    elif isinstance(event, StreamMessageEvent):
        message = event.payload.message
        text = message.get("text") or message.get("content") or message.get("result")
        if isinstance(text, str) and text.strip():
            console.print(text)
    elif isinstance(event, RunnerErrorEvent):
        logger.debug(f"runner error: {event.payload.message}")


@prompts_app.command("list")
def prompts_list() -> None:
    """List saved prompts."""
    store = _prompt_store()
    prompts = store.list_prompts()
    if not prompts:
        console.print("[dim]No saved prompts yet.[/dim]")
        return
    for prompt in prompts:
        preview = " ".join(prompt.content.split())[:60]
        console.print(f"[cyan]{prompt.id}[/cyan]  {prompt.title}  [dim]{preview}[/dim]")


@prompts_app.command("add")
def prompts_add(
    title: str = typer.Argument(..., help="Prompt title."),
    content: str = typer.Argument(..., help="Prompt text."),
) -> None:
    """Save a new prompt."""
    try:
        prompt = _prompt_store().add_prompt(title, content)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]OK[/green] Saved prompt {prompt.id}")


@prompts_app.command("remove")
def prompts_remove(prompt_id: str = typer.Argument(..., help="Prompt id.")) -> None:
    """Delete a saved prompt."""
    if not _prompt_store().remove_prompt(prompt_id):
        console.print(f"[yellow]No prompt {prompt_id}[/yellow]")
        raise typer.Exit(1)
    console.print(f"[green]OK[/green] Removed {prompt_id}")


def _prompt_store() -> "PromptStore":
    from agent_cowork.config.loader import load_config
    from agent_cowork.session.prompt_store import PromptStore
    from agent_cowork.utils.helpers import get_data_path

    return PromptStore(get_data_path(load_config().data_dir))


if __name__ == "__main__":
    app()
