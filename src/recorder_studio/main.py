"""
Recorder Studio - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--dialect, --store, etc.)
    2. Config file (recorder_studio.yaml)
    3. Environment variables (RECORDER_STUDIO__RECORDER__DIALECT, etc.)

Usage:
    recorder-studio record https://example.com --name login
    recorder-studio generate --record login --dialect puppeteer
    recorder-studio replay --record login --port 9222
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from recorder_studio import __version__
from recorder_studio.config import Settings, get_settings
from recorder_studio.exceptions import (
    ActionValidationError,
    ConfigurationError,
    RecordExistsError,
    RecorderStudioError,
    ReplayError,
)
from recorder_studio.recorder.actions import Action
from recorder_studio.recorder.state import AssertionKind
from recorder_studio.recorder.script_generator import GENERATORS, generate as generate_code
from recorder_studio.replay import WebSocketDebuggerTarget, discover_active_tab
from recorder_studio.storage import ActionLogMirror, JsonFileStore, NamedRecords
from recorder_studio.studio import RecorderStudio
from recorder_studio.utils.logging import setup_logging

# Create the CLI app
app = typer.Typer(
    name="recorder-studio",
    help="Record browser interactions, generate test code and replay it",
    add_completion=False,
)
records_app = typer.Typer(help="Manage saved records")
app.add_typer(records_app, name="records")

console = Console()
logger = logging.getLogger(__name__)

ASSERTION_KEYS = {
    "t": AssertionKind.TEXT,
    "c": AssertionKind.COLOR,
    "b": AssertionKind.BACKGROUND_COLOR,
    "v": AssertionKind.VISIBLE,
}


def _init(verbose: bool, store_path: Optional[str]) -> tuple:
    """Load settings, configure logging and open the store."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        _fail(e)
    level = "DEBUG" if verbose or settings.debug else settings.logging.level
    setup_logging(level, settings.logging.file, settings.logging.json_format, settings.logging.format)
    store = JsonFileStore(store_path or settings.storage.path)
    return settings, store


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _read_actions_file(path: Path) -> List[Action]:
    """Actions from a JSON file: a list of actions or an object with ``actions``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ActionValidationError(f"Cannot read actions from {path}: {e}")
    if isinstance(data, dict):
        data = data.get("actions", data.get("recordedActions"))
    if not isinstance(data, list):
        raise ActionValidationError(f"{path} does not contain a list of actions")
    return [Action.from_dict(item) for item in data]


def _resolve_actions(store: JsonFileStore, record: Optional[str], file: Optional[Path]) -> List[Action]:
    if record and file:
        raise typer.BadParameter("Use either --record or --file, not both")
    if record:
        return NamedRecords(store).get(record).actions
    if file:
        return _read_actions_file(file)
    return ActionLogMirror(store).restore()


def _actions_table(actions: List[Action], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Locator", style="dim", overflow="fold")
    for index, action in enumerate(actions, start=1):
        table.add_row(str(index), action.kind.value, escape(action.description), escape(action.locator or ""))
    return table


# =============================================================================
# RECORD
# =============================================================================

@app.command()
def record(
    url: str = typer.Argument(..., help="Page to open for recording"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Save the result as a named record"),
    store_path: Optional[str] = typer.Option(None, "--store", "-s", help="JSON store file (default: from config)"),
    browser: str = typer.Option("chromium", "--browser", "-b", help="Browser: chromium, chrome, msedge"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Open a browser and record interactions until Enter is pressed.

    Keyboard commands while recording:
        t / c / b / v   arm a text / color / background-color / visible assertion
        p               pause or resume
        w <seconds>     insert an active wait
        # <text>        insert a comment
        Enter           stop
    """
    settings, store = _init(verbose, store_path)
    channel = browser if browser in ("chrome", "chrome-beta", "msedge", "msedge-beta") else settings.browser.channel

    console.print(Panel.fit(
        f"[bold blue]Recorder Studio[/bold blue]\n"
        f"[dim]URL:[/dim] {escape(url)}\n"
        f"[dim]Store:[/dim] {store.path}\n"
        f"[dim]Keys:[/dim] t/c/b/v assert, p pause, w N wait, # comment, Enter stop",
        border_style="blue",
    ))

    try:
        studio = asyncio.run(_record_async(url, settings, store, channel))
    except RecorderStudioError as e:
        _fail(e)

    console.print(_actions_table(studio.actions, f"Recorded {len(studio.actions)} actions"))

    if name and studio.actions:
        try:
            saved = studio.save(name)
        except RecordExistsError:
            if not typer.confirm(f"Record '{name}' exists. Overwrite?"):
                console.print("[yellow]Not saved[/yellow]")
                return
            saved = studio.save(name, overwrite=True)
        except RecorderStudioError as e:
            _fail(e)
        console.print(f"[green]✓ Saved record '{escape(saved.name)}'[/green]")


async def _record_async(url: str, settings: Settings, store: JsonFileStore, channel: Optional[str]) -> RecorderStudio:
    from playwright.async_api import async_playwright

    studio = RecorderStudio(store=store, settings=settings)
    studio.log.clear()

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=settings.browser.headless, channel=channel)
        try:
            context = await browser.new_context(viewport={
                "width": settings.browser.viewport_width,
                "height": settings.browser.viewport_height,
            })
            page = await context.new_page()
            page.set_default_timeout(settings.browser.timeout_ms)
            await page.goto(url, wait_until="domcontentloaded")
            await studio.start_recording(page)

            while True:
                line = (await asyncio.to_thread(input, f"[{studio.state.label}] > ")).strip()
                if not line:
                    break
                await _handle_command(studio, line)

            await studio.close()
        finally:
            await browser.close()

    return studio


async def _handle_command(studio: RecorderStudio, line: str) -> None:
    key = line[0].lower()
    if line.startswith("#"):
        try:
            studio.log.insert_comment(line[1:])
        except ActionValidationError as e:
            console.print(f"[red]{escape(e.message)}[/red]")
    elif key == "w":
        try:
            studio.log.insert_wait(int(line[1:].strip()))
        except ValueError:
            console.print("[red]Usage: w <seconds>[/red]")
        except ActionValidationError as e:
            console.print(f"[red]{escape(e.message)}[/red]")
    elif key == "p" and len(line) == 1:
        recording = await studio.toggle_recording()
        console.print(f"[dim]Recording {'resumed' if recording else 'paused'}[/dim]")
    elif key in ASSERTION_KEYS and len(line) == 1:
        if await studio.arm_assertion(ASSERTION_KEYS[key]):
            console.print(f"[dim]Click an element to assert its {ASSERTION_KEYS[key].value}[/dim]")
        else:
            console.print("[yellow]Resume recording first[/yellow]")
    else:
        console.print(f"[yellow]Unknown command: {escape(line)}[/yellow]")


# =============================================================================
# GENERATE
# =============================================================================

@app.command()
def generate(
    record: Optional[str] = typer.Option(None, "--record", "-r", help="Named record to generate from"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON file with actions"),
    dialect: Optional[str] = typer.Option(
        None, "--dialect", "-d", help=f"Code dialect: {', '.join(GENERATORS)} (default: from config)"
    ),
    page_name: Optional[str] = typer.Option(None, "--page-name", "-p", help="Page variable name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write code to this file"),
    store_path: Optional[str] = typer.Option(None, "--store", "-s", help="JSON store file (default: from config)"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Generate automation code from a record, a file, or the last recording.
    """
    settings, store = _init(verbose, store_path)

    try:
        actions = _resolve_actions(store, record, file)
        code = generate_code(
            actions,
            dialect=dialect or settings.recorder.dialect,
            page_name=page_name or settings.recorder.page_name,
        )
    except RecorderStudioError as e:
        _fail(e)

    if not actions:
        console.print("[yellow]No actions to generate code from[/yellow]")
        raise typer.Exit(1)

    if output:
        output.write_text(code, encoding="utf-8")
        console.print(f"[green]✓ Wrote {len(actions)} actions to {output}[/green]")
    else:
        typer.echo(code)


# =============================================================================
# REPLAY
# =============================================================================

@app.command()
def replay(
    record: Optional[str] = typer.Option(None, "--record", "-r", help="Named record to replay"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="JSON file with actions"),
    cdp_url: Optional[str] = typer.Option(None, "--cdp-url", help="DevTools websocket URL of the tab"),
    host: Optional[str] = typer.Option(None, "--host", help="DevTools host (default: from config)"),
    port: Optional[int] = typer.Option(None, "--port", help="DevTools port (default: from config)"),
    store_path: Optional[str] = typer.Option(None, "--store", "-s", help="JSON store file (default: from config)"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Replay actions in the active tab of a Chrome started with --remote-debugging-port.
    """
    settings, store = _init(verbose, store_path)

    try:
        actions = _resolve_actions(store, record, file)
    except RecorderStudioError as e:
        _fail(e)

    if not actions:
        console.print("[yellow]No actions to replay[/yellow]")
        raise typer.Exit(1)

    try:
        result = asyncio.run(_replay_async(actions, settings, cdp_url, host, port))
    except ReplayError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(1)
    except RecorderStudioError as e:
        _fail(e)

    console.print(
        f"[green]✓ Replayed {result.steps_executed} actions[/green] "
        f"[dim]({result.steps_skipped} skipped, {result.duration_ms}ms)[/dim]"
    )


async def _replay_async(
    actions: List[Action],
    settings: Settings,
    cdp_url: Optional[str],
    host: Optional[str],
    port: Optional[int],
):
    ws_url = cdp_url or await discover_active_tab(
        host or settings.replay.devtools_host,
        port or settings.replay.devtools_port,
    )
    studio = RecorderStudio(settings=settings)
    studio.log.replace(actions)
    target = WebSocketDebuggerTarget(ws_url, command_timeout_s=settings.replay.command_timeout_s)
    return await studio.replay(target)


# =============================================================================
# RECORDS
# =============================================================================

@records_app.command("list")
def records_list(
    store_path: Optional[str] = typer.Option(None, "--store", "-s", help="JSON store file (default: from config)"),
):
    """List saved records."""
    _, store = _init(False, store_path)
    try:
        records = NamedRecords(store).list()
    except RecorderStudioError as e:
        _fail(e)

    if not records:
        console.print("[dim]No saved records[/dim]")
        return

    table = Table(title="Saved records")
    table.add_column("Name", style="cyan")
    table.add_column("Actions", justify="right")
    table.add_column("Updated", style="dim")
    for item in records:
        table.add_row(escape(item.name), str(len(item.actions)), item.updated_at)
    console.print(table)


@records_app.command("show")
def records_show(
    name: str = typer.Argument(..., help="Record name"),
    store_path: Optional[str] = typer.Option(None, "--store", "-s", help="JSON store file (default: from config)"),
):
    """Show the actions of a saved record."""
    _, store = _init(False, store_path)
    try:
        item = NamedRecords(store).get(name)
    except RecorderStudioError as e:
        _fail(e)
    console.print(_actions_table(item.actions, f"{escape(item.name)} ({item.updated_at})"))


@records_app.command("delete")
def records_delete(
    name: str = typer.Argument(..., help="Record name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    store_path: Optional[str] = typer.Option(None, "--store", "-s", help="JSON store file (default: from config)"),
):
    """Delete a saved record."""
    _, store = _init(False, store_path)
    if not yes and not typer.confirm(f"Delete record '{name}'?"):
        raise typer.Exit(0)
    try:
        NamedRecords(store).delete(name)
    except RecorderStudioError as e:
        _fail(e)
    console.print(f"[green]✓ Deleted record '{escape(name)}'[/green]")


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]Recorder Studio[/bold] v{__version__}")


if __name__ == "__main__":
    app()
