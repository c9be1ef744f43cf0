from __future__ import annotations
import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional
import typer

from .bootstrap import build_client
from .config_loader import ConfigError
from .core.errors import DispatchError
from .core.payload import ResponseMode
from .core.responses import BufferedResponse, ResponseHandle
from .logging_config import init_logging

app = typer.Typer(add_completion=False, help="Call Dify app endpoints from the command line.")

DEFAULT_CONFIG = Path("config/default.yaml")

Call = Callable[[Dict[str, Any]], Awaitable[ResponseHandle]]


def _parse_inputs(raw: str) -> Dict[str, Any]:
    try:
        val = json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--inputs must be JSON: {e}")
    if not isinstance(val, dict):
        raise typer.BadParameter("--inputs must be a JSON object")
    return val


def _mode(stream: bool) -> ResponseMode:
    return ResponseMode.STREAM if stream else ResponseMode.BLOCK


async def _emit(handle: ResponseHandle) -> int:
    if isinstance(handle, BufferedResponse):
        typer.echo(handle.text())
    else:
        async with handle:
            async for chunk in handle.iter_chunks():
                typer.echo(chunk.decode("utf-8", errors="replace"), nl=False)
        typer.echo("")
    if not handle.ok:
        typer.echo(f"[status {handle.status}]", err=True)
        return 1
    return 0


def _run(config: Path, app_type: Optional[str], call: Call, log_level: Optional[str] = None) -> None:
    try:
        ctx = build_client(config, app=app_type)
    except (ConfigError, FileNotFoundError) as e:
        typer.echo(f"[config] {e}", err=True)
        raise typer.Exit(code=2)

    level = log_level or (ctx["cfg"].get("logging") or {}).get("level") or "WARNING"
    init_logging(level)

    async def main() -> int:
        try:
            handle = await call(ctx)
            return await _emit(handle)
        finally:
            await ctx["dify_client"].close()

    try:
        code = asyncio.run(main())
    except DispatchError as e:
        typer.echo(f"[error] {e}", err=True)
        raise typer.Exit(code=2)
    raise typer.Exit(code=code)


ConfigOpt = typer.Option(DEFAULT_CONFIG, "--config", "-c", help="YAML config file.")
UserOpt = typer.Option("cli-user", "--user", "-u", help="End-user identifier sent to Dify.")
StreamOpt = typer.Option(False, "--stream/--block", help="Streaming or blocking response mode.")
InputsOpt = typer.Option("{}", "--inputs", help="App input variables as a JSON object.")
LogOpt = typer.Option(None, "--log-level", help="Overrides logging.level from the config.")


@app.command()
def chat(
    query: str,
    config: Path = ConfigOpt,
    user: str = UserOpt,
    stream: bool = StreamOpt,
    conversation_id: Optional[str] = typer.Option(None, "--conversation-id"),
    inputs: str = InputsOpt,
    log_level: Optional[str] = LogOpt,
):
    """Send a chat message."""
    values = _parse_inputs(inputs)
    _run(config, "chat", lambda ctx: ctx["app_client"].create_chat_message(
        values, query, user, _mode(stream), conversation_id=conversation_id,
    ), log_level)


@app.command()
def complete(
    config: Path = ConfigOpt,
    user: str = UserOpt,
    stream: bool = StreamOpt,
    inputs: str = InputsOpt,
    log_level: Optional[str] = LogOpt,
):
    """Request a text completion."""
    values = _parse_inputs(inputs)
    _run(config, "completion", lambda ctx: ctx["app_client"].create_completion_message(
        values, _mode(stream), user,
    ), log_level)


@app.command("run-workflow")
def run_workflow(
    config: Path = ConfigOpt,
    user: Optional[str] = typer.Option(None, "--user", "-u"),
    stream: bool = StreamOpt,
    inputs: str = InputsOpt,
    log_level: Optional[str] = LogOpt,
):
    """Run a workflow app."""
    values = _parse_inputs(inputs)
    _run(config, "workflow", lambda ctx: ctx["app_client"].run(values, _mode(stream), user), log_level)


@app.command()
def feedback(
    message_id: str,
    like: bool = typer.Option(True, "--like/--dislike"),
    config: Path = ConfigOpt,
    user: str = UserOpt,
    log_level: Optional[str] = LogOpt,
):
    """Rate a message."""
    rating = "like" if like else "dislike"
    _run(config, None, lambda ctx: ctx["dify_client"].message_feedback(message_id, rating, user), log_level)


@app.command()
def parameters(
    config: Path = ConfigOpt,
    user: str = UserOpt,
    log_level: Optional[str] = LogOpt,
):
    """Show the app's input parameters."""
    _run(config, None, lambda ctx: ctx["dify_client"].get_application_parameters(user), log_level)


@app.command()
def upload(
    file_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    config: Path = ConfigOpt,
    user: str = UserOpt,
    log_level: Optional[str] = LogOpt,
):
    """Upload a file for later use in messages."""
    _run(config, None, lambda ctx: ctx["dify_client"].file_upload(user, file_path), log_level)


@app.command("create-dataset")
def create_dataset(
    name: str,
    config: Path = ConfigOpt,
    log_level: Optional[str] = LogOpt,
):
    """Create an empty knowledge-base dataset."""
    _run(config, "knowledge", lambda ctx: ctx["app_client"].create_dataset(name), log_level)
