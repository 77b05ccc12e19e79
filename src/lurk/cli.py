"""Typer CLI for lurk."""

from __future__ import annotations

import json
import platform
from typing import Any

import typer

from lurk.commands import CommandError, PagePayload
from lurk.config import RESUME_FIELDS, load_settings
from lurk.core.app import LurkContext, build_context
from lurk.logging import configure_logging

app = typer.Typer(no_args_is_help=True)


def _context() -> LurkContext:
    settings = load_settings()
    configure_logging(settings)
    return build_context(settings)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _fail(exc: CommandError) -> typer.Exit:
    typer.echo(f"error: {exc}", err=True)
    return typer.Exit(code=1)


def _echo_page(page: PagePayload) -> None:
    typer.echo(page.text)
    typer.echo(f"-- {page.start}-{page.end} of {page.total} --", err=True)


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@app.command("open")
def open_file(path: str = typer.Argument(..., help="Text file to read.")) -> None:
    """Open a document, resuming where it was left off."""

    commands = _context().commands
    try:
        doc = commands.load_file(path)
    except CommandError as exc:
        raise _fail(exc) from exc
    _echo_json({"file_path": doc.file_path, "offset": doc.offset, "length": len(doc.content)})


@app.command()
def show() -> None:
    """Print the current page."""

    try:
        _echo_page(_context().commands.read_page())
    except CommandError as exc:
        raise _fail(exc) from exc


@app.command("next")
def next_page() -> None:
    """Advance one page and print it."""

    try:
        _echo_page(_context().commands.next_page())
    except CommandError as exc:
        raise _fail(exc) from exc


@app.command("prev")
def previous_page() -> None:
    """Go back one page and print it."""

    try:
        _echo_page(_context().commands.previous_page())
    except CommandError as exc:
        raise _fail(exc) from exc


@app.command()
def seek(offset: int = typer.Argument(..., min=0)) -> None:
    """Move the reading position to OFFSET characters."""

    commands = _context().commands
    try:
        commands.current_document()
        commands.update_progress(offset)
        _echo_page(commands.read_page())
    except CommandError as exc:
        raise _fail(exc) from exc


@app.command()
def settings(key: str | None = typer.Argument(None)) -> None:
    """Display current settings or a specific section."""

    data = _context().commands.get_settings().model_dump(mode="json")
    if key:
        data = data.get(key, {})
    _echo_json(data)


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Dotted setting name, e.g. appearance.font_size."),
    value: str = typer.Argument(..., help="JSON value; bare words are taken as strings."),
) -> None:
    """Change a single setting."""

    parts = key.split(".")
    if parts[0] in RESUME_FIELDS:
        typer.echo(f"error: {key} is reading progress, not a setting", err=True)
        raise typer.Exit(code=1)

    commands = _context().commands
    data = commands.get_settings().model_dump(mode="json")
    node = data
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            typer.echo(f"error: unknown setting {key}", err=True)
            raise typer.Exit(code=1)
        node = child
    if parts[-1] not in node:
        typer.echo(f"error: unknown setting {key}", err=True)
        raise typer.Exit(code=1)
    # String settings take the argument verbatim so "30" stays "30".
    node[parts[-1]] = value if isinstance(node[parts[-1]], str) else _parse_value(value)

    try:
        commands.update_settings(data)
    except CommandError as exc:
        raise _fail(exc) from exc
    typer.echo(f"{key} = {json.dumps(node[parts[-1]], ensure_ascii=False)}")


@app.command()
def reset() -> None:
    """Restore default settings, keeping reading progress."""

    try:
        _context().commands.reset_settings()
    except CommandError as exc:
        raise _fail(exc) from exc
    typer.echo("settings reset to defaults")


@app.command()
def doctor() -> None:
    """Print environment diagnostics."""

    settings = load_settings()
    configure_logging(settings)
    info = {
        "python": platform.python_version(),
        "platform": platform.platform(),
        "paths": {
            "home": str(settings.paths.base_dir),
            "config": str(settings.paths.config_file),
            "logs": str(settings.paths.logs_dir),
        },
    }
    _echo_json(info)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
