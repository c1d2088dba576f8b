from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

import typer

from shipit import __version__
from shipit.cli.pipeline import ConfigLoader, ReleasePipeline
from shipit.core.config import CONFIG_FILE_NAME, ReleaseConfig, load_config
from shipit.core.errors import ConfigurationError, ErrorCode
from shipit.core.result import Err, Ok, Result
from shipit.output.console import ConsoleProtocol, RichConsole
from shipit.output.errors import pipeline_error_exit_code, print_pipeline_error


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def prompt_confirm(prompt: str) -> bool:
    """Interactive confirmation. EOF or Ctrl-C counts as "no"."""
    try:
        return typer.confirm(prompt, default=False)
    except typer.Abort:
        return False


def build_console() -> ConsoleProtocol:
    return RichConsole()


def _config_loader(
    path: Path | None,
    *,
    force_auto_tag: bool,
) -> ConfigLoader:
    def load() -> Result[ReleaseConfig, ConfigurationError]:
        loaded = load_config(path, os.environ)
        if isinstance(loaded, Ok) and force_auto_tag:
            return Ok(replace(loaded.value, auto_tag=True))
        return loaded

    return load


@app.command()
def release(
    args: list[str] | None = typer.Argument(
        None,
        metavar="[BUMP|VERSION]...",
        help="major|minor|patch and/or an explicit X.Y.Z version, in either order.",
        show_default=False,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Config file (default: <root>/{CONFIG_FILE_NAME}).",
    ),
    root: Path = typer.Option(
        Path("."),
        "--root",
        help="Project root (git working tree).",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Tag without asking (auto-tag)."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate only; do not tag."),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Validate the project, then tag and push the next release."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    try:
        project_root = root.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --root: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    if not project_root.is_dir():
        typer.echo(f"error: --root '{project_root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if config is None:
        config_path: Path | None = project_root / CONFIG_FILE_NAME
    else:
        config_path = config.expanduser()
        if not config_path.is_file():
            typer.echo(f"error: config file not found: {config_path}", err=True)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    console = build_console()
    pipeline = ReleasePipeline(
        root=project_root,
        console=console,
        load_config=_config_loader(config_path, force_auto_tag=yes),
        confirm=prompt_confirm,
        dry_run=dry_run,
    )

    result = pipeline.run(args or [])
    if isinstance(result, Err):
        failed = result.error
        console.newline()
        print_pipeline_error(failed.error, failed.stage, console)
        raise typer.Exit(code=pipeline_error_exit_code(failed.error))

    console.newline()
    console.success("release pipeline complete")


def main() -> None:
    app()
