from __future__ import annotations

import json
from pathlib import Path

import typer

from srp.cli.commands._helpers import exit_with_code
from srp.cli.context import build_context
from srp.core.result import Err
from srp.output.console import Style
from srp.output.errors import print_sentry_error, sentry_error_exit_code

release_app = typer.Typer(add_completion=False, no_args_is_help=True)


@release_app.command("show")
def show_cmd(
    version: str = typer.Argument(..., help="Release version"),
    config: Path | None = typer.Option(None, "--config", help="Path to srp.toml"),
) -> None:
    """Show a release."""
    ctx = build_context(config)
    result = ctx.sentry_api().fetch_release(version)
    if isinstance(result, Err):
        print_sentry_error(result.error, ctx.console)
        exit_with_code(sentry_error_exit_code(result.error))

    release = result.value
    ctx.console.success(release.version)
    if release.date_created:
        ctx.console.print(f"created: {release.date_created}", Style.DIM)
    if release.projects:
        ctx.console.print(f"projects: {', '.join(release.projects)}", Style.DIM)


@release_app.command("files")
def files_cmd(
    version: str = typer.Argument(..., help="Release version"),
    as_json: bool = typer.Option(False, "--json", help="Print file names as a JSON array"),
    config: Path | None = typer.Option(None, "--config", help="Path to srp.toml"),
) -> None:
    """List files uploaded to a release."""
    ctx = build_context(config)
    result = ctx.sentry_api().list_files(version)
    if isinstance(result, Err):
        print_sentry_error(result.error, ctx.console)
        exit_with_code(sentry_error_exit_code(result.error))

    names = sorted(f.name for f in result.value)
    if as_json:
        typer.echo(json.dumps(names))
        return
    if not names:
        ctx.console.print("(no files)", Style.DIM)
    for name in names:
        ctx.console.print(name)


@release_app.command("delete")
def delete_cmd(
    version: str = typer.Argument(..., help="Release version"),
    config: Path | None = typer.Option(None, "--config", help="Path to srp.toml"),
) -> None:
    """Delete a release and its files."""
    ctx = build_context(config)
    result = ctx.sentry_api().delete_release(version)
    if isinstance(result, Err):
        print_sentry_error(result.error, ctx.console)
        exit_with_code(sentry_error_exit_code(result.error))
    ctx.console.success(f"deleted release {version}")
