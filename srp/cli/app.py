from __future__ import annotations

import typer

from srp import __version__
from srp.cli.commands.build import build
from srp.cli.commands.release import release_app
from srp.cli.commands.upload import upload

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(upload)
app.command()(build)

# Sub-apps
app.add_typer(release_app, name="release", help="Inspect or remove Sentry releases.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        is_eager=True,
        callback=_print_version,
    ),
) -> None:
    """Create Sentry releases from bundler output and upload source maps."""


def main() -> None:
    app()
