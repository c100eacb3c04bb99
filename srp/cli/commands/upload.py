from __future__ import annotations

from pathlib import Path

import typer

from srp.cli.commands._helpers import exit_with_code, finish, make_plugin
from srp.cli.context import build_context
from srp.core.errors import ErrorCode
from srp.core.result import Err, Ok, Result
from srp.output.errors import build_error_exit_code, print_build_error
from srp.plugin.bundler import BuildError, BundlerConfig
from srp.plugin.compilation import Compiler


class _PrebuiltBundler:
    """The output directory already exists; nothing to run."""

    def run(self, config: BundlerConfig) -> Result[None, BuildError]:
        return Ok(None)


def upload(
    output_dir: Path = typer.Argument(..., help="Directory containing the built assets"),
    release: str | None = typer.Option(
        None, "--release", "-r", help="Release version (default: current git commit)"
    ),
    include: list[str] | None = typer.Option(
        None, "--include", help="Regex; upload only matching asset names (repeatable)"
    ),
    exclude: list[str] | None = typer.Option(
        None, "--exclude", help="Regex; skip matching asset names (repeatable)"
    ),
    prefix: str | None = typer.Option(
        None, "--prefix", help="Prefix for uploaded names (default: ~/)"
    ),
    delete_after: bool = typer.Option(
        False, "--delete-after", help="Delete source maps from the output after upload"
    ),
    suppress_conflict: bool = typer.Option(
        False, "--suppress-conflict", help="Reuse the release if it already exists"
    ),
    config: Path | None = typer.Option(None, "--config", help="Path to srp.toml"),
) -> None:
    """Create a release and upload an existing build output to it."""
    ctx = build_context(config)

    if not output_dir.is_dir():
        ctx.console.error(f"output directory not found: {output_dir}")
        exit_with_code(int(ErrorCode.USER_ERROR))

    plugin = make_plugin(
        ctx,
        release=release,
        include=include,
        exclude=exclude,
        prefix=prefix,
        delete_after=delete_after,
        suppress_conflict=suppress_conflict,
        cwd=output_dir,
    )
    compiler = Compiler(BundlerConfig(output_path=output_dir), _PrebuiltBundler(), [plugin])
    result = compiler.run()
    if isinstance(result, Err):
        print_build_error(result.error, ctx.console)
        exit_with_code(build_error_exit_code(result.error))
    finish(ctx, result.value, plugin)
