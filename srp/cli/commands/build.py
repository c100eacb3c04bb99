from __future__ import annotations

from pathlib import Path

import typer

from srp.cli.commands._helpers import exit_with_code, finish, make_plugin
from srp.cli.context import build_context
from srp.core.errors import ErrorCode
from srp.core.result import Err
from srp.output.errors import build_error_exit_code, print_build_error
from srp.plugin.bundler import BundlerConfig, CommandBundler
from srp.plugin.compilation import Compiler


def _parse_options(pairs: list[str]) -> dict[str, object] | None:
    out: dict[str, object] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            return None
        out[key.strip()] = value
    return out


def build(
    command: list[str] = typer.Argument(..., help="Build command, after --"),
    output: Path = typer.Option(Path("dist"), "--output", "-o", help="Bundler output directory"),
    option: list[str] | None = typer.Option(
        None,
        "--option",
        help="KEY=VALUE passed to the bundler in SRP_BUNDLER_OPTIONS (repeatable)",
    ),
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
    """Run a bundler command, then upload its output to a new release.

    Example: srp build -o dist -r 1.2.0 -- npx webpack --mode production
    """
    ctx = build_context(config)

    options = _parse_options(option or [])
    if options is None:
        ctx.console.error("--option expects KEY=VALUE")
        exit_with_code(int(ErrorCode.USER_ERROR))

    cwd = Path.cwd()
    plugin = make_plugin(
        ctx,
        release=release,
        include=include,
        exclude=exclude,
        prefix=prefix,
        delete_after=delete_after,
        suppress_conflict=suppress_conflict,
        cwd=cwd,
    )
    bundler_config = BundlerConfig(
        output_path=output,
        command=tuple(command),
        cwd=cwd,
        options=options,
    )
    compiler = Compiler(bundler_config, CommandBundler(), [plugin])

    ctx.console.header(f"Building: {' '.join(command)}")
    result = compiler.run()
    if isinstance(result, Err):
        print_build_error(result.error, ctx.console)
        exit_with_code(build_error_exit_code(result.error))

    finish(ctx, result.value, plugin)
