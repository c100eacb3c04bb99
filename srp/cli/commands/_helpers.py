"""Shared helpers for CLI commands."""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from srp.core.config import CONFIG_FILENAME
from srp.core.errors import ErrorCode
from srp.core.result import Err
from srp.output.console import Style
from srp.platform.process import run
from srp.plugin.options import PluginOptions, ReleaseSpec, compile_patterns, prefix_transform
from srp.plugin.plugin import SentryPlugin

if TYPE_CHECKING:
    from srp.cli.context import CLIContext
    from srp.plugin.compilation import Compilation


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def git_head_release(cwd: Path) -> Callable[[], str]:
    """Release callable that names the release after the current commit.

    Returns an empty string outside a git checkout; the plugin then reports
    that a release is required.
    """

    def release() -> str:
        result = run(["git", "rev-parse", "HEAD"], cwd=cwd, timeout=30.0)
        if isinstance(result, Err):
            return ""
        return result.value.strip()

    return release


def make_plugin(
    ctx: CLIContext,
    *,
    release: str | None,
    include: list[str] | None,
    exclude: list[str] | None,
    prefix: str | None,
    delete_after: bool,
    suppress_conflict: bool,
    cwd: Path,
) -> SentryPlugin:
    """Plugin from command line flags layered over srp.toml."""
    api = ctx.sentry_api()
    release_spec: ReleaseSpec = release if release else git_head_release(cwd)

    try:
        compile_patterns(include)
        compile_patterns(exclude)
    except re.error as e:
        ctx.console.error(f"invalid pattern: {e}")
        exit_with_code(int(ErrorCode.USER_ERROR))

    options = PluginOptions.from_config(
        ctx.config.upload, release=release_spec, include=include, exclude=exclude
    )
    if prefix is not None:
        options = _replace_prefix(options, prefix)
    if delete_after or suppress_conflict:
        options = _with_flags(options, delete_after=delete_after, suppress=suppress_conflict)

    try:
        options.matcher()
    except re.error as e:
        ctx.console.error(f"invalid pattern in {CONFIG_FILENAME}: {e}")
        ctx.console.print("hint: check include, exclude and delete_regex in [upload]", Style.DIM)
        exit_with_code(int(ErrorCode.CONFIG_ERROR))
    return SentryPlugin(api, options, console=ctx.console)


def _replace_prefix(options: PluginOptions, prefix: str) -> PluginOptions:
    return dataclasses.replace(options, filename_transform=prefix_transform(prefix))


def _with_flags(options: PluginOptions, *, delete_after: bool, suppress: bool) -> PluginOptions:
    return dataclasses.replace(
        options,
        delete_after_compile=options.delete_after_compile or delete_after,
        suppress_conflict_error=options.suppress_conflict_error or suppress,
    )


def finish(ctx: CLIContext, compilation: Compilation, plugin: SentryPlugin) -> None:
    """Print the outcome and exit non-zero if the plugin reported errors."""
    for warning in compilation.warnings:
        ctx.console.warning(warning)
    for error in compilation.errors:
        ctx.console.error(error)

    if compilation.errors:
        # No version means the plugin stopped before contacting Sentry
        code = ErrorCode.NETWORK_ERROR if plugin.version else ErrorCode.USER_ERROR
        exit_with_code(int(code))

    ctx.console.success(f"uploaded {len(plugin.uploaded)} file(s)")
    if not plugin.uploaded:
        ctx.console.print("no assets matched include/exclude", Style.DIM)
