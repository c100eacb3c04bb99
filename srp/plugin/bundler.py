"""External bundler invocation.

srp does not bundle anything itself. A Bundler turns a BundlerConfig into
files under `config.output_path`; CommandBundler does that by running the
project's own build command (webpack, esbuild, rollup, ...).
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from srp.core.result import Err, Ok, Result
from srp.platform.process import run_silent

__all__ = [
    "BundlerConfig",
    "Bundler",
    "CommandBundler",
    "BuildError",
    "BundleFailed",
    "OutputMissing",
    "OPTIONS_ENV_VAR",
]

_BUILD_TIMEOUT_SECONDS = 30 * 60.0

OPTIONS_ENV_VAR = "SRP_BUNDLER_OPTIONS"


@dataclass(frozen=True, slots=True)
class BundleFailed:
    command: tuple[str, ...]
    returncode: int
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class OutputMissing:
    path: Path
    message: str
    hint: str | None = "Point --output at the directory your bundler writes to"


BuildError = BundleFailed | OutputMissing


def _empty_options() -> dict[str, object]:
    return {}


@dataclass(frozen=True, slots=True)
class BundlerConfig:
    """What to build and where the output lands.

    Attributes:
        output_path: Directory the bundler emits into; scanned afterwards.
        command: Build command for CommandBundler (empty for other bundlers).
        cwd: Working directory for the command (defaults to the current one).
        options: Pass-through bundler options such as `devtool`, `entry` or
            `source_map_filename`. srp never interprets them; CommandBundler
            exports them as JSON in SRP_BUNDLER_OPTIONS.
        timeout: Seconds before the build is abandoned.
    """

    output_path: Path
    command: tuple[str, ...] = ()
    cwd: Path | None = None
    options: Mapping[str, object] = field(default_factory=_empty_options)
    timeout: float | None = _BUILD_TIMEOUT_SECONDS

    def option(self, key: str, default: object = None) -> object:
        return self.options.get(key, default)

    def resolved_output_path(self) -> Path:
        if self.output_path.is_absolute():
            return self.output_path
        return (self.cwd or Path.cwd()) / self.output_path


class Bundler(Protocol):
    def run(self, config: BundlerConfig) -> Result[None, BuildError]: ...


class CommandBundler:
    """Run the configured build command and check it produced output."""

    def __init__(self, base_env: Mapping[str, str] | None = None) -> None:
        self._base_env = dict(os.environ if base_env is None else base_env)

    def _env(self, config: BundlerConfig) -> dict[str, str]:
        env = dict(self._base_env)
        if config.options:
            env[OPTIONS_ENV_VAR] = json.dumps(dict(config.options), default=str)
        return env

    def run(self, config: BundlerConfig) -> Result[None, BuildError]:
        if not config.command:
            return Err(
                BundleFailed(
                    command=(),
                    returncode=-1,
                    message="No build command configured",
                    hint="Usage: srp build --output dist -- npm run build",
                )
            )

        cwd = config.cwd or Path.cwd()
        result = run_silent(
            list(config.command), cwd=cwd, env=self._env(config), timeout=config.timeout
        )
        if isinstance(result, Err):
            error = result.error
            return Err(
                BundleFailed(
                    command=error.command,
                    returncode=error.returncode,
                    message=error.stderr or str(error),
                )
            )

        output = config.resolved_output_path()
        if not output.is_dir():
            return Err(OutputMissing(path=output, message=f"Build output not found: {output}"))
        return Ok(None)
