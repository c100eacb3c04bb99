"""Build model: emitted assets, the compilation, and the compiler hooks.

A Compiler runs a Bundler, reads what it emitted into a Compilation, and
hands that to plugins through two hooks:

- after_emit: output files are on disk (uploads happen here)
- done: the build is finished (cleanup happens here)

Plugins report problems by appending to `compilation.errors` or
`compilation.warnings` rather than raising.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, TypeAlias

from srp.core.result import Err, Ok, Result

from .bundler import Bundler, BundlerConfig, BuildError, OutputMissing

__all__ = [
    "Asset",
    "Compilation",
    "Compiler",
    "Hooks",
    "Plugin",
    "collect_assets",
    "compilation_from_output",
]


@dataclass(frozen=True, slots=True)
class Asset:
    """An emitted file.

    Attributes:
        name: Path relative to the output directory, POSIX separators
            (e.g. `index.bundle.js`, `chunks/vendor.js.map`).
        path: Absolute location on disk.
    """

    name: str
    path: Path


def _empty_list() -> list[str]:
    return []


@dataclass
class Compilation:
    output_path: Path
    assets: dict[str, Asset]
    errors: list[str] = field(default_factory=_empty_list)
    warnings: list[str] = field(default_factory=_empty_list)

    @property
    def asset_names(self) -> list[str]:
        return sorted(self.assets)


def collect_assets(output_path: Path) -> dict[str, Asset]:
    """Enumerate files under output_path, keyed by relative POSIX name."""
    if not output_path.is_dir():
        return {}
    out: dict[str, Asset] = {}
    for p in sorted(output_path.rglob("*")):
        if not p.is_file():
            continue
        name = p.relative_to(output_path).as_posix()
        out[name] = Asset(name=name, path=p)
    return out


def compilation_from_output(output_path: Path) -> Compilation:
    """Build a Compilation from whatever is already in output_path."""
    return Compilation(output_path=output_path, assets=collect_assets(output_path))


Hook: TypeAlias = Callable[[Compilation], object]


def _empty_hooks() -> list[Hook]:
    return []


@dataclass
class Hooks:
    after_emit: list[Hook] = field(default_factory=_empty_hooks)
    done: list[Hook] = field(default_factory=_empty_hooks)


class Plugin(Protocol):
    def apply(self, compiler: Compiler) -> None: ...


class Compiler:
    """Run a bundler and notify plugins about the result."""

    def __init__(
        self,
        config: BundlerConfig,
        bundler: Bundler,
        plugins: Iterable[Plugin] = (),
    ) -> None:
        self.config = config
        self.bundler = bundler
        self.hooks = Hooks()
        for plugin in plugins:
            plugin.apply(self)

    def run(self) -> Result[Compilation, BuildError]:
        """Build, then run after_emit and done hooks on the output."""
        result = self.bundler.run(self.config)
        if isinstance(result, Err):
            return result

        output_path = self.config.resolved_output_path()
        if not output_path.is_dir():
            return Err(
                OutputMissing(path=output_path, message=f"Build output not found: {output_path}")
            )

        return Ok(self.emit(compilation_from_output(output_path)))

    def emit(self, compilation: Compilation) -> Compilation:
        """Run the hooks on an already-built compilation."""
        for hook in self.hooks.after_emit:
            hook(compilation)
        for hook in self.hooks.done:
            hook(compilation)
        return compilation
