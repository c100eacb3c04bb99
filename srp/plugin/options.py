"""Plugin options: which release, which files, and under what names."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from srp.core.config import DEFAULT_DELETE_REGEX, DEFAULT_PREFIX, UploadConfig

__all__ = [
    "AssetMatcher",
    "PluginOptions",
    "Pattern",
    "PatternSpec",
    "ReleaseSpec",
    "compile_patterns",
    "default_filename_transform",
    "prefix_transform",
]

Pattern: TypeAlias = str | re.Pattern[str]
PatternSpec: TypeAlias = Pattern | Sequence[Pattern] | None
ReleaseSpec: TypeAlias = str | Callable[[], str] | None
FilenameTransform: TypeAlias = Callable[[str], str]
ReleaseBody: TypeAlias = Callable[[str, str], Mapping[str, object]]


def compile_patterns(spec: PatternSpec) -> tuple[re.Pattern[str], ...]:
    """Normalize a pattern, a list of patterns, or None.

    Raises:
        re.error: If a string pattern is not a valid regular expression.
    """
    if spec is None:
        return ()
    if isinstance(spec, (str, re.Pattern)):
        items: Sequence[Pattern] = [spec]
    else:
        items = spec
    return tuple(p if isinstance(p, re.Pattern) else re.compile(p) for p in items)


def prefix_transform(prefix: str) -> FilenameTransform:
    def transform(name: str) -> str:
        return f"{prefix}{name}"

    return transform


def default_filename_transform(name: str) -> str:
    """`index.bundle.js` -> `~/index.bundle.js` (matches any host)."""
    return f"{DEFAULT_PREFIX}{name}"


@dataclass(frozen=True, slots=True)
class PluginOptions:
    """Options for SentryPlugin.

    Attributes:
        release: Release version, or a zero-argument callable returning it.
        include: Upload only assets whose name matches one of these.
        exclude: Never upload assets whose name matches one of these.
        filename_transform: Maps an asset name to the name it is uploaded
            under. Defaults to prefixing `~/`.
        release_body: Builds the create-release payload from
            (version, project). Defaults to version plus project.
        suppress_errors: Report failures as warnings instead of errors.
        suppress_conflict_error: Treat an existing release as success.
        delete_after_compile: Remove uploaded assets matching delete_regex
            from the output directory once the build is done.
        delete_regex: Which assets delete_after_compile removes.
    """

    release: ReleaseSpec = None
    include: PatternSpec = None
    exclude: PatternSpec = None
    filename_transform: FilenameTransform = default_filename_transform
    release_body: ReleaseBody | None = None
    suppress_errors: bool = False
    suppress_conflict_error: bool = False
    delete_after_compile: bool = False
    delete_regex: Pattern = DEFAULT_DELETE_REGEX

    @classmethod
    def from_config(
        cls,
        upload: UploadConfig,
        *,
        release: ReleaseSpec,
        include: PatternSpec = None,
        exclude: PatternSpec = None,
    ) -> PluginOptions:
        """Options from srp.toml defaults; explicit include/exclude win."""
        return cls(
            release=release,
            include=include if include else (upload.include or None),
            exclude=exclude if exclude else (upload.exclude or None),
            filename_transform=prefix_transform(upload.prefix),
            suppress_errors=upload.suppress_errors,
            suppress_conflict_error=upload.suppress_conflict_error,
            delete_after_compile=upload.delete_after_compile,
            delete_regex=upload.delete_regex,
        )

    def resolve_release(self) -> str | None:
        """The release version, calling `release` if it is a function."""
        value = self.release() if callable(self.release) else self.release
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def matcher(self) -> AssetMatcher:
        """Compile include, exclude and delete_regex once for a build.

        Raises:
            re.error: If any of them is not a valid regular expression.
        """
        return AssetMatcher(
            include=compile_patterns(self.include),
            exclude=compile_patterns(self.exclude),
            delete=compile_patterns(self.delete_regex),
        )


@dataclass(frozen=True, slots=True)
class AssetMatcher:
    """Compiled asset name patterns of a PluginOptions."""

    include: tuple[re.Pattern[str], ...] = ()
    exclude: tuple[re.Pattern[str], ...] = ()
    delete: tuple[re.Pattern[str], ...] = ()

    def selects(self, name: str) -> bool:
        """True if an asset with this name should be uploaded."""
        if self.include and not any(p.search(name) for p in self.include):
            return False
        return not any(p.search(name) for p in self.exclude)

    def should_delete(self, name: str) -> bool:
        return any(p.search(name) for p in self.delete)
