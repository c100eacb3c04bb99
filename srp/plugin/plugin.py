"""SentryPlugin: create a release after a build and upload its assets.

On after_emit the plugin:

1. resolves the release version (literal or callable),
2. selects emitted assets with include/exclude,
3. creates the release in Sentry,
4. uploads each one under its transformed name.

On done it optionally deletes emitted source maps, so they are not served
publicly once Sentry has them.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from srp.core.result import Err
from srp.sentry.errors import ReleaseConflict

from .options import AssetMatcher, PluginOptions

if TYPE_CHECKING:
    from srp.output.console import ConsoleProtocol
    from srp.sentry.api import SentryApi
    from srp.sentry.models import ReleaseFile

    from .compilation import Asset, Compilation, Compiler

__all__ = ["SentryPlugin", "ERROR_PREFIX"]

ERROR_PREFIX = "Sentry Plugin: "


class SentryPlugin:
    def __init__(
        self,
        api: SentryApi,
        options: PluginOptions,
        console: ConsoleProtocol | None = None,
    ) -> None:
        self.api = api
        self.options = options
        self.console = console
        self.uploaded: list[ReleaseFile] = []
        # Release being uploaded to; None while after_emit has not reached Sentry
        self.version: str | None = None
        self._matcher: AssetMatcher | None = None

    def apply(self, compiler: Compiler) -> None:
        compiler.hooks.after_emit.append(self.after_emit)
        compiler.hooks.done.append(self.done)

    def _report(self, compilation: Compilation, message: str) -> None:
        text = f"{ERROR_PREFIX}{message}"
        if self.options.suppress_errors:
            compilation.warnings.append(text)
        else:
            compilation.errors.append(text)

    def _info(self, message: str) -> None:
        if self.console is not None:
            self.console.info(message)

    def _compile(self, compilation: Compilation) -> AssetMatcher | None:
        if self._matcher is None:
            try:
                self._matcher = self.options.matcher()
            except re.error as e:
                self._report(compilation, f"Invalid pattern: {e}")
                return None
        return self._matcher

    def select_assets(self, compilation: Compilation, matcher: AssetMatcher) -> list[Asset]:
        return [
            compilation.assets[name]
            for name in compilation.asset_names
            if matcher.selects(name)
        ]

    def after_emit(self, compilation: Compilation) -> list[ReleaseFile]:
        """Create the release and upload the selected assets.

        Returns:
            The files Sentry accepted, also kept on `self.uploaded`.
        """
        self.uploaded = []
        self.version = None

        version = self.options.resolve_release()
        if not version:
            self._report(compilation, "Release is required")
            return []

        matcher = self._compile(compilation)
        if matcher is None:
            return []
        selected = self.select_assets(compilation, matcher)
        self.version = version

        body = None
        if self.options.release_body is not None:
            body = self.options.release_body(version, self.api.project)

        created = self.api.create_release(version, body)
        if isinstance(created, Err):
            error = created.error
            if isinstance(error, ReleaseConflict) and self.options.suppress_conflict_error:
                self._info(f"Release {version} already exists, reusing it")
            else:
                self._report(compilation, f"{error.message} ({version})")
                return []
        else:
            self._info(f"Created release {version}")

        for asset in selected:
            name = self.options.filename_transform(asset.name)
            try:
                content = asset.path.read_bytes()
            except OSError as e:
                self._report(compilation, f"Cannot read {asset.name}: {e}")
                continue

            result = self.api.upload_file(version, name, content)
            if isinstance(result, Err):
                self._report(compilation, f"Failed to upload {name}: {result.error.message}")
                continue
            self.uploaded.append(result.value)
            if self.console is not None:
                self.console.success(f"{asset.name} -> {name}")

        return list(self.uploaded)

    def _has_failures(self, compilation: Compilation) -> bool:
        return any(m.startswith(ERROR_PREFIX) for m in compilation.errors + compilation.warnings)

    def done(self, compilation: Compilation) -> list[str]:
        """Delete emitted files matching delete_regex, if enabled.

        Nothing is deleted when the upload reported a problem, so a failed
        upload never loses the only copy of a source map.

        Returns:
            Names of the deleted assets.
        """
        if not self.options.delete_after_compile or self._has_failures(compilation):
            return []
        matcher = self._compile(compilation)
        if matcher is None:
            return []

        deleted: list[str] = []
        for name in compilation.asset_names:
            if not matcher.should_delete(name):
                continue
            asset = compilation.assets[name]
            try:
                asset.path.unlink(missing_ok=True)
            except OSError as e:
                self._report(compilation, f"Cannot delete {name}: {e}")
                continue
            del compilation.assets[name]
            deleted.append(name)

        if deleted:
            self._info(f"Deleted {len(deleted)} file(s) matching {self.options.delete_regex!s}")
        return deleted
