"""Build integration: bundler, compilation hooks and the Sentry plugin."""

from .bundler import BuildError, BundleFailed, Bundler, BundlerConfig, CommandBundler, OutputMissing
from .compilation import Asset, Compilation, Compiler, collect_assets, compilation_from_output
from .options import AssetMatcher, PluginOptions
from .plugin import ERROR_PREFIX, SentryPlugin

__all__ = [
    "Asset",
    "AssetMatcher",
    "BuildError",
    "BundleFailed",
    "Bundler",
    "BundlerConfig",
    "CommandBundler",
    "Compilation",
    "Compiler",
    "ERROR_PREFIX",
    "OutputMissing",
    "PluginOptions",
    "SentryPlugin",
    "collect_assets",
    "compilation_from_output",
]
