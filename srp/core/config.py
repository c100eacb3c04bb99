"""Typed configuration loading and access.

Configuration comes from an optional `srp.toml`:

    [sentry]
    organization = "acme"
    project = "web"
    base_url = "https://sentry.io/api/0"

    [upload]
    include = ['\\.js$', '\\.map$']
    prefix = "~/static/"
    delete_after_compile = true

Environment variables (SENTRY_ORG, SENTRY_PROJECT, SENTRY_AUTH_TOKEN,
SENTRY_URL) override the file. The auth token is normally only set through
the environment.
"""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "SentryConfig",
    "UploadConfig",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    "apply_env",
    "DEFAULT_BASE_URL",
    "DEFAULT_PREFIX",
    "DEFAULT_DELETE_REGEX",
    "CONFIG_FILENAME",
]

DEFAULT_BASE_URL = "https://sentry.io/api/0"
DEFAULT_PREFIX = "~/"
DEFAULT_DELETE_REGEX = r"\.map$"
CONFIG_FILENAME = "srp.toml"

_ENV_ORG = ("SENTRY_ORG",)
_ENV_PROJECT = ("SENTRY_PROJECT",)
_ENV_TOKEN = ("SENTRY_AUTH_TOKEN", "SENTRY_API_KEY")
_ENV_URL = ("SENTRY_URL",)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class SentryConfig:
    """Where releases are created and who we authenticate as."""

    organization: str | None = None
    project: str | None = None
    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL

    def missing(self) -> list[str]:
        """Names of required settings that are not set."""
        out: list[str] = []
        if not self.organization:
            out.append("organization")
        if not self.project:
            out.append("project")
        if not self.api_key:
            out.append("api_key")
        return out


@dataclass(frozen=True, slots=True)
class UploadConfig:
    """Defaults for which emitted files are uploaded and how they are named."""

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    prefix: str = DEFAULT_PREFIX
    suppress_errors: bool = False
    suppress_conflict_error: bool = False
    delete_after_compile: bool = False
    delete_regex: str = DEFAULT_DELETE_REGEX


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    sentry: SentryConfig = field(default_factory=SentryConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        sentry: StrDict = get_table(data, "sentry") or {}
        upload: StrDict = get_table(data, "upload") or {}

        organization = (
            get_str(sentry, "organization")
            or get_str(sentry, "organisation")
            or get_str(sentry, "org")
        )

        return cls(
            sentry=SentryConfig(
                organization=organization,
                project=get_str(sentry, "project"),
                api_key=get_str(sentry, "api_key"),
                base_url=_strip_slash(get_str(sentry, "base_url") or DEFAULT_BASE_URL),
            ),
            upload=UploadConfig(
                include=tuple(get_str_list(upload, "include") or ()),
                exclude=tuple(get_str_list(upload, "exclude") or ()),
                prefix=_get_raw_str(upload, "prefix", DEFAULT_PREFIX),
                suppress_errors=bool(get_bool(upload, "suppress_errors")),
                suppress_conflict_error=bool(get_bool(upload, "suppress_conflict_error")),
                delete_after_compile=bool(get_bool(upload, "delete_after_compile")),
                delete_regex=get_str(upload, "delete_regex") or DEFAULT_DELETE_REGEX,
            ),
        )


def _strip_slash(url: str) -> str:
    return url.rstrip("/")


def _get_raw_str(table: Mapping[str, object], key: str, default: str) -> str:
    # An empty prefix is meaningful (upload under the bare asset name)
    value = table.get(key)
    if isinstance(value, str):
        return value
    return default


def _first_env(environ: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = environ.get(name, "").strip()
        if value:
            return value
    return None


def apply_env(config: Config, environ: Mapping[str, str] | None = None) -> Config:
    """Overlay SENTRY_* environment variables onto config."""
    env = os.environ if environ is None else environ
    sentry = config.sentry

    org = _first_env(env, _ENV_ORG)
    project = _first_env(env, _ENV_PROJECT)
    token = _first_env(env, _ENV_TOKEN)
    url = _first_env(env, _ENV_URL)

    return dataclasses.replace(
        config,
        sentry=SentryConfig(
            organization=org or sentry.organization,
            project=project or sentry.project,
            api_key=token or sentry.api_key,
            base_url=_strip_slash(url) if url else sentry.base_url,
        ),
    )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to srp.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file; a missing file yields the default config.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
