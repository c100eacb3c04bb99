"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from srp.core.errors import ErrorCode
from srp.output.console import Style
from srp.plugin.bundler import BuildError, BundleFailed, OutputMissing
from srp.sentry.errors import (
    InvalidResponse,
    ReleaseConflict,
    ReleaseNotFound,
    RequestFailed,
    SentryError,
)

if TYPE_CHECKING:
    from srp.output.console import ConsoleProtocol

__all__ = [
    "build_error_exit_code",
    "print_build_error",
    "print_sentry_error",
    "sentry_error_exit_code",
]


def _hint(console: ConsoleProtocol, hint: str | None) -> None:
    if hint:
        console.print(f"hint: {hint}", Style.DIM)


def print_sentry_error(error: SentryError, console: ConsoleProtocol) -> None:
    match error:
        case ReleaseConflict(version=version, hint=hint):
            console.error(f"release already exists: {version}")
            _hint(console, hint)
        case ReleaseNotFound(version=version):
            console.error(f"release not found: {version}")
        case RequestFailed(http=http, message=message, hint=hint):
            console.error(f"{message} ({http.url})" if message != str(http) else message)
            _hint(console, hint)
        case InvalidResponse(url=url, message=message):
            console.error(f"unexpected response from {url}: {message}")


def sentry_error_exit_code(error: SentryError) -> int:
    match error:
        case ReleaseConflict() | ReleaseNotFound():
            return int(ErrorCode.USER_ERROR)
        case RequestFailed() | InvalidResponse():
            return int(ErrorCode.NETWORK_ERROR)


def print_build_error(error: BuildError, console: ConsoleProtocol) -> None:
    match error:
        case BundleFailed(command=command, returncode=rc, message=message, hint=hint):
            if command:
                console.error(f"build command failed (exit {rc}): {' '.join(command)}")
                if message:
                    console.print(message, Style.DIM)
            else:
                console.error(message)
            _hint(console, hint)
        case OutputMissing(message=message, hint=hint):
            console.error(message)
            _hint(console, hint)


def build_error_exit_code(error: BuildError) -> int:
    match error:
        case BundleFailed(command=()):
            return int(ErrorCode.USER_ERROR)
        case BundleFailed() | OutputMissing():
            return int(ErrorCode.BUILD_ERROR)
