from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from srp.core.config import CONFIG_FILENAME, Config, apply_env, load_config_or_default
from srp.core.errors import ErrorCode
from srp.core.result import Err
from srp.output.console import ConsoleProtocol, RichConsole, Style
from srp.sentry.api import SentryApi
from srp.sentry.http import HttpClient, RealHttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    http: HttpClient

    def sentry_api(self) -> SentryApi:
        """Sentry client for the configured project; exits if settings are missing."""
        missing = self.config.sentry.missing()
        if missing:
            self.console.error(f"missing Sentry settings: {', '.join(missing)}")
            self.console.print(
                "hint: set SENTRY_ORG, SENTRY_PROJECT and SENTRY_AUTH_TOKEN "
                f"or the [sentry] table in {CONFIG_FILENAME}",
                Style.DIM,
            )
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
        return SentryApi.from_config(self.http, self.config.sentry)


def build_context(config_path: Path | None = None) -> CLIContext:
    console = RichConsole()
    path = config_path or Path(CONFIG_FILENAME)

    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    return CLIContext(
        config=apply_env(config_result.value),
        console=console,
        http=RealHttpClient(),
    )
