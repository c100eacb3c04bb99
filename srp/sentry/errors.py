from __future__ import annotations

from dataclasses import dataclass

from .http import HttpError


@dataclass(frozen=True, slots=True)
class ReleaseConflict:
    version: str
    message: str = "Release already exists"
    hint: str | None = "Pass --suppress-conflict to reuse an existing release"


@dataclass(frozen=True, slots=True)
class ReleaseNotFound:
    version: str
    message: str = "Release not found"
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RequestFailed:
    http: HttpError
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class InvalidResponse:
    url: str
    message: str
    hint: str | None = None


SentryError = ReleaseConflict | ReleaseNotFound | RequestFailed | InvalidResponse
