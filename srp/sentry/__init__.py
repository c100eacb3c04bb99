"""Sentry API client."""

from .api import SentryApi
from .errors import (
    InvalidResponse,
    ReleaseConflict,
    ReleaseNotFound,
    RequestFailed,
    SentryError,
)
from .http import HttpClient, HttpError, JsonPage, MockHttpClient, RealHttpClient
from .models import Release, ReleaseFile

__all__ = [
    "SentryApi",
    "SentryError",
    "ReleaseConflict",
    "ReleaseNotFound",
    "RequestFailed",
    "InvalidResponse",
    "HttpClient",
    "HttpError",
    "JsonPage",
    "MockHttpClient",
    "RealHttpClient",
    "Release",
    "ReleaseFile",
]
