from __future__ import annotations

from pathlib import Path

import pytest

from srp.sentry.api import SentryApi
from srp.test.helpers.sentry import FakeSentry, create_api


@pytest.fixture
def sentry() -> FakeSentry:
    return FakeSentry()


@pytest.fixture
def api(sentry: FakeSentry) -> SentryApi:
    return create_api(sentry)


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    path = tmp_path / "dist"
    path.mkdir()
    return path
