from __future__ import annotations

import pytest

from srp.core.result import Err, Ok, Result


def _parse_version(raw: str) -> Result[str, str]:
    value = raw.strip()
    if not value:
        return Err("empty version")
    return Ok(value)


def test_ok_variant() -> None:
    assert _parse_version(" 1.0.0 ") == Ok("1.0.0")


def test_err_variant() -> None:
    assert _parse_version("  ") == Err("empty version")


def test_frozen() -> None:
    result = Ok(1)
    with pytest.raises(AttributeError):
        result.value = 2  # type: ignore[misc]


def test_pattern_matching() -> None:
    match _parse_version("2.0"):
        case Ok(value):
            assert value == "2.0"
        case Err(_):
            pytest.fail("expected Ok")
