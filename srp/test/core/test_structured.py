from __future__ import annotations

from srp.core.structured import (
    as_obj_list,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)


def test_as_str_dict() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict([]) is None


def test_as_obj_list() -> None:
    assert as_obj_list([1, "a"]) == [1, "a"]
    assert as_obj_list({"a": 1}) is None


def test_get_str_strips_and_rejects_empty() -> None:
    table: dict[str, object] = {"a": "  x ", "b": "   ", "c": 3}
    assert get_str(table, "a") == "x"
    assert get_str(table, "b") is None
    assert get_str(table, "c") is None
    assert get_str(table, "missing") is None


def test_get_int_rejects_bool() -> None:
    table: dict[str, object] = {"n": 3, "flag": True}
    assert get_int(table, "n") == 3
    assert get_int(table, "flag") is None


def test_get_bool() -> None:
    table: dict[str, object] = {"yes": True, "one": 1}
    assert get_bool(table, "yes") is True
    assert get_bool(table, "one") is None


def test_get_table() -> None:
    assert get_table({"t": {"k": "v"}}, "t") == {"k": "v"}
    assert get_table({"t": "v"}, "t") is None


def test_get_str_list() -> None:
    assert get_str_list({"x": ["a", "b"]}, "x") == ["a", "b"]
    assert get_str_list({"x": "a"}, "x") == ["a"]
    assert get_str_list({"x": ["a", 1]}, "x") is None
    assert get_str_list({}, "x") is None
