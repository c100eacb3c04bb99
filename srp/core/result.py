"""Ok/Err values returned across srp's I/O boundaries.

Sentry requests, bundler runs, config loading and file reads all return a
Result. Callers narrow with isinstance or match:

    created = api.create_release("1.4.0")
    if isinstance(created, Err):
        compilation.errors.append(created.error.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

__all__ = ["Err", "Ok", "Result"]

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E


Result: TypeAlias = Ok[T] | Err[E]
