"""
Success / failure values for methods declared as `Result[T, E]`.

Service implementations return Success(value) or Failure(error); a plain
value is treated as a success.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure(Generic[E]):
    error: E

    @property
    def is_success(self) -> bool:
        return False


def split_outcome(result: Any):
    """Return (is_success, payload) for an outcome value."""
    if isinstance(result, Failure):
        return False, result.error
    if isinstance(result, Success):
        return True, result.value
    return True, result
