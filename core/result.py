"""Tagged result returned by every store call.

A store call either succeeds with ``Ok(value)`` or fails with ``Err(error)``
where ``error`` is one of the ``AppException`` kinds. Callers branch on
``result.ok`` or call ``unwrap()`` to raise the carried error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from core.errors import AppException

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: AppException

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Ok[T], Err]
