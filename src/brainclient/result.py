"""Success-or-failure values returned by every public client operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .exceptions import BrainClientError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a client operation.

    Exactly one of ``value`` / ``error`` is meaningful: ``ok`` tells which.
    A successful result may still carry ``value=None`` (e.g. an empty 204
    response body).
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[BrainClientError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BrainClientError) -> "Result[T]":
        return cls(ok=False, error=error)

    @property
    def failed(self) -> bool:
        return not self.ok

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if not self.ok:
            assert self.error is not None
            raise self.error
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        """Transform the value of a successful result; failures pass through."""
        if not self.ok:
            return Result(ok=False, error=self.error)
        return Result(ok=True, value=fn(self.value))  # type: ignore[arg-type]

    def __bool__(self) -> bool:
        return self.ok


__all__ = ["Result"]
