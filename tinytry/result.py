"""
Outcome of one isolated evaluation.

``Ok`` carries a returned value and ``Err`` carries a captured failure.
Failures are opaque: ``Err.error`` may be an exception, a string, a record,
``None`` or anything else a block failed with, so callers must branch on
:meth:`Result.is_err` and never on the truthiness of the failure itself.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, NoReturn, TypeVar

from tinytry.errors import Failure

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
U = TypeVar("U")


class Result(Generic[T_co]):
    """Sum type representing either a returned value or a captured failure."""

    __slots__ = ()

    def is_ok(self) -> bool:
        """Return ``True`` when the evaluation returned normally."""

        return isinstance(self, Ok)

    def is_err(self) -> bool:
        """Return ``True`` when the evaluation failed, whatever the failure value."""

        return isinstance(self, Err)

    def ok(self) -> T_co | None:
        """Return the contained value, or ``None`` if this is a failure."""

        if isinstance(self, Ok):
            return self.value
        return None

    def err(self) -> Any:
        """Return the captured failure, or ``None`` if this is a success.

        ``None`` is also a legal failure value; use :meth:`is_err` to tell
        the two apart.
        """

        if isinstance(self, Err):
            return self.error
        return None

    def unwrap(self) -> T_co:
        """Return the value or re-raise the captured failure."""

        if isinstance(self, Ok):
            return self.value
        raise self.as_exception()

    def unwrap_or(self, default: U) -> T_co | U:
        """Return the contained value, or ``default`` if this is a failure."""

        if isinstance(self, Ok):
            return self.value
        return default

    def unwrap_or_else(self, default_fn: Callable[[Any], U]) -> T_co | U:
        """Return the contained value, or compute a default from the failure."""

        if isinstance(self, Ok):
            return self.value
        return default_fn(self.error)

    def map(self, f: Callable[[T_co], U]) -> Result[U]:
        """Apply ``f`` to the contained value if this is a success."""

        if isinstance(self, Ok):
            return Ok(f(self.value))
        return self  # type: ignore[return-value]

    def as_exception(self) -> BaseException:
        """Return the failure in raisable form.

        Exceptions are returned as they are; any other failure value is
        wrapped in :class:`~tinytry.errors.Failure`.
        """

        if not isinstance(self, Err):
            raise RuntimeError("Called as_exception on Ok value")
        if self.cause is not None:
            return self.cause
        if isinstance(self.error, BaseException):
            return self.error
        return Failure(self.error)

    def __bool__(self) -> bool:
        """Truthiness matches :meth:`is_ok`."""

        return self.is_ok()


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    """Success result."""

    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Failure result.

    ``cause`` is the exception that was actually raised, kept so that the
    failure can be re-raised with its original traceback.
    """

    error: Any
    cause: BaseException | None = field(default=None, compare=False, repr=False)


__all__ = [
    "Err",
    "Ok",
    "Result",
]
