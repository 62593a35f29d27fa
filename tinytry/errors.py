from __future__ import annotations

from typing import Any, NoReturn

from tinytry.utils import CallSite

RESTART_OUTSIDE_HANDLER_MESSAGE = 'Can\'t "retry" outside a "catch" block'


class Failure(Exception):
    """Carries a failure value that is not itself an exception.

    Blocks may fail with any value: a string, a record, ``0`` or ``None``.
    The runner unwraps this carrier before binding the failure, so handlers
    receive ``value`` exactly as it was thrown.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(value)

    def __repr__(self) -> str:
        return f"Failure({self.value!r})"


class UsageError(Exception):
    """Base class for errors raised by tinytry itself.

    These report misuse of the construct and are never captured, retried or
    suppressed by it.
    """


class RestartOutsideHandler(UsageError):
    """Raised when ``request_restart`` is called outside a handler's top scope."""

    def __init__(self, call_site: CallSite | None = None) -> None:
        self.call_site = call_site
        message = RESTART_OUTSIDE_HANDLER_MESSAGE
        if call_site is not None:
            message = f"{message} at {call_site}"
        super().__init__(
            f"{message}\n"
            "Hint: call retry() directly in the body of the handler given to "
            "run_protected(..., catch(handler)), not from the protected block, "
            "a finalizer or a helper function"
        )


class UnknownTaggedArgument(UsageError, TypeError):
    """Raised when a handler-position argument is neither a Catch nor a Finally."""

    def __init__(self, argument: Any) -> None:
        self.argument = argument
        super().__init__(
            "unknown handler-position argument of type "
            f"{type(argument).__name__!r}\n"
            "Hint: wrap handlers with catch(...) and finalizers with finally_(...), "
            "or pass them as handler= / finalizer= keywords"
        )


def throw(value: Any) -> NoReturn:
    """Fail the current block with ``value``.

    Exceptions are raised as they are; anything else is raised inside a
    :class:`Failure` carrier.
    """

    if isinstance(value, BaseException):
        raise value
    raise Failure(value)


def unwrap_failure(error: BaseException) -> Any:
    """Return the failure value a caught exception stands for."""

    if isinstance(error, Failure):
        return error.value
    return error


__all__ = [
    "RESTART_OUTSIDE_HANDLER_MESSAGE",
    "Failure",
    "RestartOutsideHandler",
    "UnknownTaggedArgument",
    "UsageError",
    "throw",
    "unwrap_failure",
]
