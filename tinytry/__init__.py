"""
tinytry - try/catch/finally/retry as plain functions.

Protected blocks run without clobbering the thread's ambient "last error",
handlers receive the failure as their argument whatever its shape, a
finalizer runs exactly once however the construct is left, and a handler
can re-run the protected block with ``retry()``.

Example:
    >>> from tinytry import catch, finally_, retry, throw, try_
    >>>
    >>> attempts = []
    >>> def flaky():
    ...     attempts.append(1)
    ...     if len(attempts) < 3:
    ...         throw("not yet")
    ...     return "done"
    >>>
    >>> def handle(err):
    ...     retry()
    >>>
    >>> try_(flaky, catch(handle), finally_(lambda: print("cleanup")))
    cleanup
    'done'
"""

from tinytry.ambient import (
    attempt,
    clear_last_error,
    last_error,
    preserved_error,
    set_last_error,
)
from tinytry.errors import (
    Failure,
    RestartOutsideHandler,
    UnknownTaggedArgument,
    UsageError,
    throw,
)
from tinytry.restart import current_failure, request_restart, retry
from tinytry.result import Err, Ok, Result
from tinytry.runner import protected, run_protected, try_
from tinytry.types import (
    Catch,
    Finally,
    Want,
    catch,
    finally_,
    make_finalizer,
    make_handler,
)

__version__ = "0.1.0"

__all__ = [  # noqa: RUF022
    # Construct
    "run_protected",
    "make_handler",
    "make_finalizer",
    "request_restart",
    # Aliases
    "try_",
    "catch",
    "finally_",
    "retry",
    "protected",
    # Tags and types
    "Catch",
    "Finally",
    "Want",
    "Result",
    "Ok",
    "Err",
    # Failures
    "throw",
    "current_failure",
    "Failure",
    "UsageError",
    "RestartOutsideHandler",
    "UnknownTaggedArgument",
    # Ambient error slot
    "attempt",
    "last_error",
    "set_last_error",
    "clear_last_error",
    "preserved_error",
]
