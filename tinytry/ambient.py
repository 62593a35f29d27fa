"""
The ambient "last error" slot.

Each thread has one slot holding the most recent failure seen by
eval-style code, the way a global ``$@``/``errno`` would. It is fragile by
nature: :func:`attempt` clears it on success and overwrites it on failure,
so anything that evaluates code on someone else's behalf must save the
slot before and put it back afterwards. :func:`preserved_error` does that.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from tinytry.errors import UsageError, unwrap_failure
from tinytry.result import Err, Ok, Result
from tinytry.utils import LazyRepr

logger = logging.getLogger(__name__)

_state = threading.local()


def last_error() -> Any:
    """Return this thread's ambient error, ``None`` when unset."""

    return getattr(_state, "error", None)


def set_last_error(value: Any) -> None:
    """Overwrite this thread's ambient error."""

    _state.error = value


def clear_last_error() -> None:
    _state.error = None


@contextmanager
def preserved_error() -> Iterator[Any]:
    """Localize the ambient slot for the duration of the block.

    Yields the value found on entry and restores it on every exit path.
    """

    saved = last_error()
    try:
        yield saved
    finally:
        set_last_error(saved)


def attempt(code: Callable[..., Any], *args: Any, **kwargs: Any) -> Result[Any]:
    """Evaluate ``code`` eval-style.

    Returns ``Ok(value)`` or ``Err(failure)``, and leaves the failure in the
    ambient slot (``None`` after a success). Usage errors and non-``Exception``
    signals are not captured.
    """

    try:
        value = code(*args, **kwargs)
    except UsageError:
        raise
    except Exception as exc:
        failure = unwrap_failure(exc)
        set_last_error(failure)
        logger.debug("attempt captured failure %s", LazyRepr(failure))
        return Err(failure, cause=exc)
    set_last_error(None)
    return Ok(value)


__all__ = [
    "attempt",
    "clear_last_error",
    "last_error",
    "preserved_error",
    "set_last_error",
]
