"""
The protected-block runner.

``run_protected`` evaluates a block, hands a failure to the handler if
there is one, loops back when the handler asks for a restart, and runs the
finalizer once on the way out. Each evaluation goes through
``_context_eval``, which keeps the ambient error slot intact and shapes the
return value for the caller's ``want``.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from types import TracebackType
from typing import Any, Final, TypeVar

from beartype import beartype

from tinytry.ambient import preserved_error, set_last_error
from tinytry.errors import UnknownTaggedArgument, UsageError, unwrap_failure
from tinytry.restart import HandlerScope, _RestartSignal, handler_scope
from tinytry.result import Err, Ok, Result
from tinytry.types import Catch, Finally, FinalizerBlock, ProtectedBlock, Want
from tinytry.utils import LazyRepr

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_RESTART: Final = object()


def _no_value(want: Want) -> Any:
    return () if want == "list" else None


def _shape(want: Want, value: Any) -> Any:
    if want == "void":
        return None
    if want == "list":
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(value)
        return (value,)
    return value


def _context_eval(
    want: Want,
    code: Callable[..., Any],
    *args: Any,
    scope: HandlerScope | None = None,
) -> Result[Any]:
    """Run ``code`` capturing its value or failure.

    The ambient slot seen by ``code`` is the one in place on entry, and it
    is put back when evaluation finishes however it finishes.
    """
    with preserved_error():
        try:
            if scope is not None:
                # request_restart checks that its caller was entered from here
                scope.invoker = sys._getframe()
            value = code(*args)
        except UsageError:
            raise
        except Exception as exc:
            return Err(unwrap_failure(exc), cause=exc)
    return Ok(_shape(want, value))


def _call_handler(want: Want, handler: Callable[[Any], Any], failure: Any, attempt: int) -> Any:
    """Run ``handler`` on ``failure``; return its outcome or ``_RESTART``."""
    with handler_scope(failure, attempt) as scope:
        try:
            return _context_eval(want, handler, failure, scope=scope)
        except _RestartSignal as signal:
            if signal.scope is not scope:
                raise
            return _RESTART


class _FinalizerGuard:
    """Runs the finalizer when the runner's scope is left.

    Entered once per ``run_protected`` call, outside the restart loop, so
    the finalizer runs exactly once however many attempts there were.
    """

    def __init__(self, finalizer: FinalizerBlock | None) -> None:
        self._finalizer = finalizer

    def __enter__(self) -> _FinalizerGuard:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if self._finalizer is None:
            return False
        logger.debug("running finalizer %s", LazyRepr(self._finalizer))
        try:
            self._finalizer()
        except BaseException:
            if exc is not None:
                logger.warning(
                    "finalizer %s failed while %s was propagating; "
                    "the earlier failure is kept only as __context__",
                    LazyRepr(self._finalizer),
                    type(exc).__name__,
                )
            raise
        return False


def _sort_tagged(
    tagged: tuple[object, ...],
    handler: object,
    finalizer: object,
) -> tuple[Catch | None, Finally | None]:
    catch_block: Catch | None = None
    finally_block: Finally | None = None

    for item in tagged:
        if item is None:
            continue
        if isinstance(item, Catch):
            catch_block = item
        elif isinstance(item, Finally):
            finally_block = item
        else:
            raise UnknownTaggedArgument(item)

    if handler is not None:
        if isinstance(handler, Catch):
            catch_block = handler
        elif callable(handler) and not isinstance(handler, Finally):
            catch_block = Catch(handler)
        else:
            raise UnknownTaggedArgument(handler)

    if finalizer is not None:
        if isinstance(finalizer, Finally):
            finally_block = finalizer
        elif callable(finalizer) and not isinstance(finalizer, Catch):
            finally_block = Finally(finalizer)
        else:
            raise UnknownTaggedArgument(finalizer)

    return catch_block, finally_block


@beartype
def run_protected(
    block: ProtectedBlock,
    *tagged: object,
    handler: object = None,
    finalizer: object = None,
    want: Want = "scalar",
) -> Any:
    """Run ``block`` with try/catch/finally/retry semantics.

    Args:
        block: Zero-argument callable to protect.
        *tagged: ``catch(...)`` and ``finally_(...)`` tags, in any order.
            ``None`` entries are skipped; the last tag of each kind wins.
        handler: Handler given by keyword, a callable or a ``Catch``.
        finalizer: Finalizer given by keyword, a callable or a ``Finally``.
        want: ``"scalar"`` returns the value as is, ``"list"`` returns a
            tuple of values, ``"void"`` returns ``None``. A returned tuple
            is one value under ``"scalar"`` and is not unpacked.

    Returns:
        The block's value, or the handler's value if the block failed. If
        the block failed and there is no handler the failure is swallowed
        and the no-value result (``()`` or ``None``) is returned.

    Raises:
        UnknownTaggedArgument: for anything but a tag in a tagged position.
        Exception: whatever the handler or finalizer fails with.
    """
    catch_block, finally_block = _sort_tagged(tagged, handler, finalizer)

    with preserved_error() as ambient:
        with _FinalizerGuard(finally_block.block if finally_block else None):
            attempt = 0
            while True:
                attempt += 1
                set_last_error(ambient)
                outcome = _context_eval(want, block)
                if outcome.is_ok():
                    return outcome.value

                failure = outcome.err()
                logger.debug(
                    "protected block failed on attempt %d: %s", attempt, LazyRepr(failure)
                )
                if catch_block is None:
                    return _no_value(want)

                handled = _call_handler(want, catch_block.block, failure, attempt)
                if handled is _RESTART:
                    continue
                if handled.is_err():
                    raise handled.as_exception()
                return handled.value


def protected(
    *tagged: object,
    handler: object = None,
    finalizer: object = None,
    want: Want = "scalar",
) -> Callable[[F], F]:
    """Decorator running every call of the wrapped function through ``run_protected``.

    Example::

        @protected(catch(lambda err: "fallback"))
        def load():
            return fetch()
    """
    catch_block, finally_block = _sort_tagged(tagged, handler, finalizer)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return run_protected(
                functools.partial(func, *args, **kwargs),
                catch_block,
                finally_block,
                want=want,
            )

        return wrapper  # type: ignore[return-value]

    return decorator


# Reads like the statement it stands for
try_ = run_protected


__all__ = [
    "protected",
    "run_protected",
    "try_",
]
