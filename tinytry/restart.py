"""
Restart control.

A handler invocation pushes a :class:`HandlerScope` onto a thread-local
stack for exactly as long as the handler runs. :func:`request_restart`
is legal only when the innermost scope is active and its caller is the
handler itself, i.e. the frame that called ``request_restart`` was entered
directly from the dispatcher's evaluation frame. Helpers called by the
handler, protected blocks and finalizers all fail that check.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import FrameType
from typing import Any, NoReturn

from tinytry.errors import RestartOutsideHandler
from tinytry.utils import DEBUG_TRY, capture_call_site

logger = logging.getLogger(__name__)

_stacks = threading.local()


@dataclass(eq=False)
class HandlerScope:
    """Marker proving that a handler of one construct is running."""

    failure: Any
    attempt: int
    # Frame that calls the handler; set by the evaluator right before the call
    invoker: FrameType | None = field(default=None, repr=False)
    active: bool = True


class _RestartSignal(BaseException):
    """Unwinds a handler back to its runner loop.

    A ``BaseException`` so that ``except Exception`` in user code cannot
    swallow it. Only the dispatcher owning ``scope`` catches it.
    """

    def __init__(self, scope: HandlerScope) -> None:
        super().__init__("retry")
        self.scope = scope


def _scope_stack() -> list[HandlerScope]:
    stack = getattr(_stacks, "scopes", None)
    if stack is None:
        stack = _stacks.scopes = []
    return stack


def current_scope() -> HandlerScope | None:
    stack = _scope_stack()
    return stack[-1] if stack else None


@contextmanager
def handler_scope(failure: Any, attempt: int) -> Iterator[HandlerScope]:
    """Activate a scope for one handler invocation."""

    scope = HandlerScope(failure=failure, attempt=attempt)
    stack = _scope_stack()
    stack.append(scope)
    try:
        yield scope
    finally:
        scope.active = False
        scope.invoker = None
        stack.pop()


def current_failure() -> Any:
    """Return the failure being handled by the innermost running handler.

    Raises:
        LookupError: when no handler is running in this thread.
    """

    scope = current_scope()
    if scope is None:
        raise LookupError("current_failure() called outside a handler")
    return scope.failure


def request_restart() -> NoReturn:
    """Abandon the running handler and re-run its protected block.

    Never returns. Must be called directly from the body of a handler.

    A comprehension or generator expression inside the handler runs in its
    own frame on Python 3.10 and 3.11, so a ``retry()`` inside one is
    rejected there. Python 3.12 inlines list, set and dict comprehensions
    (PEP 709), so the same call is accepted. Generator expressions keep
    their own frame on every version.

    Raises:
        RestartOutsideHandler: when called from anywhere else.
    """

    scope = current_scope()
    caller = sys._getframe(1)
    if scope is None or not scope.active or caller.f_back is not scope.invoker:
        call_site = capture_call_site(skip_frames=2) if DEBUG_TRY else None
        raise RestartOutsideHandler(call_site)

    logger.debug("restart requested after attempt %d", scope.attempt)
    raise _RestartSignal(scope)


# Reads like the statement it stands for
retry = request_restart


__all__ = [
    "HandlerScope",
    "current_failure",
    "current_scope",
    "handler_scope",
    "request_restart",
    "retry",
]
