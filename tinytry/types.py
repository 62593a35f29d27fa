"""
Tagged blocks and calling-context types for tinytry.

Handlers and finalizers are both plain callables, so when they are passed
positionally the runner cannot tell them apart. ``catch``/``finally_``
wrap them in distinct, beartype-validated tags.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from beartype import beartype

# How many values the caller wants back from run_protected
Want: TypeAlias = Literal["list", "scalar", "void"]

ProtectedBlock: TypeAlias = Callable[[], Any]
HandlerBlock: TypeAlias = Callable[[Any], Any]
FinalizerBlock: TypeAlias = Callable[[], Any]


@beartype
@dataclass(frozen=True)
class Catch:
    """A handler: called with the captured failure as its only argument."""

    block: HandlerBlock

    def __repr__(self) -> str:
        return f"Catch({_describe(self.block)})"


@beartype
@dataclass(frozen=True)
class Finally:
    """A finalizer: called with no arguments once the construct is left."""

    block: FinalizerBlock

    def __repr__(self) -> str:
        return f"Finally({_describe(self.block)})"


def _describe(block: Callable[..., Any]) -> str:
    return getattr(block, "__qualname__", None) or repr(block)


def make_handler(block: HandlerBlock) -> Catch:
    return Catch(block)


def make_finalizer(block: FinalizerBlock) -> Finally:
    return Finally(block)


# Short aliases reading like the statement they stand for
catch = make_handler
finally_ = make_finalizer


__all__ = [
    "Catch",
    "Finally",
    "FinalizerBlock",
    "HandlerBlock",
    "ProtectedBlock",
    "Want",
    "catch",
    "finally_",
    "make_finalizer",
    "make_handler",
]
