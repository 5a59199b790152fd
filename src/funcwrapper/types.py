"""Action shapes, wrapper kinds and wrapping-logic protocols.

An action is a zero-argument callable. Two independent axes describe it:
whether it may raise and whether it suspends. Python has no checked
exceptions, so the "may raise" axis is a declared contract carried by
``WrapperKind`` rather than something the runtime can enforce.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Protocol

type Action[T] = Callable[[], T]
type AsyncAction[T] = Callable[[], Awaitable[T]]


class WrapperKind(Enum):
    """Calling convention of a unified wrapper, fixed at construction."""

    SYNC = "sync"
    THROWING = "throwing"
    ASYNC = "async"
    ASYNC_THROWING = "async_throwing"

    @property
    def is_async(self) -> bool:
        return self in (WrapperKind.ASYNC, WrapperKind.ASYNC_THROWING)

    @property
    def may_raise(self) -> bool:
        return self in (WrapperKind.THROWING, WrapperKind.ASYNC_THROWING)

    @classmethod
    def of(cls, *, is_async: bool, may_raise: bool) -> WrapperKind:
        """Return the kind sitting at the given point on both axes."""
        if is_async:
            return cls.ASYNC_THROWING if may_raise else cls.ASYNC
        return cls.THROWING if may_raise else cls.SYNC


# Logic protocols are generic over the action's result, so one logic object
# serves every ``T`` a caller later passes in.


class SyncWrappingLogic(Protocol):
    """Around-logic for actions that are not expected to raise."""

    def __call__[T](self, action: Action[T], /) -> T: ...


class ThrowingWrappingLogic(Protocol):
    """Around-logic that lets the action's exception propagate."""

    def __call__[T](self, action: Action[T], /) -> T: ...


class AsyncWrappingLogic(Protocol):
    """Async around-logic for actions that are not expected to raise."""

    def __call__[T](self, action: AsyncAction[T], /) -> Awaitable[T]: ...


class AsyncThrowingWrappingLogic(Protocol):
    """Async around-logic that lets the action's exception propagate."""

    def __call__[T](self, action: AsyncAction[T], /) -> Awaitable[T]: ...


type WrappingLogic = (
    SyncWrappingLogic
    | ThrowingWrappingLogic
    | AsyncWrappingLogic
    | AsyncThrowingWrappingLogic
)

__all__ = [
    "Action",
    "AsyncAction",
    "AsyncThrowingWrappingLogic",
    "AsyncWrappingLogic",
    "SyncWrappingLogic",
    "ThrowingWrappingLogic",
    "WrapperKind",
    "WrappingLogic",
]
