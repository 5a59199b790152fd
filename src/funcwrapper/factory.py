"""Construction API: one overloaded factory plus named constructors.

Python cannot resolve overloads on a closure's signature the way a
statically-typed caller would, so the calling convention is carried as an
explicit ``WrapperKind``. When no kind is given it is inferred from the
logic: coroutine functions become ``ASYNC_THROWING``, anything else
``THROWING`` (every Python callable may raise).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Literal, overload

from funcwrapper._validation import is_async_callable, require_callable
from funcwrapper.errors import HINTS, ConfigurationError
from funcwrapper.types import WrapperKind
from funcwrapper.wrappers import (
    AsyncThrowingWrapper,
    AsyncWrapper,
    CleanupWrapper,
    SplitWrapper,
    SyncWrapper,
    ThrowingWrapper,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from funcwrapper.types import (
        AsyncThrowingWrappingLogic,
        AsyncWrappingLogic,
        SyncWrappingLogic,
        ThrowingWrappingLogic,
    )
    from funcwrapper.wrappers import UnifiedWrapper

log = logging.getLogger(__name__)

_UNIFIED: dict[WrapperKind, type[Any]] = {
    WrapperKind.SYNC: SyncWrapper,
    WrapperKind.THROWING: ThrowingWrapper,
    WrapperKind.ASYNC: AsyncWrapper,
    WrapperKind.ASYNC_THROWING: AsyncThrowingWrapper,
}


def _coerce_kind(kind: WrapperKind | str) -> WrapperKind:
    if isinstance(kind, WrapperKind):
        return kind
    try:
        return WrapperKind(kind)
    except ValueError:
        valid = ", ".join(repr(k.value) for k in WrapperKind)
        raise ConfigurationError(
            f"Unknown wrapper kind: {kind!r}", hint=f"Valid kinds: {valid}"
        ) from None


def resolve_kind(logic: object, kind: WrapperKind | str | None = None) -> WrapperKind:
    """Return the kind *logic* will be wrapped as.

    An explicit sync kind for coroutine logic is rejected. An explicit async
    kind for plain logic is allowed: a plain callable returning the action's
    awaitable (``lambda action: action()``) is valid async logic.
    """
    require_callable(logic, "logic")
    logic_is_async = is_async_callable(logic)
    if kind is None:
        return WrapperKind.of(is_async=logic_is_async, may_raise=True)
    resolved = _coerce_kind(kind)
    if logic_is_async and not resolved.is_async:
        raise ConfigurationError(
            f"kind={resolved.value!r} cannot run coroutine logic",
            hint="Use an async kind or make the logic synchronous.",
        )
    return resolved


def _resolve_validate(validate: bool | None) -> bool:
    if validate is not None:
        return validate
    from funcwrapper.config import current_config

    return current_config().validate_actions


# --- Overloaded factory ---


@overload
def make_wrapper(
    logic: SyncWrappingLogic,
    *,
    kind: Literal[WrapperKind.SYNC, "sync"],
    validate: bool | None = ...,
) -> SyncWrapper: ...


@overload
def make_wrapper(
    logic: ThrowingWrappingLogic,
    *,
    kind: Literal[WrapperKind.THROWING, "throwing"],
    validate: bool | None = ...,
) -> ThrowingWrapper: ...


@overload
def make_wrapper(
    logic: AsyncWrappingLogic,
    *,
    kind: Literal[WrapperKind.ASYNC, "async"],
    validate: bool | None = ...,
) -> AsyncWrapper: ...


@overload
def make_wrapper(
    logic: AsyncThrowingWrappingLogic,
    *,
    kind: Literal[WrapperKind.ASYNC_THROWING, "async_throwing"],
    validate: bool | None = ...,
) -> AsyncThrowingWrapper: ...


@overload
def make_wrapper(
    logic: Callable[..., Any],
    *,
    kind: None = ...,
    validate: bool | None = ...,
) -> ThrowingWrapper | AsyncThrowingWrapper: ...


@overload
def make_wrapper[K](
    *,
    before: Callable[[], K] | Callable[[], Awaitable[K]],
    after: Callable[[K], object] | Callable[[], object] | None = ...,
    validate: bool | None = ...,
) -> SplitWrapper[K]: ...


@overload
def make_wrapper(
    *,
    after: Callable[[], object],
    validate: bool | None = ...,
) -> SplitWrapper[None]: ...


def make_wrapper(
    logic: Callable[..., Any] | None = None,
    *,
    kind: WrapperKind | str | None = None,
    before: Callable[[], Any] | None = None,
    after: Callable[..., Any] | None = None,
    validate: bool | None = None,
) -> UnifiedWrapper | SplitWrapper[Any]:
    """Build a wrapper from unified logic or from before/after hooks.

    Args:
        logic: Around-logic receiving the action; selects a unified wrapper.
        kind: Calling convention for ``logic``; inferred when omitted.
        before: Hook run before the action; its result is passed to ``after``.
        after: Hook run after a successful action.
        validate: Check each action's shape at call time. ``None`` defers to
            ``validate_actions`` in the active configuration.

    Raises:
        ConfigurationError: On conflicting or missing arguments.

    Example:
        timed = make_wrapper(before=time.perf_counter,
                             after=lambda t0: print(time.perf_counter() - t0))
        value = timed(lambda: compute())
    """
    if logic is not None and (before is not None or after is not None):
        raise ConfigurationError(
            "make_wrapper() got both logic and before/after hooks",
            hint=HINTS["logic_and_hooks"],
        )
    if logic is None:
        if kind is not None:
            raise ConfigurationError(
                "kind applies only to unified wrappers",
                hint="Split wrappers accept every action shape; drop kind=.",
            )
        if before is None and after is None:
            raise ConfigurationError(
                "make_wrapper() needs logic or at least one of before/after",
                hint=HINTS["logic_and_hooks"],
            )
        return split_wrapper(before, after, validate=validate)

    resolved = resolve_kind(logic, kind)
    return _UNIFIED[resolved](logic, validate=_resolve_validate(validate))


# --- Named constructors ---


def sync_wrapper(
    logic: SyncWrappingLogic, *, validate: bool | None = None
) -> SyncWrapper:
    return SyncWrapper(logic, validate=_resolve_validate(validate))


def throwing_wrapper(
    logic: ThrowingWrappingLogic, *, validate: bool | None = None
) -> ThrowingWrapper:
    return ThrowingWrapper(logic, validate=_resolve_validate(validate))


def async_wrapper(
    logic: AsyncWrappingLogic, *, validate: bool | None = None
) -> AsyncWrapper:
    return AsyncWrapper(logic, validate=_resolve_validate(validate))


def async_throwing_wrapper(
    logic: AsyncThrowingWrappingLogic, *, validate: bool | None = None
) -> AsyncThrowingWrapper:
    return AsyncThrowingWrapper(logic, validate=_resolve_validate(validate))


def split_wrapper[K](
    before: Callable[[], K] | None = None,
    after: Callable[[K], object] | Callable[[], object] | None = None,
    *,
    validate: bool | None = None,
) -> SplitWrapper[K]:
    """Build a wrapper that skips ``after`` when the action raises."""
    return SplitWrapper(before, after, validate=_resolve_validate(validate))


def cleanup_wrapper[K](
    before: Callable[[], K] | None = None,
    after: Callable[[K], object] | Callable[[], object] | None = None,
    *,
    validate: bool | None = None,
) -> CleanupWrapper[K]:
    """Build a wrapper whose ``after`` runs even when the action raises."""
    return CleanupWrapper(before, after, validate=_resolve_validate(validate))


def make_typed_wrapper[F: Callable[..., Any]](
    logic: F, *, kind: WrapperKind | str | None = None
) -> F:
    """Return logic already typed for one result type, unchanged.

    This is the typed alternative to ``make_wrapper``: the result type is
    fixed when the logic is written, so no erasure is involved and the
    logic itself is the wrapper. Only the kind is checked.
    """
    resolved = resolve_kind(logic, kind)
    if log.isEnabledFor(logging.DEBUG):
        log.debug("Typed %s wrapper: %r", resolved.value, logic)
    return logic


__all__ = [
    "async_throwing_wrapper",
    "async_wrapper",
    "cleanup_wrapper",
    "make_typed_wrapper",
    "make_wrapper",
    "resolve_kind",
    "split_wrapper",
    "sync_wrapper",
    "throwing_wrapper",
]
