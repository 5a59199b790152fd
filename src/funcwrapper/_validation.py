"""Internal validation helpers shared by wrappers and the factory.

These helpers centralize how a callable's sync/async shape is detected so
that construction-time and call-time checks agree.
"""

from __future__ import annotations

import inspect
import typing

from funcwrapper.errors import HINTS, ShapeMismatchError

if typing.TYPE_CHECKING:
    from funcwrapper.types import WrapperKind


def is_async_callable(obj: object) -> bool:
    """Return True when calling *obj* produces a coroutine.

    Recognizes ``async def`` functions and methods, ``functools.partial``
    over them, objects marked with ``inspect.markcoroutinefunction`` and
    instances whose ``__call__`` is a coroutine function.
    """
    if inspect.iscoroutinefunction(obj):
        return True
    if isinstance(obj, type):
        return False
    return inspect.iscoroutinefunction(getattr(obj, "__call__", None))


def shape_name(obj: object) -> str:
    return "async" if is_async_callable(obj) else "sync"


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def require_callable(func: typing.Any, field_name: str) -> None:
    _require(
        condition=callable(func),
        message=f"must be callable, got {type(func).__name__}",
        field_name=field_name,
        exc=TypeError,
    )


def require_zero_arg_callable(func: typing.Any, field_name: str) -> None:
    """Validate a callable can be invoked without arguments."""
    require_callable(func, field_name)
    try:
        sig = inspect.signature(func)
    except (ValueError, TypeError):
        # Builtins and some C callables are not introspectable; accept them
        return
    has_required_params = any(
        p.default is p.empty
        and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
        for p in sig.parameters.values()
    )
    _require(
        condition=not has_required_params,
        message="must be a zero-argument callable",
        field_name=field_name,
        exc=TypeError,
    )


def check_action_shape(
    action: object, *, expect_async: bool, label: str, what: str = "action"
) -> None:
    """Raise ShapeMismatchError when *action* does not match the call path.

    ``label`` names the wrapper in the message, e.g. ``"async_throwing
    wrapper"``; ``what`` names the checked callable.
    """
    actual = shape_name(action)
    expected = "async" if expect_async else "sync"
    if actual == expected:
        return
    hint_key = "sync_action_on_async" if expect_async else "async_action_on_sync"
    raise ShapeMismatchError(
        f"{label} received a {actual} {what}",
        hint=HINTS[hint_key],
        expected=expected,
        actual=actual,
    )


def check_kind_shape(kind: WrapperKind, action: object, what: str = "action") -> None:
    check_action_shape(
        action, expect_async=kind.is_async, label=f"{kind.value} wrapper", what=what
    )


def accepts_positional_arg(func: object) -> bool:
    """Return True unless *func* provably takes no positional argument."""
    try:
        sig = inspect.signature(func)  # type: ignore[arg-type]
    except (ValueError, TypeError):
        return True
    return any(
        p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL)
        for p in sig.parameters.values()
    )


def check_sync_hook(name: str, hook: object) -> None:
    """Reject coroutine hooks on the synchronous call path."""
    if is_async_callable(hook):
        raise ShapeMismatchError(
            f"'{name}' hook is a coroutine function but the action is sync",
            hint=HINTS["async_hook_on_sync"],
            expected="sync",
            actual="async",
        )


__all__ = ()  # internal-only
