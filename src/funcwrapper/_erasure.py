"""Internal type-erasure utilities for unified wrappers.

Wrapping logic is written once, independent of the action's result type.
Wrappers store it behind a uniform ``Callable[[Callable[[], Any]], Any]``
signature and restore the caller's ``T`` on the way out. Only the action's
own value flows through the erased path, so restoring is a static cast that
cannot fail at runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeGuard, cast

from funcwrapper._validation import require_callable
from funcwrapper.types import WrapperKind

if TYPE_CHECKING:
    from collections.abc import Callable


class ErasedLogic(Protocol):
    """Type-erased wrapping logic for uniform wrapper storage (internal)."""

    kind: WrapperKind
    logic_name: str

    def __call__(self, action: Callable[[], Any], /) -> Any: ...


def is_erased_logic(obj: object) -> TypeGuard[ErasedLogic]:
    """Return True if object was produced by ``erase`` (internal guard).

    We require a sentinel attribute set by our holder to avoid falsely
    classifying user callables that happen to define a ``kind``.
    """
    try:
        if getattr(obj, "__erased__", False) is not True:
            return False
        return isinstance(getattr(obj, "kind", None), WrapperKind) and callable(obj)
    except Exception:
        return False


class _ErasedHolder:
    """Adapter from typed wrapping logic to ``ErasedLogic`` (internal)."""

    def __init__(self, inner: Callable[..., Any], kind: WrapperKind):
        self._inner = inner
        self.kind = kind
        self.logic_name = getattr(inner, "__qualname__", type(inner).__name__)
        # Sentinel used to positively identify erased instances
        self.__erased__ = True

    def __call__(self, action: Callable[[], Any], /) -> Any:
        return self._inner(action)

    def __repr__(self) -> str:
        return f"<erased {self.kind.value} logic {self.logic_name}>"


def erase(logic: Callable[..., Any], kind: WrapperKind) -> ErasedLogic:
    """Erase typed wrapping logic to a uniform holder tagged with *kind*."""
    require_callable(logic, "logic")
    if is_erased_logic(logic):
        if logic.kind is kind:
            return logic
        # Same body, different declared convention: re-tag without nesting
        inner = getattr(logic, "_inner", logic)
        return cast("ErasedLogic", _ErasedHolder(inner, kind))
    return cast("ErasedLogic", _ErasedHolder(logic, kind))


def restore[T](value: object) -> T:
    """Return *value* typed as the caller's ``T``.

    This is lossless for every ``T`` including ``None``; no runtime
    conversion happens.
    """
    return cast("T", value)


__all__ = ()  # internal-only
