"""Wrapper objects: unified around-logic and split before/after hooks.

Unified wrappers hold one piece of wrapping logic that receives the action
and decides when (or whether) to invoke it. The logic is stored type-erased
and the action's ``T`` is restored on the way out, so a single wrapper
instance serves any result type chosen at the call site.

Split wrappers run ``before``, then the action, then ``after`` with
``before``'s result. They accept every action shape: coroutine functions
are awaited, plain callables are called. If the action raises, ``after``
is skipped; ``CleanupWrapper`` is the variant that always runs it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Coroutine
import functools
import inspect
import logging
from typing import Any, ClassVar, cast, overload

from funcwrapper._erasure import erase, restore
from funcwrapper._validation import (
    accepts_positional_arg,
    check_action_shape,
    check_kind_shape,
    check_sync_hook,
    is_async_callable,
    require_callable,
    require_zero_arg_callable,
)
from funcwrapper.errors import ConfigurationError
from funcwrapper.types import Action, AsyncAction, WrapperKind

log = logging.getLogger(__name__)


def _describe(obj: object) -> str:
    return getattr(obj, "__qualname__", type(obj).__name__)


# --- Unified wrappers ---


class _UnifiedWrapper:
    """Shared storage for the four unified wrappers (internal)."""

    __slots__ = ("_execute", "_validate")

    kind: ClassVar[WrapperKind]

    def __init__(self, logic: Callable[..., Any], *, validate: bool = False):
        require_callable(logic, "logic")
        if not self.kind.is_async and is_async_callable(logic):
            raise ConfigurationError(
                f"{type(self).__name__} cannot run coroutine logic "
                f"'{_describe(logic)}'",
                hint="Use async_wrapper() or async_throwing_wrapper() for async logic.",
            )
        self._execute = erase(logic, self.kind)
        self._validate = validate
        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                "Built %s around %s (validate=%s)",
                type(self).__name__,
                self._execute.logic_name,
                validate,
            )

    @property
    def logic_name(self) -> str:
        return self._execute.logic_name

    @property
    def validates_actions(self) -> bool:
        return self._validate

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.logic_name})"


class _SyncUnifiedWrapper(_UnifiedWrapper):
    __slots__ = ()

    def __call__[T](self, action: Action[T], /) -> T:
        """Run *action* through the configured logic and return its value."""
        if self._validate:
            check_kind_shape(self.kind, action)
        try:
            result = self._execute(action)
        except Exception as exc:
            if log.isEnabledFor(logging.DEBUG):
                log.debug("%r propagating %s", self, type(exc).__name__)
            raise
        return restore(result)

    def decorate[**P, R](self, fn: Callable[P, R]) -> Callable[P, R]:
        """Return *fn* wrapped so every call runs through this wrapper."""
        check_kind_shape(self.kind, fn, what="function")

        @functools.wraps(fn)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            return self(functools.partial(fn, *args, **kwargs))

        return wrapped


class _AsyncUnifiedWrapper(_UnifiedWrapper):
    __slots__ = ()

    async def __call__[T](self, action: AsyncAction[T], /) -> T:
        """Await *action* through the configured logic and return its value."""
        if self._validate:
            check_kind_shape(self.kind, action)
        try:
            result = await self._execute(action)
        except Exception as exc:
            if log.isEnabledFor(logging.DEBUG):
                log.debug("%r propagating %s", self, type(exc).__name__)
            raise
        return restore(result)

    def decorate[**P, R](
        self, fn: Callable[P, Awaitable[R]]
    ) -> Callable[P, Coroutine[Any, Any, R]]:
        """Return async *fn* wrapped so every call runs through this wrapper."""
        check_kind_shape(self.kind, fn, what="function")

        @functools.wraps(fn)
        async def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            return await self(functools.partial(fn, *args, **kwargs))

        return wrapped


class SyncWrapper(_SyncUnifiedWrapper):
    """Wrapper for synchronous actions that are not expected to raise.

    Runs exactly like ``ThrowingWrapper``: nothing is suppressed, and an
    exception from the action still reaches the caller. The kind only
    records the declared contract.
    """

    __slots__ = ()
    kind = WrapperKind.SYNC


class ThrowingWrapper(_SyncUnifiedWrapper):
    """Wrapper for synchronous actions whose exceptions propagate."""

    __slots__ = ()
    kind = WrapperKind.THROWING


class AsyncWrapper(_AsyncUnifiedWrapper):
    """Wrapper for async actions that are not expected to raise.

    Same runtime behaviour as ``AsyncThrowingWrapper``; exceptions are not
    suppressed.
    """

    __slots__ = ()
    kind = WrapperKind.ASYNC


class AsyncThrowingWrapper(_AsyncUnifiedWrapper):
    """Wrapper for async actions whose exceptions propagate."""

    __slots__ = ()
    kind = WrapperKind.ASYNC_THROWING


# --- Split wrappers ---


def _no_before() -> None:
    return None


def _no_after(_: object) -> None:
    return None


class SplitWrapper[K]:
    """Universal wrapper running ``before`` and ``after`` around any action.

    ``after`` receives ``before``'s result unless it takes no positional
    argument, in which case it is called bare. Coroutine hooks are awaited
    on the async path and rejected on the sync path.
    """

    __slots__ = (
        "_after",
        "_after_is_async",
        "_before",
        "_before_is_async",
        "_post",
        "_validate",
    )

    kind: ClassVar[WrapperKind | None] = None

    def __init__(
        self,
        before: Callable[[], K] | Callable[[], Awaitable[K]] | None = None,
        after: Callable[[K], object] | Callable[[], object] | None = None,
        *,
        validate: bool = False,
    ):
        if before is not None:
            require_zero_arg_callable(before, "before")
        if after is not None:
            require_callable(after, "after")
        self._before: Callable[[], Any] = before if before is not None else _no_before
        self._after: Callable[..., Any] = after if after is not None else _no_after
        self._before_is_async = is_async_callable(self._before)
        self._after_is_async = is_async_callable(self._after)
        if accepts_positional_arg(self._after):
            self._post: Callable[[Any], Any] = self._after
        else:
            bare = self._after
            self._post = lambda _: bare()
        self._validate = validate

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(before={_describe(self._before)}, "
            f"after={_describe(self._after)})"
        )

    @overload
    def __call__[T](
        self, action: Callable[[], Coroutine[Any, Any, T]], /
    ) -> Coroutine[Any, Any, T]: ...

    @overload
    def __call__[T](self, action: Callable[[], T], /) -> T: ...

    def __call__(self, action: Callable[[], Any], /) -> Any:
        """Dispatch on the action's shape.

        Coroutine functions get a coroutine back (hooks run when it is
        awaited); anything else runs immediately. A plain callable that
        returns an awaitable also gets a coroutine back, and ``after`` runs
        only once that awaitable has completed.
        """
        if is_async_callable(action):
            return self.arun(action)
        return self.run(action)

    def _check_sync_path(self, action: object) -> None:
        if self._before_is_async:
            check_sync_hook("before", self._before)
        if self._after_is_async:
            check_sync_hook("after", self._after)
        if self._validate:
            check_action_shape(
                action, expect_async=False, label=f"{type(self).__name__}.run()"
            )

    def run[T](self, action: Action[T], /) -> T:
        """Run a synchronous action between the hooks."""
        self._check_sync_path(action)
        pre_result = self._before()
        try:
            result = action()
        except Exception as exc:
            if log.isEnabledFor(logging.DEBUG):
                log.debug("%r skipping after hook: %s", self, type(exc).__name__)
            raise
        if inspect.isawaitable(result):
            return cast("T", self._settle(result, pre_result))
        self._post(pre_result)
        return result

    async def _run_before(self) -> Any:
        pre_result = self._before()
        if self._before_is_async:
            pre_result = await pre_result
        return pre_result

    async def _run_after(self, pre_result: Any) -> None:
        post = self._post(pre_result)
        if self._after_is_async:
            await post

    async def arun[T](self, action: AsyncAction[T], /) -> T:
        """Await an async action between the hooks."""
        if self._validate:
            check_action_shape(
                action, expect_async=True, label=f"{type(self).__name__}.arun()"
            )
        pre_result = await self._run_before()
        try:
            result = await action()
        except Exception as exc:
            if log.isEnabledFor(logging.DEBUG):
                log.debug("%r skipping after hook: %s", self, type(exc).__name__)
            raise
        await self._run_after(pre_result)
        return result

    async def _settle(self, pending: Awaitable[Any], pre_result: Any) -> Any:
        # A plain callable returned an awaitable: after waits for it to finish.
        try:
            result = await pending
        except Exception as exc:
            if log.isEnabledFor(logging.DEBUG):
                log.debug("%r skipping after hook: %s", self, type(exc).__name__)
            raise
        await self._run_after(pre_result)
        return result

    @overload
    def decorate[**P, R](
        self, fn: Callable[P, Coroutine[Any, Any, R]]
    ) -> Callable[P, Coroutine[Any, Any, R]]: ...

    @overload
    def decorate[**P, R](self, fn: Callable[P, R]) -> Callable[P, R]: ...

    def decorate(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Return *fn* wrapped so every call runs between the hooks."""
        require_callable(fn, "fn")
        if is_async_callable(fn):

            @functools.wraps(fn)
            async def async_wrapped(*args: Any, **kwargs: Any) -> Any:
                return await self.arun(functools.partial(fn, *args, **kwargs))

            return async_wrapped

        @functools.wraps(fn)
        def wrapped(*args: Any, **kwargs: Any) -> Any:
            return self.run(functools.partial(fn, *args, **kwargs))

        return cast("Callable[..., Any]", wrapped)


class CleanupWrapper[K](SplitWrapper[K]):
    """Split wrapper whose ``after`` hook also runs when the action raises.

    A failing ``after`` hook never masks the action's exception: it is
    logged and the action's exception propagates unchanged. On success an
    ``after`` failure propagates normally.
    """

    __slots__ = ()

    def _log_cleanup_failure(self, primary: BaseException, cleanup: Exception) -> None:
        log.warning(
            "%r after hook failed while %s was propagating: %s",
            self,
            type(primary).__name__,
            cleanup,
        )

    def run[T](self, action: Action[T], /) -> T:
        self._check_sync_path(action)
        pre_result = self._before()
        try:
            result = action()
        except BaseException as exc:
            try:
                self._post(pre_result)
            except Exception as cleanup_exc:
                self._log_cleanup_failure(exc, cleanup_exc)
            raise
        if inspect.isawaitable(result):
            return cast("T", self._settle(result, pre_result))
        self._post(pre_result)
        return result

    async def arun[T](self, action: AsyncAction[T], /) -> T:
        if self._validate:
            check_action_shape(
                action, expect_async=True, label=f"{type(self).__name__}.arun()"
            )
        pre_result = await self._run_before()
        try:
            result = await action()
        except BaseException as exc:
            try:
                await self._run_after(pre_result)
            except Exception as cleanup_exc:
                self._log_cleanup_failure(exc, cleanup_exc)
            raise
        await self._run_after(pre_result)
        return result

    async def _settle(self, pending: Awaitable[Any], pre_result: Any) -> Any:
        try:
            result = await pending
        except BaseException as exc:
            try:
                await self._run_after(pre_result)
            except Exception as cleanup_exc:
                self._log_cleanup_failure(exc, cleanup_exc)
            raise
        await self._run_after(pre_result)
        return result


type UnifiedWrapper = SyncWrapper | ThrowingWrapper | AsyncWrapper | AsyncThrowingWrapper

__all__ = [
    "AsyncThrowingWrapper",
    "AsyncWrapper",
    "CleanupWrapper",
    "SplitWrapper",
    "SyncWrapper",
    "ThrowingWrapper",
    "UnifiedWrapper",
]
