"""Exception hierarchy for funcwrapper.

Errors here only ever signal misuse (bad construction, bad configuration,
mismatched call shapes). An action's own exception is never wrapped or
translated by a wrapper; it reaches the caller unchanged.
"""

from __future__ import annotations


class FuncWrapperError(Exception):
    """Base exception for all funcwrapper errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(FuncWrapperError):
    """Wrapper construction or configuration resolution failed."""


class ShapeMismatchError(FuncWrapperError, TypeError):
    """A callable's sync/async shape does not match the wrapper's kind.

    Raised before any wrapping logic runs, so no side effects have happened
    when a caller sees it.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.expected = expected
        self.actual = actual


# --- Actionable Hints ---

HINTS = {
    "async_action_on_sync": (
        "Use an async wrapper (async_wrapper / async_throwing_wrapper) or a "
        "split wrapper for coroutine functions."
    ),
    "sync_action_on_async": (
        "Async wrappers await their action; pass an `async def` callable or "
        "use a sync wrapper."
    ),
    "async_hook_on_sync": (
        "Coroutine before/after hooks can only run around async actions. "
        "Await the wrapper with an async action or make the hook synchronous."
    ),
    "logic_and_hooks": (
        "Pass either `logic` for a unified wrapper or `before`/`after` for a "
        "split wrapper, not both."
    ),
}
