"""Ready-made wrappers for the common cross-cutting concerns."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from funcwrapper.factory import cleanup_wrapper, split_wrapper
from funcwrapper.telemetry import TelemetryContext

if TYPE_CHECKING:
    from collections.abc import Callable

    from funcwrapper.telemetry import OpenScope, TelemetryContextProtocol
    from funcwrapper.wrappers import CleanupWrapper, SplitWrapper

log = logging.getLogger(__name__)


def logging_wrapper(
    name: str,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.INFO,
    validate: bool | None = None,
) -> SplitWrapper[None]:
    """Log ``"<name>: start"`` before and ``"<name>: end"`` after the action.

    Follows split semantics: the end line is not logged when the action
    raises.
    """
    target = logger if logger is not None else log

    def before() -> None:
        target.log(level, "%s: start", name)

    def after() -> None:
        target.log(level, "%s: end", name)

    return split_wrapper(before, after, validate=validate)


def timing_wrapper(
    name: str,
    *,
    telemetry: TelemetryContextProtocol | None = None,
    on_timing: Callable[[str, float], object] | None = None,
    validate: bool | None = None,
) -> CleanupWrapper[OpenScope]:
    """Measure how long the action takes, including failed runs.

    Args:
        name: Scope name reported to telemetry and passed to ``on_timing``.
        telemetry: Context to report to; defaults to ``TelemetryContext()``,
            which is a no-op unless telemetry is enabled in configuration.
        on_timing: Called with ``(name, seconds)`` after every run.
        validate: Forwarded to ``cleanup_wrapper``.
    """
    ctx = telemetry if telemetry is not None else TelemetryContext()

    def before() -> OpenScope:
        return ctx.start(name)

    def after(scope: OpenScope) -> None:
        duration = ctx.finish(scope)
        if on_timing is not None:
            on_timing(name, duration)

    return cleanup_wrapper(before, after, validate=validate)


__all__ = ["logging_wrapper", "timing_wrapper"]
