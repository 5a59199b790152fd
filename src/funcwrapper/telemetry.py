"""Telemetry context and reporter interfaces for timing wrapped actions.

When telemetry is disabled a shared no-op context is returned; it still
measures durations so callbacks keep working, but nothing is recorded and
no scope state is touched. Enabled contexts track a per-context scope stack
so nested timing wrappers report dotted scope paths.
"""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
import logging
import time
from typing import TYPE_CHECKING, Any, Final, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

log = logging.getLogger(__name__)

# Context-aware state for thread/async safety
_scope_stack_var: ContextVar[tuple[str, ...]] = ContextVar(
    "funcwrapper_scope_stack",
    default=(),
)

# Built-in metadata keys
DEPTH: Final[str] = "depth"
PARENT_SCOPE: Final[str] = "parent_scope"
START_MONOTONIC_S: Final[str] = "start_monotonic_s"
END_MONOTONIC_S: Final[str] = "end_monotonic_s"
START_WALL_TIME_S: Final[str] = "start_wall_time_s"


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(slots=True)
class OpenScope:
    """A started timing scope, handed from ``start`` to ``finish``."""

    name: str
    path: str
    start_monotonic_s: float
    start_wall_time_s: float
    metadata: dict[str, Any] = field(default_factory=dict)
    token: Token[tuple[str, ...]] | None = None


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """Stateless context used when telemetry is disabled."""

    @property
    def is_enabled(self) -> bool:
        return False

    def start(self, name: str, **metadata: Any) -> OpenScope:
        return OpenScope(name, name, time.perf_counter(), 0.0, metadata)

    def finish(self, scope: OpenScope) -> float:
        return time.perf_counter() - scope.start_monotonic_s

    @contextmanager
    def __call__(self, name: str, **metadata: Any) -> Iterator[OpenScope]:
        yield self.start(name, **metadata)


class _EnabledTelemetryContext:
    """Full-featured telemetry context when enabled."""

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    @property
    def is_enabled(self) -> bool:
        return True

    def start(self, name: str, **metadata: Any) -> OpenScope:
        """Open a scope nested under whatever scope is currently active."""
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")
        stack = _scope_stack_var.get()
        token = _scope_stack_var.set((*stack, name))
        return OpenScope(
            name=name,
            path=".".join((*stack, name)),
            start_monotonic_s=time.perf_counter(),
            start_wall_time_s=time.time(),
            metadata=metadata,
            token=token,
        )

    def finish(self, scope: OpenScope) -> float:
        """Close *scope*, report its duration and return it in seconds."""
        end_monotonic_s = time.perf_counter()
        duration = end_monotonic_s - scope.start_monotonic_s
        if scope.token is not None:
            _scope_stack_var.reset(scope.token)
            scope.token = None

        parent = _scope_stack_var.get()
        enhanced_metadata: dict[str, Any] = {
            DEPTH: len(parent),
            PARENT_SCOPE: ".".join(parent) if parent else None,
            START_MONOTONIC_S: scope.start_monotonic_s,
            END_MONOTONIC_S: end_monotonic_s,
            START_WALL_TIME_S: scope.start_wall_time_s,
            **scope.metadata,
        }
        for reporter in self.reporters:
            try:
                reporter.record_timing(scope.path, duration, **enhanced_metadata)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )
        return duration

    @contextmanager
    def __call__(self, name: str, **metadata: Any) -> Iterator[OpenScope]:
        scope = self.start(name, **metadata)
        try:
            yield scope
        finally:
            self.finish(scope)


_NO_OP_SINGLETON = _NoOpTelemetryContext()

type TelemetryContextProtocol = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(  # noqa: N802
    *reporters: TelemetryReporter, enabled: bool | None = None
) -> TelemetryContextProtocol:
    """Return a telemetry context.

    Behavior:
    - ``enabled=None`` defers to ``telemetry_enabled`` in the active
      configuration (``FUNCWRAPPER_TELEMETRY_ENABLED=1``).
    - An enabled context without reporters gets a fresh ``InMemoryReporter``.
    - A disabled context is the shared no-op instance.
    """
    if enabled is None:
        from funcwrapper.config import current_config

        enabled = current_config().telemetry_enabled
    if enabled:
        return _EnabledTelemetryContext(*(reporters or (InMemoryReporter(),)))
    return _NO_OP_SINGLETON


class InMemoryReporter:
    """Reporter that keeps a bounded history of timings per scope."""

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = {}

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        if scope not in self.timings:
            self.timings[scope] = deque(maxlen=self.max_entries)
        self.timings[scope].append((duration, metadata))

    def reset(self) -> None:
        """Clear all collected timings (testing convenience)."""
        self.timings.clear()

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot of collected data."""
        return {"timings": {key: list(values) for key, values in self.timings.items()}}

    def get_report(self) -> str:
        lines = ["=== Timing Report ==="]
        for scope, values in sorted(self.timings.items()):
            durations = [v[0] for v in values]
            lines.append(
                f"{scope:<40} | Calls: {len(durations):<4} | "
                f"Avg: {sum(durations) / len(durations):.4f}s | "
                f"Total: {sum(durations):.4f}s"
            )
        return "\n".join(lines)


__all__ = [
    "InMemoryReporter",
    "OpenScope",
    "TelemetryContext",
    "TelemetryContextProtocol",
    "TelemetryReporter",
]
