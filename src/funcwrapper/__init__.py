"""funcwrapper: before/after combinators for sync and async callables.

Public API:
    - make_wrapper(): Build a wrapper from around-logic or before/after hooks
    - sync_wrapper() / throwing_wrapper() / async_wrapper() /
      async_throwing_wrapper(): Named constructors for unified logic
    - split_wrapper() / cleanup_wrapper(): Named constructors for hooks
    - logging_wrapper() / timing_wrapper(): Ready-made recipes

Example:
    log: list[str] = []
    logged = make_wrapper(before=lambda: log.append("start"),
                          after=lambda: log.append("end"))
    assert logged(lambda: 42) == 42
    assert log == ["start", "end"]
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
import logging

from funcwrapper.config import (
    FrozenConfig,
    config_scope,
    reset_config,
    resolve_config,
)
from funcwrapper.errors import ConfigurationError, FuncWrapperError, ShapeMismatchError
from funcwrapper.factory import (
    async_throwing_wrapper,
    async_wrapper,
    cleanup_wrapper,
    make_typed_wrapper,
    make_wrapper,
    split_wrapper,
    sync_wrapper,
    throwing_wrapper,
)
from funcwrapper.recipes import logging_wrapper, timing_wrapper
from funcwrapper.telemetry import InMemoryReporter, TelemetryContext
from funcwrapper.types import (
    Action,
    AsyncAction,
    AsyncThrowingWrappingLogic,
    AsyncWrappingLogic,
    SyncWrappingLogic,
    ThrowingWrappingLogic,
    WrapperKind,
)
from funcwrapper.wrappers import (
    AsyncThrowingWrapper,
    AsyncWrapper,
    CleanupWrapper,
    SplitWrapper,
    SyncWrapper,
    ThrowingWrapper,
)

try:
    __version__ = version("funcwrapper")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("funcwrapper").addHandler(logging.NullHandler())

__all__ = [
    "Action",
    "AsyncAction",
    "AsyncThrowingWrapper",
    "AsyncThrowingWrappingLogic",
    "AsyncWrapper",
    "AsyncWrappingLogic",
    "CleanupWrapper",
    "ConfigurationError",
    "FrozenConfig",
    "FuncWrapperError",
    "InMemoryReporter",
    "ShapeMismatchError",
    "SplitWrapper",
    "SyncWrapper",
    "SyncWrappingLogic",
    "TelemetryContext",
    "ThrowingWrapper",
    "ThrowingWrappingLogic",
    "WrapperKind",
    "async_throwing_wrapper",
    "async_wrapper",
    "cleanup_wrapper",
    "config_scope",
    "logging_wrapper",
    "make_typed_wrapper",
    "make_wrapper",
    "reset_config",
    "resolve_config",
    "split_wrapper",
    "sync_wrapper",
    "throwing_wrapper",
    "timing_wrapper",
]
