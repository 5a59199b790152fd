"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: actions and logic shared by the
wrapper suites live here so each suite reads as behavior, not setup.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class OperationFailedError(Exception):
    """Distinct failure raised by test actions."""


def logging_logic(log: list[str]) -> Callable[[Callable[[], Any]], Any]:
    """Around-logic that brackets the action with start/end entries."""

    def logic(work: Callable[[], Any]) -> Any:
        log.append("wrapper.start")
        result = work()
        log.append("wrapper.end")
        return result

    return logic


def async_logging_logic(
    log: list[str],
) -> Callable[[Callable[[], Awaitable[Any]]], Awaitable[Any]]:
    """Async around-logic that brackets the awaited action."""

    async def logic(work: Callable[[], Awaitable[Any]]) -> Any:
        log.append("wrapper.start")
        result = await work()
        log.append("wrapper.end")
        return result

    return logic


def yielding_action(log: list[str], value: Any) -> Callable[[], Awaitable[Any]]:
    """Async action that gives up control once mid-execution."""

    async def action() -> Any:
        log.append("action.start")
        await asyncio.sleep(0)
        log.append("action.end")
        return value

    return action


def failing_action(error: BaseException) -> Callable[[], Any]:
    def action() -> Any:
        raise error

    return action


def async_failing_action(error: BaseException) -> Callable[[], Awaitable[Any]]:
    async def action() -> Any:
        await asyncio.sleep(0)
        raise error

    return action
