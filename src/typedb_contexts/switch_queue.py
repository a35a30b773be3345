"""Single-flight queue in front of a context controller.

A ContextController must not run two operations with different targets at
once. SwitchQueue serializes every mutating operation through one lock, so
concurrent callers (several UI events, parallel requests) each wait their
turn and the controller always ends up on the context of whichever request
completed last.

Usage:
    queue = SwitchQueue(controller)
    await asyncio.gather(queue.switch_or_load("a"), queue.switch_or_load("b"))
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from .controller import ContextController
from .models import ContextStatus

logger = structlog.get_logger()

T = TypeVar("T")


class SwitchQueue:
    """Serializes load / switch / reset / clear requests for one controller."""

    def __init__(self, controller: ContextController):
        self._controller = controller
        self._lock = asyncio.Lock()
        self._pending = 0

    @property
    def controller(self) -> ContextController:
        return self._controller

    @property
    def pending(self) -> int:
        """Requests queued or running."""
        return self._pending

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def _run(
        self, operation: str, call: Callable[[], Awaitable[T]], context: str | None = None
    ) -> T:
        self._pending += 1
        try:
            if self._lock.locked():
                logger.debug(
                    "switch_queue_waiting",
                    operation=operation,
                    context=context,
                    pending=self._pending,
                )
            async with self._lock:
                return await call()
        finally:
            self._pending -= 1

    async def load(self, name: str) -> None:
        await self._run("load", lambda: self._controller.load(name), name)

    async def switch_or_load(self, name: str) -> None:
        await self._run("switch", lambda: self._controller.switch_or_load(name), name)

    async def reset_context(self) -> None:
        await self._run("reset", self._controller.reset_context)

    async def clear_context(self) -> None:
        await self._run("clear", self._controller.clear_context)

    def get_status(self) -> ContextStatus:
        return self._controller.get_status()
