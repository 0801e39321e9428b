"""
Fan-out Publisher

`publish()` is called synchronously from the request path after a
successful write. Delivery runs on detached tasks so neither a slow
subscriber nor a slow mail server delays the response, and no failure on
those tasks reaches the caller.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from pydantic_core import to_jsonable_python

from app.notifications.events import RealtimeEvent
from app.notifications.hub import BroadcastHub

logger = logging.getLogger(__name__)


class FanoutPublisher:
    def __init__(self, hub: Optional[BroadcastHub] = None):
        self.hub = hub or BroadcastHub()
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    def publish(self, event: RealtimeEvent, payload: Any) -> None:
        """Broadcast a typed event to every connected subscriber"""
        name = event.value if isinstance(event, RealtimeEvent) else str(event)
        data = to_jsonable_python(payload)
        self._spawn(f"broadcast:{name}", self.hub.broadcast, name, data)

    def dispatch(self, label: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> None:
        """Run a side effect (e.g. an email) in the background"""
        self._spawn(label, func, *args, **kwargs)

    def _spawn(self, label: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> None:
        if self._closed:
            logger.warning("Publisher closed, dropping %s", label)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, dropping %s", label)
            return
        task = loop.create_task(self._guarded(label, func, *args, **kwargs))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _guarded(self, label: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> None:
        try:
            await func(*args, **kwargs)
        except asyncio.CancelledError:
            logger.info("Background task cancelled: %s", label)
            raise
        except Exception:
            logger.exception("Background task failed: %s", label)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for everything already dispatched"""
        while self._tasks:
            tasks = list(self._tasks)
            done, not_done = await asyncio.wait(tasks, timeout=timeout)
            if not_done:
                logger.warning("%d background task(s) still running after drain timeout", len(not_done))
                return

    async def close(self, timeout: float = 10.0) -> None:
        """Stop accepting work, finish what is in flight, close the hub"""
        self._closed = True
        await self.drain(timeout)
        for task in list(self._tasks):
            task.cancel()
        await self.hub.close()
