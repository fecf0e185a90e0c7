"""Cancellable delayed tasks keyed by id, on the running asyncio loop."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Union


logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[None]]]


class TaskScheduler:
    """Run a callback once after a delay; at most one task per key."""

    def __init__(self) -> None:
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, key: str, delay: float, callback: Callback) -> asyncio.Task:
        """Schedule `callback` after `delay` seconds, replacing any task under `key`.

        Must be called from inside a running event loop.
        """
        self.cancel(key)
        task = asyncio.get_running_loop().create_task(self._run(key, delay, callback))
        self._tasks[key] = task
        return task

    async def _run(self, key: str, delay: float, callback: Callback) -> None:
        try:
            await asyncio.sleep(delay)
            result = callback()
            if asyncio.iscoroutine(result):
                await result
        except asyncio.CancelledError:
            logger.debug(f"Scheduled task {key} cancelled")
            raise
        except Exception:
            logger.exception(f"Scheduled task {key} failed")
        finally:
            # Only drop our own entry; a replacement may already be registered
            if self._tasks.get(key) is asyncio.current_task():
                del self._tasks[key]

    def cancel(self, key: str) -> bool:
        """Cancel the task under `key`. Returns True if one was pending."""
        task = self._tasks.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def is_pending(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def cancel_all(self) -> int:
        keys = list(self._tasks)
        return sum(1 for k in keys if self.cancel(k))

    def __len__(self) -> int:
        return sum(1 for t in self._tasks.values() if not t.done())
