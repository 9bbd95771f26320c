import asyncio
from typing import Callable, Dict
from core.logger import logger

class TaskManager:
    """Named fire-once timers for a single quiz session.

    Each engine owns its own manager, so timers never leak between sessions.
    """

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, name: str, delay: float, callback: Callable[[], None]):
        """Run `callback` once after `delay` seconds, replacing any pending timer with this name."""
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._fire_later(name, delay, callback))
        self.register_task(name, task)

    def register_task(self, name: str, task: asyncio.Task):
        """Register a new task under `name`, cancelling any existing one."""
        self.cancel_task(name)
        self._tasks[name] = task
        logger.debug("Timer armed", timer=name)

        # Add callback to remove from dict when done
        task.add_done_callback(lambda t: self._cleanup_task(name, t))

    def cancel_task(self, name: str):
        """Cancel the pending task for `name` if it exists."""
        if name in self._tasks:
            task = self._tasks.pop(name)
            if not task.done():
                task.cancel()
                logger.debug("Timer cancelled", timer=name)

    def cancel_all(self):
        for name in list(self._tasks):
            self.cancel_task(name)

    def is_pending(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and not task.done()

    async def _fire_later(self, name: str, delay: float, callback: Callable[[], None]):
        await asyncio.sleep(delay)
        # Unregister before firing so the callback may re-arm this name
        if self._tasks.get(name) is asyncio.current_task():
            del self._tasks[name]
        callback()

    def _cleanup_task(self, name: str, task: asyncio.Task):
        """Remove task from dict if it's still the registered one."""
        if self._tasks.get(name) is task:
            del self._tasks[name]
        if not task.cancelled() and task.exception() is not None:
            logger.error("Timer callback failed", timer=name, error=str(task.exception()))
