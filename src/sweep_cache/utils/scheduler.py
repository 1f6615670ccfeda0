from __future__ import annotations

import asyncio
import logging
import typing as t

_logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs an async callback every ``interval_ms`` on the running event loop.

    ``stop()`` waits for an in-progress callback to finish, so once it
    returns the callback will not run again until ``start()`` is called.
    """

    def __init__(self, callback: t.Callable[[], t.Awaitable[t.Any]], interval_ms: float, name: str = "periodic") -> None:
        self._callback = callback
        self._interval = interval_ms / 1000.0
        self._name = name
        self._task: t.Optional[asyncio.Task] = None
        self._stopping: t.Optional[asyncio.Event] = None
        self._draining: t.Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self) -> bool:
        if self._task is not None:
            return False
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise RuntimeError(f"{self._name}: starting the periodic task requires a running event loop") from exc
        self._stopping = asyncio.Event()
        self._task = loop.create_task(self._run(self._stopping), name=self._name)
        _logger.debug("Started %s every %.3fs", self._name, self._interval)
        return True

    async def stop(self) -> bool:
        """Stop the loop. Returns False if it was not running.

        Every caller, including one that loses the race to an earlier
        ``stop()``, returns only after the in-progress callback has finished.
        """
        task, stopping = self._task, self._stopping
        if task is None or stopping is None:
            await self._wait_drained()
            return False
        self._task = None
        self._stopping = None
        self._draining = task
        stopping.set()
        try:
            await self._wait_drained()
        finally:
            if self._draining is task:
                self._draining = None
        _logger.debug("Stopped %s", self._name)
        return True

    async def _wait_drained(self) -> None:
        task = self._draining
        # Called from inside the callback: the loop exits once it returns.
        if task is None or task is asyncio.current_task():
            return
        await asyncio.shield(task)

    async def _run(self, stopping: asyncio.Event) -> None:
        while not stopping.is_set():
            try:
                await asyncio.wait_for(stopping.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
            else:
                break
            try:
                await self._callback()
            except Exception:  # noqa: BLE001 - keep ticking
                _logger.exception("%s callback failed", self._name)
