from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class BackgroundWriter:
    """Runs blocking persistence calls off the event loop without awaiting them.

    Failures are logged and dropped; nothing is retried.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task] = set()

    def submit(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run(label, fn, *args, **kwargs))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        try:
            await asyncio.to_thread(fn, *args, **kwargs)
        except Exception:
            logger.exception("background write failed (%s)", label)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
