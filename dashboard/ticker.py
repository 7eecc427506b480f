"""Periodic countdown recomputation on a single asyncio task."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from .derived import CountdownState, countdowns
from .models import DDay

logger = logging.getLogger("dashboard.ticker")


class CountdownTicker:
    """Recompute countdowns every ``interval`` seconds until stopped.

    Each tick reads the current D-Days from ``ddays_provider`` and hands the
    fresh states to ``on_tick``. Ticks are independent; a failing tick
    is logged and the ticker keeps running.
    """

    def __init__(
        self,
        ddays_provider: Callable[[], Iterable[DDay]],
        on_tick: Callable[[Dict[str, CountdownState]], None],
        interval: float = 1.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.ddays_provider = ddays_provider
        self.on_tick = on_tick
        self.interval = interval
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> Dict[str, CountdownState]:
        """Run one recomputation; failures are logged, never raised."""
        try:
            states = countdowns(self.ddays_provider(), self.clock())
        except Exception as e:
            logger.error(f"Countdown recomputation failed: {e}")
            return {}
        try:
            self.on_tick(states)
        except Exception as e:
            logger.error(f"Countdown tick callback failed: {e}")
        return states

    async def _run(self) -> None:
        while True:
            self.tick()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Start ticking on the running event loop; a second call is a no-op."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
