from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from bubbletrack.utils.constants import NOW_REFRESH_SECONDS
from bubbletrack.utils.helper import now_ms

logger = logging.getLogger(__name__)


class NowTicker:
    '''Periodically refreshed "now" used for elapsed labels.

    Only ever reads the clock; activity data is never touched from here.
    '''

    def __init__(
        self,
        interval: float = NOW_REFRESH_SECONDS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self.now = clock()
        self._listeners: list[Callable[[int], None]] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: Callable[[int], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def tick(self) -> int:
        self.now = self._clock()
        for listener in list(self._listeners):
            listener(self.now)
        return self.now

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def start(self) -> None:
        '''Begin ticking on the running loop. Calling twice is harmless.'''
        if self.running:
            return
        self.tick()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()

    async def __aenter__(self) -> 'NowTicker':
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.stop()
