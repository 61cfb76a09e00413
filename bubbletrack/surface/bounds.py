from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from bubbletrack.utils.constants import RESIZE_DEBOUNCE_SECONDS
from bubbletrack.utils.helper import max_position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bounds:
    width: float
    height: float

    def __post_init__(self) -> None:
        object.__setattr__(self, 'width', max(0, self.width))
        object.__setattr__(self, 'height', max(0, self.height))

    def max_xy(self, size: float) -> tuple[float, float]:
        return max_position(self.width, self.height, size)


BoundsListener = Callable[[Bounds], None]


class BoundsTracker:
    '''Last known size of the bubble surface, with change notification.

    Listeners run synchronously, in subscription order, before `update`
    returns. A listener subscribed with `first=True` runs ahead of the rest;
    the reposition policy uses this so positions are valid before anything
    else sees the new bounds.
    '''

    def __init__(self, debounce: float = RESIZE_DEBOUNCE_SECONDS) -> None:
        self.debounce = debounce
        self._bounds: Optional[Bounds] = None
        self._listeners: list[BoundsListener] = []
        self._pending: Optional[asyncio.TimerHandle] = None

    @property
    def bounds(self) -> Optional[Bounds]:
        return self._bounds

    @property
    def measured(self) -> bool:
        return self._bounds is not None

    def subscribe(self, listener: BoundsListener, first: bool = False) -> Callable[[], None]:
        if first:
            self._listeners.insert(0, listener)
        else:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, width: float, height: float) -> bool:
        '''Record a measurement. Returns True if listeners were notified.'''
        bounds = Bounds(width, height)
        if bounds == self._bounds:
            return False
        previous, self._bounds = self._bounds, bounds
        logger.debug(f'Surface bounds {previous} -> {bounds}')
        for listener in list(self._listeners):
            try:
                listener(bounds)
            except Exception:
                logger.error(f'Bounds listener failed on {bounds}', exc_info=True)
        return True

    def schedule(self, width: float, height: float) -> None:
        '''Debounced `update` for bursts of resize observations.

        Must be called from a running event loop. Only the last measurement of
        a burst is applied.
        '''
        loop = asyncio.get_running_loop()
        if self._pending is not None:
            self._pending.cancel()
        self._pending = loop.call_later(self.debounce, self._apply_pending, width, height)

    def _apply_pending(self, width: float, height: float) -> None:
        self._pending = None
        self.update(width, height)

    def cancel_pending(self) -> None:
        '''Cancel any pending debounced update without applying it.'''
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def close(self) -> None:
        self.cancel_pending()
        self._listeners.clear()
