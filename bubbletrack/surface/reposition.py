from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from bubbletrack.state.store import ActivityStore
from bubbletrack.surface.bounds import Bounds, BoundsTracker
from bubbletrack.utils.helper import clamp
from bubbletrack.utils.tracing import trace_span

logger = logging.getLogger(__name__)


def clamp_position(x: float, y: float, size: float, bounds: Bounds) -> tuple[float, float]:
    max_x, max_y = bounds.max_xy(size)
    return clamp(x, 0, max_x), clamp(y, 0, max_y)


class RepositionPolicy:
    '''Keeps every stored position inside the latest surface bounds.'''

    def __init__(self, store: ActivityStore) -> None:
        self.store = store
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, tracker: BoundsTracker) -> None:
        '''Subscribe ahead of every other bounds listener.

        If the tracker already has a measurement, it is applied immediately.
        '''
        self.detach()
        self._unsubscribe = tracker.subscribe(self.apply, first=True)
        if tracker.bounds is not None:
            self.apply(tracker.bounds)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def apply(self, bounds: Bounds) -> int:
        '''Clamp all activities into `bounds`; returns how many were moved.'''
        moved = 0
        with trace_span('reposition.apply', {'width': bounds.width, 'height': bounds.height}) as span:
            for activity in self.store.activities:
                x, y = clamp_position(activity.x, activity.y, activity.size, bounds)
                if (x, y) == (activity.x, activity.y):
                    continue
                self.store.move(activity.id, x, y)
                moved += 1
            span.tags['moved'] = moved
        if moved:
            logger.info(f'Re-clamped {moved} activities into {bounds.width}x{bounds.height}')
        return moved


class SpawnKind(str, Enum):
    ORIGIN = 'origin'
    CENTER = 'center'


class SpawnPolicy:
    '''Where newly added activities appear.

    CENTER needs a measured surface; before the first measurement it falls
    back to the origin.
    '''

    def __init__(self, kind: SpawnKind = SpawnKind.ORIGIN, tracker: Optional[BoundsTracker] = None):
        self.kind = SpawnKind(kind)
        self.tracker = tracker

    def __call__(self, category: str, size: int) -> tuple[float, float]:
        bounds = self.tracker.bounds if self.tracker is not None else None
        if self.kind is SpawnKind.ORIGIN or bounds is None:
            return 0, 0
        x = (bounds.width - size) / 2
        y = (bounds.height - size) / 2
        return clamp_position(x, y, size, bounds)
