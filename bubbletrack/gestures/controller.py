from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from bubbletrack.state.store import ActivityStore
from bubbletrack.surface.bounds import BoundsTracker
from bubbletrack.surface.reposition import clamp_position
from bubbletrack.utils.constants import DRAG_THRESHOLD_PX

logger = logging.getLogger(__name__)

PointerKind = Literal['down', 'move', 'up', 'cancel', 'lost_capture']


@dataclass(frozen=True)
class PointerEvent:
    kind: PointerKind
    pointer_id: int
    x: float  # screen space
    y: float


class GestureState(Enum):
    IDLE = 'idle'
    TRACKING = 'tracking'


class GestureOutcome(Enum):
    DRAGGED = 'dragged'
    TAPPED_RESET = 'tapped_reset'


@dataclass
class _Track:
    pointer_id: int
    origin_x: float
    origin_y: float
    start_x: float
    start_y: float
    moved: bool = False


class GestureController:
    '''Drag-or-tap recognizer for a single bubble.

    Idle -> Tracking on pointer down. While tracking, moves of the same pointer
    commit a clamped position straight to the store; once the pointer has
    travelled more than `threshold` px the gesture counts as a drag for good.
    Pointer up/cancel ends it: a drag needs nothing further, anything else is a
    tap and resets the activity's timer. Other pointers are ignored until the
    active one ends.
    '''

    def __init__(
        self,
        activity_id: str,
        store: ActivityStore,
        tracker: BoundsTracker,
        threshold: float = DRAG_THRESHOLD_PX,
    ) -> None:
        self.activity_id = activity_id
        self.store = store
        self.tracker = tracker
        self.threshold = threshold
        self._track: Optional[_Track] = None

    @property
    def state(self) -> GestureState:
        return GestureState.IDLE if self._track is None else GestureState.TRACKING

    @property
    def active_pointer(self) -> Optional[int]:
        return self._track.pointer_id if self._track else None

    def handle(self, event: PointerEvent) -> Optional[GestureOutcome]:
        if event.kind == 'down':
            self.pointer_down(event.pointer_id, event.x, event.y)
            return None
        if event.kind == 'move':
            self.pointer_move(event.pointer_id, event.x, event.y)
            return None
        return self.pointer_end(event.pointer_id)

    def pointer_down(self, pointer_id: int, x: float, y: float) -> bool:
        '''Start tracking. Returns False if the down was ignored.'''
        if self._track is not None:
            return False
        if not self.tracker.measured:
            logger.debug('Ignoring pointer down before the surface was measured')
            return False
        activity = self.store.get(self.activity_id)
        if activity is None:
            return False
        self._track = _Track(
            pointer_id=pointer_id,
            origin_x=x,
            origin_y=y,
            start_x=activity.x,
            start_y=activity.y,
        )
        return True

    def pointer_move(self, pointer_id: int, x: float, y: float) -> Optional[tuple[float, float]]:
        '''Commit the clamped position for this move; None if ignored.'''
        track = self._track
        if track is None or track.pointer_id != pointer_id:
            return None

        activity = self.store.get(self.activity_id)
        bounds = self.tracker.bounds
        if activity is None or bounds is None:
            logger.debug(f'Abandoning gesture on {self.activity_id}: activity or surface gone')
            self._track = None
            return None

        dx = x - track.origin_x
        dy = y - track.origin_y
        if not track.moved and math.hypot(dx, dy) > self.threshold:
            track.moved = True

        # Bounds are read per move so a resize mid-drag is honoured.
        next_xy = clamp_position(track.start_x + dx, track.start_y + dy, activity.size, bounds)
        self.store.move(self.activity_id, *next_xy)
        return next_xy

    def pointer_end(self, pointer_id: int) -> Optional[GestureOutcome]:
        '''Pointer up, cancel or lost capture. Returns how the gesture ended.'''
        track = self._track
        if track is None or track.pointer_id != pointer_id:
            return None
        self._track = None

        if track.moved:
            return GestureOutcome.DRAGGED
        if self.store.get(self.activity_id) is None:
            return None
        self.store.reset_timer(self.activity_id)
        return GestureOutcome.TAPPED_RESET

    def abort(self) -> None:
        '''Drop any gesture in progress without resetting the timer.'''
        self._track = None
