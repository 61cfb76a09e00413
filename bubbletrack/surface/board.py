from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from bubbletrack.gestures.controller import GestureController, GestureOutcome, PointerEvent
from bubbletrack.gestures.pulse import ResetPulse
from bubbletrack.models.image import resolve_image
from bubbletrack.state.actions import Action, DeleteActivity
from bubbletrack.state.reducer import ActivitiesState
from bubbletrack.state.store import ActivityStore
from bubbletrack.surface.bounds import BoundsTracker
from bubbletrack.surface.reposition import RepositionPolicy
from bubbletrack.surface.ticker import NowTicker
from bubbletrack.utils.constants import DEFAULT_IMAGE_URL
from bubbletrack.utils.helper import now_ms
from bubbletrack.utils.timefmt import elapsed_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BubbleView:
    '''Everything needed to draw one bubble.'''

    id: str
    label: str
    elapsed: str
    image_url: str
    x: float
    y: float
    size: int
    pulsing: bool

    @property
    def aria_label(self) -> str:
        return f'{self.label}, {self.elapsed}'


class BubbleBoard:
    '''The surface that shows one category's bubbles.

    Mounting measures the surface and hooks the reposition policy in ahead of
    anything else. Unmounting detaches this board's own listeners and stops
    its gesture controllers and ticker; a tracker passed in by the caller is
    left open for its other subscribers.
    '''

    def __init__(
        self,
        store: ActivityStore,
        category: str,
        tracker: Optional[BoundsTracker] = None,
        ticker: Optional[NowTicker] = None,
        default_image_url: str = DEFAULT_IMAGE_URL,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.category = category
        self._owns_tracker = tracker is None
        self.tracker = tracker or BoundsTracker()
        self.ticker = ticker or NowTicker(clock=clock)
        self.default_image_url = default_image_url
        self._clock = clock
        self.policy = RepositionPolicy(store)
        self._controllers: dict[str, GestureController] = {}
        self._pulses: dict[str, ResetPulse] = {}
        self._unsubscribe_store: Optional[Callable[[], None]] = None
        self.mounted = False

    def mount(self, width: float, height: float) -> None:
        if self.mounted:
            self.tracker.update(width, height)
            return
        self.policy.attach(self.tracker)
        self._unsubscribe_store = self.store.subscribe(self._on_store_change)
        self.mounted = True
        self.tracker.update(width, height)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug('No running event loop; "now" refreshes only on tick()')
        else:
            self.ticker.start()
        logger.info(f'Mounted {self.category!r} board at {width}x{height}')

    def unmount(self) -> None:
        if not self.mounted:
            return
        self.mounted = False
        try:
            self.ticker.stop()
            for controller in self._controllers.values():
                controller.abort()
        finally:
            self._controllers.clear()
            self._pulses.clear()
            self.policy.detach()
            if self._owns_tracker:
                self.tracker.close()
            if self._unsubscribe_store is not None:
                self._unsubscribe_store()
                self._unsubscribe_store = None
        logger.info(f'Unmounted {self.category!r} board')

    @contextmanager
    def session(self, width: float, height: float) -> Iterator['BubbleBoard']:
        self.mount(width, height)
        try:
            yield self
        finally:
            self.unmount()

    def _on_store_change(self, state: ActivitiesState, action: Action) -> None:
        if isinstance(action, DeleteActivity):
            controller = self._controllers.pop(action.id, None)
            if controller is not None:
                controller.abort()
            self._pulses.pop(action.id, None)

    def resize(self, width: float, height: float) -> None:
        self.tracker.update(width, height)

    def controller_for(self, activity_id: str) -> GestureController:
        controller = self._controllers.get(activity_id)
        if controller is None:
            controller = GestureController(activity_id, self.store, self.tracker)
            self._controllers[activity_id] = controller
        return controller

    def pointer(self, activity_id: str, event: PointerEvent) -> Optional[GestureOutcome]:
        if not self.mounted or self.store.get(activity_id) is None:
            return None
        return self.controller_for(activity_id).handle(event)

    def report_image_error(self, activity_id: str) -> None:
        '''Presentation layer failed to load this bubble's image.'''
        activity = self.store.get(activity_id)
        if activity is None or activity.image_failed:
            return
        logger.warning(f'Image failed to load for {activity_id}; using fallback')
        self.store.image_load_error(activity_id)

    def views(self) -> list[BubbleView]:
        now = self.ticker.now
        instant = self._clock()
        views = []
        for activity in self.store.list_by_category(self.category):
            pulse = self._pulses.setdefault(activity.id, ResetPulse())
            pulse.observe(activity.last_reset_at, instant)
            views.append(
                BubbleView(
                    id=activity.id,
                    label=activity.title,
                    elapsed=elapsed_label(activity.last_reset_at, now),
                    image_url=resolve_image(
                        activity.image, activity.image_failed, self.default_image_url
                    ),
                    x=activity.x,
                    y=activity.y,
                    size=activity.size,
                    pulsing=pulse.is_active(instant),
                )
            )
        return views
