from __future__ import annotations

import logging
from typing import Callable, Optional

from bubbletrack.models.activity import Activity, new_activity_id
from bubbletrack.state.actions import (
    Action,
    AddActivity,
    DeleteActivity,
    ImageLoadFailed,
    RenameActivity,
    ResetActivityTimer,
    UpdateActivityImage,
    UpdateActivityPosition,
)
from bubbletrack.state.persistence import parse_persisted_state, serialize_state
from bubbletrack.state.reducer import EMPTY_STATE, ActivitiesState, activities_reducer
from bubbletrack.storage import KeyValueStorage, StorageError
from bubbletrack.utils.constants import (
    DEFAULT_BUBBLE_SIZE,
    LEGACY_STORAGE_KEY,
    STORAGE_KEY,
)
from bubbletrack.utils.helper import now_ms
from bubbletrack.utils.tracing import trace_span

logger = logging.getLogger(__name__)

Listener = Callable[[ActivitiesState, Action], None]
Clock = Callable[[], int]
# (category, size) -> initial (x, y)
SpawnFn = Callable[[str, int], tuple[float, float]]


def _spawn_at_origin(category: str, size: int) -> tuple[float, float]:
    return 0, 0


class ActivityStore:
    '''Single owner of the activity list.

    Every state change goes through `dispatch`, which runs the reducer, writes
    the full list to storage and then notifies subscribers. Consumers get
    immutable snapshots and request changes through the operations below.
    '''

    def __init__(
        self,
        storage: KeyValueStorage,
        clock: Clock = now_ms,
        id_factory: Callable[[], str] = new_activity_id,
        spawn: SpawnFn = _spawn_at_origin,
        default_size: int = DEFAULT_BUBBLE_SIZE,
        key: str = STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._id_factory = id_factory
        self.spawn = spawn
        self.default_size = default_size
        self.key = key
        self._listeners: list[Listener] = []
        self._last_written: Optional[str] = None
        self._closed = False
        self._state = self._load()

    # -- lifecycle ---------------------------------------------------------

    def _load(self) -> ActivitiesState:
        with trace_span('store.load', {'key': self.key}) as span:
            try:
                raw = self._storage.read(self.key)
                if raw is None and self.key == STORAGE_KEY:
                    raw = self._storage.read(LEGACY_STORAGE_KEY)
                    if raw is not None:
                        logger.info('Loading activities from legacy storage key')
            except StorageError:
                logger.error('Could not read persisted activities', exc_info=True)
                return EMPTY_STATE

            state = parse_persisted_state(raw, self._clock())
            span.tags['count'] = len(state.activities)

        logger.info(f'Loaded {len(state.activities)} activities')
        return state

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        self._storage.close()

    def __enter__(self) -> 'ActivityStore':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # -- reads ---------------------------------------------------------------

    @property
    def state(self) -> ActivitiesState:
        return self._state

    @property
    def activities(self) -> tuple[Activity, ...]:
        return self._state.activities

    def get(self, activity_id: str) -> Optional[Activity]:
        for activity in self._state.activities:
            if activity.id == activity_id:
                return activity
        return None

    def list_by_category(self, category: str) -> list[Activity]:
        return [a for a in self._state.activities if a.category == category]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- writes --------------------------------------------------------------

    def dispatch(self, action: Action) -> bool:
        '''Apply an action. Returns True when the state changed.'''
        with trace_span('store.dispatch', {'action': action.type}):
            next_state = activities_reducer(self._state, action)
            if next_state is self._state:
                logger.debug(f'{action.type} was a no-op')
                return False

            self._state = next_state
            self._persist()
            for listener in list(self._listeners):
                try:
                    listener(next_state, action)
                except Exception:
                    # Fail-safe: a broken subscriber must not block the others
                    logger.error(f'Store listener failed on {action.type}', exc_info=True)
            return True

    def _persist(self) -> None:
        if self._closed:
            logger.warning('Store is closed; change kept in memory only')
            return
        payload = serialize_state(self._state)
        if payload == self._last_written:
            return
        with trace_span('store.persist', {'count': len(self._state.activities)}):
            try:
                self._storage.write(self.key, payload)
            except StorageError:
                logger.error('Could not persist activities', exc_info=True)
                return
        self._last_written = payload

    def add(self, category: str, title: str) -> Optional[str]:
        if not title or not title.strip():
            logger.debug('Rejected activity with empty title')
            return None
        activity_id = self._id_factory()
        x, y = self.spawn(category, self.default_size)
        changed = self.dispatch(
            AddActivity(
                id=activity_id,
                category=category,
                title=title,
                now=self._clock(),
                x=x,
                y=y,
                size=self.default_size,
            )
        )
        return activity_id if changed else None

    def rename(self, activity_id: str, title: str) -> None:
        self.dispatch(RenameActivity(id=activity_id, title=title))

    def delete(self, activity_id: str) -> None:
        self.dispatch(DeleteActivity(id=activity_id))

    def reset_timer(self, activity_id: str) -> None:
        self.dispatch(ResetActivityTimer(id=activity_id, now=self._clock()))

    def move(self, activity_id: str, x: float, y: float) -> None:
        '''Set a position as given. Callers clamp against the current bounds.'''
        self.dispatch(UpdateActivityPosition(id=activity_id, x=x, y=y))

    def set_image(self, activity_id: str, image_url: Optional[str]) -> None:
        self.dispatch(UpdateActivityImage(id=activity_id, image_url=image_url))

    def image_load_error(self, activity_id: str) -> None:
        self.dispatch(ImageLoadFailed(id=activity_id))
