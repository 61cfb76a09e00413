from typing import Optional

from bubbletrack.state.store import ActivityStore
from bubbletrack.storage import open_storage
from bubbletrack.surface.board import BubbleBoard
from bubbletrack.surface.bounds import BoundsTracker
from bubbletrack.surface.reposition import SpawnKind, SpawnPolicy
from bubbletrack.surface.ticker import NowTicker
from bubbletrack.utils.config import Settings


def create_store(settings: Settings, tracker: Optional[BoundsTracker] = None) -> ActivityStore:
    '''Open the configured storage and load the store from it.

    `tracker` is only needed for the center spawn policy; pass the same one to
    `create_board`.
    '''
    storage = open_storage(settings)
    spawn = SpawnPolicy(SpawnKind(settings.spawn_policy), tracker)
    return ActivityStore(storage, spawn=spawn, default_size=settings.bubble_size)


def create_board(
    store: ActivityStore,
    category: str,
    settings: Settings,
    tracker: Optional[BoundsTracker] = None,
) -> BubbleBoard:
    return BubbleBoard(
        store,
        category,
        tracker=tracker or BoundsTracker(),
        ticker=NowTicker(interval=settings.tick_seconds),
        default_image_url=settings.default_image_url,
    )
