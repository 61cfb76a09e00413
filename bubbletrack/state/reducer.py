from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from bubbletrack.models.activity import Activity
from bubbletrack.models.image import image_from_url
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
from bubbletrack.utils.constants import DEFAULT_BUBBLE_SIZE


@dataclass(frozen=True)
class ActivitiesState:
    activities: tuple[Activity, ...] = ()


EMPTY_STATE = ActivitiesState()


def _update_one(
    state: ActivitiesState, activity_id: str, change: Callable[[Activity], Activity]
) -> ActivitiesState:
    '''Apply `change` to the activity with `activity_id`.

    Returns `state` itself when the id is unknown or nothing changed, so callers
    can use identity to skip persistence.
    '''
    changed = False
    updated = []
    for activity in state.activities:
        if activity.id == activity_id:
            new = change(activity)
            if new != activity:
                changed = True
            updated.append(new)
        else:
            updated.append(activity)
    return ActivitiesState(tuple(updated)) if changed else state


def activities_reducer(state: ActivitiesState, action: Action) -> ActivitiesState:
    if isinstance(action, AddActivity):
        title = action.title.strip()
        if not title or any(a.id == action.id for a in state.activities):
            return state
        activity = Activity(
            id=action.id,
            title=title,
            category=action.category,
            created_at=action.now,
            last_reset_at=action.now,
            x=action.x,
            y=action.y,
            size=action.size or DEFAULT_BUBBLE_SIZE,
        )
        return ActivitiesState((*state.activities, activity))

    if isinstance(action, RenameActivity):
        title = action.title.strip()
        if not title:
            return state
        return _update_one(state, action.id, lambda a: a.with_changes(title=title))

    if isinstance(action, DeleteActivity):
        kept = tuple(a for a in state.activities if a.id != action.id)
        return state if len(kept) == len(state.activities) else ActivitiesState(kept)

    if isinstance(action, ResetActivityTimer):
        return _update_one(
            state, action.id, lambda a: a.with_changes(last_reset_at=action.now)
        )

    if isinstance(action, UpdateActivityPosition):
        return _update_one(
            state, action.id, lambda a: a.with_changes(x=action.x, y=action.y)
        )

    if isinstance(action, UpdateActivityImage):
        image = image_from_url(action.image_url)
        return _update_one(
            state, action.id, lambda a: a.with_changes(image=image, image_failed=False)
        )

    if isinstance(action, ImageLoadFailed):
        return _update_one(
            state, action.id, lambda a: a.with_changes(image_failed=True)
        )

    return state
