from __future__ import annotations

import json
import logging
from typing import Any, Optional

from bubbletrack.models.activity import Activity
from bubbletrack.state.reducer import EMPTY_STATE, ActivitiesState

logger = logging.getLogger(__name__)


def serialize_state(state: ActivitiesState) -> str:
    return json.dumps(
        {'activities': [a.to_record() for a in state.activities]},
        separators=(',', ':'),
        ensure_ascii=False,
    )


def parse_persisted_state(value: Optional[str], now: int) -> ActivitiesState:
    '''Decode a stored payload. Anything unusable degrades to an empty state.

    Accepts `{"activities": [...]}` and the bare-list shape older builds wrote.
    '''
    if not value:
        return EMPTY_STATE

    try:
        parsed: Any = json.loads(value)
    except (TypeError, ValueError) as e:
        logger.warning(f'Discarding unreadable activities payload: {e}')
        return EMPTY_STATE

    if isinstance(parsed, dict):
        records = parsed.get('activities')
    else:
        records = parsed

    if not isinstance(records, list):
        logger.warning('Discarding activities payload: expected a list of activities')
        return EMPTY_STATE

    activities: list[Activity] = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        activity = Activity.from_record(record, now)
        if activity is None:
            logger.warning(f'Skipping malformed activity record at index {index}')
            continue
        if activity.id in seen:
            logger.warning(f'Skipping duplicate activity id {activity.id}')
            continue
        seen.add(activity.id)
        activities.append(activity)

    return ActivitiesState(tuple(activities))
