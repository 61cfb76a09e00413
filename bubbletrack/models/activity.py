from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from bubbletrack.models.image import ABSENT, Image, image_from_url
from bubbletrack.utils.constants import DEFAULT_BUBBLE_SIZE


def new_activity_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Activity:
    id: str
    title: str
    category: str
    created_at: int  # epoch ms
    last_reset_at: int  # epoch ms
    image: Image = field(default=ABSENT)
    image_failed: bool = False
    x: float = 0
    y: float = 0
    size: int = DEFAULT_BUBBLE_SIZE

    def with_changes(self, **changes: Any) -> 'Activity':
        return replace(self, **changes)

    def to_record(self) -> dict[str, Any]:
        '''Persisted shape, keyed the way the stored payload has always been.'''
        return {
            'id': self.id,
            'title': self.title,
            'category': self.category,
            'createdAt': self.created_at,
            'lastResetAt': self.last_reset_at,
            'imageUrl': self.image.to_url(),
            'imageFailed': self.image_failed,
            'x': self.x,
            'y': self.y,
            'size': self.size,
        }

    @classmethod
    def from_record(cls, record: Any, now: int) -> Optional['Activity']:
        '''Rebuild from a stored record. Returns None for records that cannot be used.

        Older payloads only carry id/title/category; the rest falls back to
        defaults, with `now` standing in for the creation time.
        '''
        if not isinstance(record, dict):
            return None

        activity_id = record.get('id')
        title = record.get('title', record.get('label'))
        category = record.get('category')
        if not isinstance(activity_id, str) or not activity_id:
            return None
        if not isinstance(title, str) or not title.strip():
            return None
        if not isinstance(category, str):
            return None

        created_at = _number(record.get('createdAt'), now)
        last_reset_at = _number(record.get('lastResetAt'), created_at)
        size = _number(record.get('size'), DEFAULT_BUBBLE_SIZE)
        if size <= 0:
            size = DEFAULT_BUBBLE_SIZE

        return cls(
            id=activity_id,
            title=title,
            category=category,
            created_at=created_at,
            last_reset_at=last_reset_at,
            image=image_from_url(record.get('imageUrl')),
            image_failed=record.get('imageFailed') is True,
            x=max(0, _number(record.get('x'), 0)),
            y=max(0, _number(record.get('y'), 0)),
            size=size,
        )


def _number(value: Any, default):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return value
