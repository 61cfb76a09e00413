from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

ActionType = Literal[
    'add_activity',
    'rename_activity',
    'delete_activity',
    'reset_activity_timer',
    'update_activity_position',
    'update_activity_image',
    'image_load_failed',
]


@dataclass(frozen=True)
class AddActivity:
    id: str
    category: str
    title: str
    now: int
    x: float = 0
    y: float = 0
    size: Optional[int] = None

    @property
    def type(self) -> ActionType:
        return 'add_activity'


@dataclass(frozen=True)
class RenameActivity:
    id: str
    title: str

    @property
    def type(self) -> ActionType:
        return 'rename_activity'


@dataclass(frozen=True)
class DeleteActivity:
    id: str

    @property
    def type(self) -> ActionType:
        return 'delete_activity'


@dataclass(frozen=True)
class ResetActivityTimer:
    id: str
    now: int

    @property
    def type(self) -> ActionType:
        return 'reset_activity_timer'


@dataclass(frozen=True)
class UpdateActivityPosition:
    id: str
    x: float
    y: float

    @property
    def type(self) -> ActionType:
        return 'update_activity_position'


@dataclass(frozen=True)
class UpdateActivityImage:
    id: str
    image_url: Optional[str]

    @property
    def type(self) -> ActionType:
        return 'update_activity_image'


@dataclass(frozen=True)
class ImageLoadFailed:
    id: str

    @property
    def type(self) -> ActionType:
        return 'image_load_failed'


Action = Union[
    AddActivity,
    RenameActivity,
    DeleteActivity,
    ResetActivityTimer,
    UpdateActivityPosition,
    UpdateActivityImage,
    ImageLoadFailed,
]
