from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from bubbletrack.utils.constants import (
    DEFAULT_BUBBLE_SIZE,
    DEFAULT_IMAGE_URL,
    NOW_REFRESH_SECONDS,
)
from bubbletrack.utils.env import find_project_root

logger = logging.getLogger(__name__)

StorageKind = Literal['sqlite', 'postgres', 'memory']
SpawnName = Literal['origin', 'center']


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f'Ignoring {name}={raw!r}: not an integer, using {default}')
        return default


@dataclass(frozen=True)
class Settings:
    '''Runtime configuration. Build with `Settings.from_env()` after `load_env()`.'''

    storage: StorageKind = 'sqlite'
    db_path: Path = Path('data') / 'bubbles.db'
    database_url: Optional[str] = None
    spawn_policy: SpawnName = 'origin'
    bubble_size: int = DEFAULT_BUBBLE_SIZE
    tick_seconds: int = NOW_REFRESH_SECONDS
    default_image_url: str = DEFAULT_IMAGE_URL

    @classmethod
    def from_env(cls) -> 'Settings':
        storage = (os.getenv('BUBBLETRACK_STORAGE') or 'sqlite').strip().lower()
        if storage not in ('sqlite', 'postgres', 'memory'):
            raise RuntimeError(
                f'BUBBLETRACK_STORAGE must be sqlite, postgres or memory, got {storage!r}'
            )

        spawn = (os.getenv('BUBBLETRACK_SPAWN_POLICY') or 'origin').strip().lower()
        if spawn not in ('origin', 'center'):
            logger.warning(f'Unknown spawn policy {spawn!r}, using origin')
            spawn = 'origin'

        db_path = Path(os.getenv('BUBBLETRACK_DB_PATH') or cls.db_path)
        if not db_path.is_absolute():
            db_path = find_project_root() / db_path

        return cls(
            storage=storage,  # type: ignore[arg-type]
            db_path=db_path,
            database_url=os.getenv('DATABASE_URL') or None,
            spawn_policy=spawn,  # type: ignore[arg-type]
            bubble_size=max(1, _env_int('BUBBLETRACK_BUBBLE_SIZE', DEFAULT_BUBBLE_SIZE)),
            tick_seconds=max(1, _env_int('BUBBLETRACK_TICK_SECONDS', NOW_REFRESH_SECONDS)),
            default_image_url=os.getenv('BUBBLETRACK_DEFAULT_IMAGE') or DEFAULT_IMAGE_URL,
        )
