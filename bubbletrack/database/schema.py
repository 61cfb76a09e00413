import logging
from typing import Any

logger = logging.getLogger(__name__)

KV_TABLE = 'kv_store'

_CREATE_KV_SQLITE = f'''
    CREATE TABLE IF NOT EXISTS {KV_TABLE} (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
'''

_CREATE_KV_POSTGRES = f'''
    CREATE TABLE IF NOT EXISTS {KV_TABLE} (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
    )
'''


def init_schema(db: Any, engine: str = 'sqlite') -> None:
    '''Create the key-value table if it doesn't already exist.'''
    db.execute(_CREATE_KV_POSTGRES if engine == 'postgres' else _CREATE_KV_SQLITE)
    logger.debug(f'{KV_TABLE} table created/verified ({engine})')
