from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

import psycopg

from bubbletrack.database import pg_manager
from bubbletrack.database.schema import KV_TABLE, init_schema
from bubbletrack.database.sqlite_manager import SQLiteManager
from bubbletrack.utils.config import Settings
from bubbletrack.utils.tracing import tag_current

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    '''A storage backend could not read or write.'''


@runtime_checkable
class KeyValueStorage(Protocol):
    def read(self, key: str) -> Optional[str]:
        pass

    def write(self, key: str, value: str) -> None:
        pass

    def close(self) -> None:
        pass


class MemoryStorage:
    '''Process-local storage; handy for tests and throwaway sessions.'''

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1

    def close(self) -> None:
        pass


class SQLiteStorage:
    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = str(db_path)
        try:
            with SQLiteManager(self.db_path) as db:
                init_schema(db, 'sqlite')
        except sqlite3.Error as e:
            raise StorageError(f'Could not open {self.db_path}: {e}') from e

    def read(self, key: str) -> Optional[str]:
        try:
            with SQLiteManager(self.db_path) as db:
                row = db.fetchone(f'SELECT value FROM {KV_TABLE} WHERE key = ?', (key,))
        except sqlite3.Error as e:
            raise StorageError(f'Could not read {key!r}: {e}') from e
        return row['value'] if row else None

    def write(self, key: str, value: str) -> None:
        tag_current('backend', 'sqlite')
        tag_current('bytes', len(value))
        try:
            with SQLiteManager(self.db_path) as db:
                db.execute(
                    f'INSERT INTO {KV_TABLE} (key, value) VALUES (?, ?) '
                    'ON CONFLICT(key) DO UPDATE SET '
                    'value = excluded.value, updated_at = CURRENT_TIMESTAMP',
                    (key, value),
                )
        except sqlite3.Error as e:
            raise StorageError(f'Could not write {key!r}: {e}') from e

    def close(self) -> None:
        pass


class PostgresStorage:
    def __init__(self, db_url: Optional[str] = None, use_pool: bool = True) -> None:
        self.db_url = db_url
        self._owns_pool = False
        if use_pool and pg_manager.PGManager._pool is None:
            pg_manager.PGManager.init_pool(db_url)
            self._owns_pool = True
        try:
            with pg_manager.PGManager(db_url) as db:
                init_schema(db, 'postgres')
        except psycopg.Error as e:
            raise StorageError(f'Could not prepare Postgres storage: {e}') from e

    def read(self, key: str) -> Optional[str]:
        try:
            with pg_manager.PGManager(self.db_url) as db:
                row = db.fetchone(
                    f'SELECT value FROM {KV_TABLE} WHERE key = %s', (key,)
                )
        except psycopg.Error as e:
            raise StorageError(f'Could not read {key!r}: {e}') from e
        return row['value'] if row else None

    def write(self, key: str, value: str) -> None:
        tag_current('backend', 'postgres')
        tag_current('bytes', len(value))
        try:
            with pg_manager.PGManager(self.db_url) as db:
                db.execute(
                    f'INSERT INTO {KV_TABLE} (key, value) VALUES (%s, %s) '
                    'ON CONFLICT (key) DO UPDATE SET '
                    'value = EXCLUDED.value, updated_at = CURRENT_TIMESTAMP',
                    (key, value),
                )
        except psycopg.Error as e:
            raise StorageError(f'Could not write {key!r}: {e}') from e

    def close(self) -> None:
        if self._owns_pool:
            pg_manager.PGManager.close_pool()
            self._owns_pool = False


def open_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage == 'memory':
        logger.info('Using in-memory storage; nothing will survive this process')
        return MemoryStorage()
    if settings.storage == 'postgres':
        if not settings.database_url:
            raise RuntimeError('BUBBLETRACK_STORAGE=postgres requires DATABASE_URL')
        logger.info('Using Postgres storage')
        return PostgresStorage(settings.database_url)
    logger.info(f'Using SQLite storage at {settings.db_path}')
    return SQLiteStorage(settings.db_path)
