import logging
import os
from functools import wraps
from typing import Any, Callable, Iterable, List, Optional, TypeVar

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

T = TypeVar('T')

logger = logging.getLogger(__name__)


def require_connection(func: Callable) -> Callable:
    '''Decorator to ensure PGManager is used within a context manager.'''

    @wraps(func)
    def wrapper(self: 'PGManager', *args, **kwargs) -> Any:
        if not self._connected:
            raise RuntimeError(
                'PGManager is not in a context. Use "with PGManager() as db:"'
            )
        return func(self, *args, **kwargs)

    return wrapper


class PGManager:
    '''Postgres connection scope, drawn from the shared pool when one exists.'''

    # Shared pool across the process
    _pool: Optional[ConnectionPool] = None

    def __init__(self, db_url: Optional[str] = None) -> None:
        self.db_url = db_url or os.getenv('DATABASE_URL')
        self._connected = False
        self._conn: Any | None = None
        self._from_pool = False

    @classmethod
    def init_pool(
        cls, db_url: Optional[str] = None, min_size: int = 1, max_size: int = 4
    ) -> None:
        if cls._pool is not None:
            return
        conninfo = db_url or os.getenv('DATABASE_URL')
        if not conninfo:
            raise RuntimeError('DATABASE_URL is not set; required for Postgres storage.')
        cls._pool = ConnectionPool(
            conninfo=conninfo,
            min_size=min_size,
            max_size=max_size,
            kwargs={'row_factory': dict_row},
        )
        logger.info('Initialized Postgres connection pool')

    @classmethod
    def close_pool(cls) -> None:
        if cls._pool is not None:
            try:
                cls._pool.close()
            finally:
                cls._pool = None

    def _open(self) -> None:
        if self.__class__._pool is not None:
            self._conn = self.__class__._pool.getconn()
            self._from_pool = True
            return
        if not self.db_url:
            raise RuntimeError('DATABASE_URL is not set; required for Postgres storage.')
        self._conn = psycopg.connect(self.db_url, row_factory=dict_row)
        self._from_pool = False

    def _release(self) -> None:
        try:
            if self._from_pool and self.__class__._pool is not None:
                self.__class__._pool.putconn(self._conn)
            elif self._conn is not None:
                self._conn.close()
        finally:
            self._conn = None
            self._from_pool = False

    def __enter__(self) -> 'PGManager':
        self._open()
        self._connected = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._connected:
            return
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            self._release()
            self._connected = False

    def _run_with_retry(self, fn: Callable[[], T]) -> T:
        '''Run once more on a fresh connection if the first attempt lost its link.'''
        try:
            return fn()
        except (psycopg.OperationalError, psycopg.InterfaceError) as e:
            logger.warning(f'Postgres connection issue: {e}. Reconnecting and retrying once...')
            self._release()
            self._open()
            return fn()

    @require_connection
    def execute(self, query: str, params: Iterable[Any] | None = None) -> None:
        def _do() -> None:
            with self._conn.cursor() as cur:
                cur.execute(query, tuple(params or ()))

        try:
            self._run_with_retry(_do)
        except psycopg.Error as e:
            logger.error(f'Postgres execute() error: {e}\nQuery: {query}')
            raise

    @require_connection
    def fetchall(
        self, query: str, params: Iterable[Any] | None = None
    ) -> List[dict[str, Any]]:
        def _do() -> List[dict[str, Any]]:
            with self._conn.cursor() as cur:
                cur.execute(query, tuple(params or ()))
                return cur.fetchall()

        try:
            return self._run_with_retry(_do)
        except psycopg.Error as e:
            logger.error(f'Postgres fetchall() error: {e}\nQuery: {query}')
            raise

    @require_connection
    def fetchone(
        self, query: str, params: Iterable[Any] | None = None
    ) -> Optional[dict[str, Any]]:
        rows = self.fetchall(query, params)
        return rows[0] if rows else None
