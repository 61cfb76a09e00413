import logging
import os
import sqlite3
from functools import wraps
from typing import Any, Callable, Iterable, List, Optional

logger = logging.getLogger(__name__)


def require_connection(func: Callable) -> Callable:
    '''Decorator to ensure SQLiteManager is used within a context manager.'''

    @wraps(func)
    def wrapper(self: 'SQLiteManager', *args, **kwargs) -> Any:
        if not self.conn:
            raise RuntimeError(
                'SQLiteManager is not in a context. Use "with SQLiteManager(path) as db:"'
            )
        return func(self, *args, **kwargs)

    return wrapper


class SQLiteManager:
    '''Short-lived SQLite connection: commit on clean exit, rollback on error.'''

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> 'SQLiteManager':
        if self.db_path != ':memory:':
            os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            try:
                if exc_type is None:
                    self.conn.commit()
                else:
                    self.conn.rollback()
            finally:
                self.conn.close()
                self.conn = None

    @require_connection
    def execute(self, query: str, params: Iterable | None = None) -> None:
        '''Execute a write operation (INSERT, UPDATE, DELETE, DDL).'''
        try:
            self.conn.execute(query, tuple(params or ()))  # type: ignore[union-attr]
        except sqlite3.Error as e:
            logger.error(
                f'SQLite execute() error: {e}\nQuery: {query}\nParams: {params}'
            )
            raise

    @require_connection
    def fetchall(self, query: str, params: Iterable | None = None) -> List[sqlite3.Row]:
        cur = self.conn.execute(query, tuple(params or ()))  # type: ignore[union-attr]
        return cur.fetchall()

    @require_connection
    def fetchone(
        self, query: str, params: Iterable | None = None
    ) -> Optional[sqlite3.Row]:
        rows = self.fetchall(query, params)
        return rows[0] if rows else None
