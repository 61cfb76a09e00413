import pytest

from bubbletrack.database import pg_manager
from bubbletrack.database.sqlite_manager import SQLiteManager
from bubbletrack.storage import (
    KeyValueStorage,
    MemoryStorage,
    PostgresStorage,
    SQLiteStorage,
    StorageError,
    open_storage,
)
from bubbletrack.utils.config import Settings
from tests.conftest import FakePGManager


def test_sqlite_storage_round_trip_and_overwrite(tmp_path):
    path = tmp_path / 'nested' / 'bubbles.db'
    storage = SQLiteStorage(path)
    assert storage.read('k') is None

    storage.write('k', '{"activities": []}')
    storage.write('k', '{"activities": [1]}')

    assert SQLiteStorage(path).read('k') == '{"activities": [1]}'


def test_sqlite_storage_wraps_errors(tmp_path):
    # A directory cannot be opened as a database file
    with pytest.raises(StorageError):
        SQLiteStorage(tmp_path)


def test_postgres_storage_statements(monkeypatch, fake_db):
    monkeypatch.setattr(pg_manager, 'PGManager', FakePGManager(fake_db))
    fake_db.fetchone_results = [{'value': 'payload'}]

    storage = PostgresStorage('postgresql://example/db', use_pool=False)
    assert storage.read('activities-store-v1') == 'payload'
    storage.write('activities-store-v1', 'new payload')

    create_sql, _ = fake_db.executed[0]
    assert 'CREATE TABLE IF NOT EXISTS kv_store' in create_sql
    select_sql, select_params = fake_db.executed[1]
    assert 'SELECT value FROM kv_store' in select_sql
    assert select_params == ('activities-store-v1',)
    upsert_sql, upsert_params = fake_db.executed[2]
    assert 'ON CONFLICT (key)' in upsert_sql
    assert upsert_params == ('activities-store-v1', 'new payload')


def test_postgres_read_missing_key(monkeypatch, fake_db):
    monkeypatch.setattr(pg_manager, 'PGManager', FakePGManager(fake_db))
    assert PostgresStorage('postgresql://example/db', use_pool=False).read('nope') is None


def test_open_storage_by_setting(tmp_path):
    assert isinstance(open_storage(Settings(storage='memory')), MemoryStorage)
    sqlite = open_storage(Settings(storage='sqlite', db_path=tmp_path / 'b.db'))
    assert isinstance(sqlite, SQLiteStorage)
    assert isinstance(sqlite, KeyValueStorage)


def test_open_postgres_requires_url():
    with pytest.raises(RuntimeError):
        open_storage(Settings(storage='postgres', database_url=None))


def test_pg_manager_requires_context():
    manager = pg_manager.PGManager('postgresql://example/db')
    with pytest.raises(RuntimeError):
        manager.execute('SELECT 1')


def test_sqlite_manager_fetchone_reads_first_row(tmp_path):
    with SQLiteManager(str(tmp_path / 'm.db')) as db:
        db.execute('CREATE TABLE t (n INTEGER)')
        assert db.fetchone('SELECT n FROM t') is None
        db.execute('INSERT INTO t (n) VALUES (?), (?)', (1, 2))
        assert [row['n'] for row in db.fetchall('SELECT n FROM t ORDER BY n')] == [1, 2]
        assert db.fetchone('SELECT n FROM t ORDER BY n DESC')['n'] == 2


def test_sqlite_manager_outside_context_raises(tmp_path):
    with pytest.raises(RuntimeError):
        SQLiteManager(str(tmp_path / 'm.db')).fetchone('SELECT 1')
