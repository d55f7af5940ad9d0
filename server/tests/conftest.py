"""
Shared fixtures: throwaway SQLite stores shaped like the review app database.
"""

import sqlite3

import pytest


SENTINEL = "匿名ラッコ"


def make_store(path, rows, user_id_type="INTEGER", username_type="TEXT"):
    """Create a Users table at path and insert (user_id, username, created_at) rows."""
    conn = sqlite3.connect(path)
    conn.execute(
        f"CREATE TABLE Users (user_id {user_id_type} PRIMARY KEY, username {username_type}, created_at TEXT)"
    )
    conn.executemany("INSERT INTO Users VALUES (?, ?, ?)", rows)
    conn.commit()
    conn.close()
    return str(path)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def database_path(tmp_path):
    """Store with the sentinel user (id 7) and two named users."""
    return make_store(
        tmp_path / "review_app.db",
        [
            (3, "たろう", "2024-04-01"),
            (7, SENTINEL, "2024-04-02"),
            (12, "はなこ", "2024-04-03"),
        ],
    )


@pytest.fixture
def no_sentinel_path(tmp_path):
    """Store whose users are all named."""
    return make_store(tmp_path / "named_only.db", [(1, "たろう", None)])


@pytest.fixture
def no_table_path(tmp_path):
    """A valid SQLite file without the Users relation."""
    path = tmp_path / "empty.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE Reviews (review_id INTEGER PRIMARY KEY)")
    conn.commit()
    conn.close()
    return str(path)


@pytest.fixture
def count_users():
    """Count Users rows straight from the file, bypassing the server."""
    def _count(path) -> int:
        conn = sqlite3.connect(path)
        try:
            return conn.execute("SELECT COUNT(*) FROM Users").fetchone()[0]
        finally:
            conn.close()
    return _count


@pytest.fixture
def users_store(tmp_path):
    """Factory for one-off stores: users_store(name, rows, user_id_type=..., username_type=...)."""
    def _make(name, rows, user_id_type="INTEGER", username_type="TEXT"):
        return make_store(tmp_path / name, rows, user_id_type, username_type)
    return _make
