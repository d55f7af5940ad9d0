"""
Database access layer for the anonymous user lookup.
Uses aiosqlite for async access to the review app SQLite store.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

import aiosqlite

from .errors import QueryError, StoreConnectError
from .models import ByIdLookup, DefaultLookup, Lookup, User


logger = logging.getLogger(__name__)


class Store:
    """
    Process-wide handle on the SQLite store.

    Opened once during app startup and shared by every request. aiosqlite
    runs all statements on a single worker thread, so concurrent lookups
    are serialized on the one connection.
    """

    def __init__(self, path: str, connection: Optional[aiosqlite.Connection] = None):
        self.path = path
        self._connection = connection

    @classmethod
    async def open(cls, path: str) -> "Store":
        """
        Open the store read-write without creating it.

        Raises StoreConnectError if the file is missing or unreadable.
        """
        uri = Path(path).resolve().as_uri() + "?mode=rw"
        try:
            connection = await aiosqlite.connect(uri, uri=True)
        except (sqlite3.Error, ValueError) as e:
            raise StoreConnectError(path, str(e)) from e
        connection.row_factory = sqlite3.Row
        logger.info(f"Connected to SQLite store at {path}")
        return cls(path, connection)

    @classmethod
    def unavailable(cls, path: str) -> "Store":
        """A handle for a store that failed to open; every query fails."""
        return cls(path, None)

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise QueryError("database is not connected")
        return self._connection

    async def ping(self) -> bool:
        """Health check: True if a trivial query succeeds."""
        if self._connection is None:
            return False
        try:
            async with self._connection.execute("SELECT 1") as cursor:
                await cursor.fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Store health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("SQLite store closed")

    async def fetch_one(self, sql: str, parameters: tuple) -> Optional[sqlite3.Row]:
        """Run one parameterized query and return its first row, if any."""
        connection = self.connection
        try:
            async with connection.execute(sql, parameters) as cursor:
                return await cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Query failed: {e}")
            raise QueryError(str(e)) from e


# --- User Lookups ---


async def fetch_user_by_id(store: Store, user_id: str) -> Optional[User]:
    """
    Get a user by user_id.
    Returns the User or None if no row matches.
    """
    row = await store.fetch_one(
        "SELECT * FROM Users WHERE user_id = ?",
        (user_id,),
    )
    if row:
        return User.model_validate(dict(row))
    return None


async def fetch_default_user(store: Store, sentinel_username: str) -> Optional[User]:
    """
    Get the first user whose username is the sentinel.
    Returns the User or None if no such row exists.
    """
    row = await store.fetch_one(
        "SELECT * FROM Users WHERE username = ? LIMIT 1",
        (sentinel_username,),
    )
    if row:
        return User.model_validate(dict(row))
    return None


async def lookup_user(store: Store, lookup: Lookup, sentinel_username: str) -> Optional[User]:
    """Dispatch a lookup mode to its query."""
    if isinstance(lookup, ByIdLookup):
        return await fetch_user_by_id(store, lookup.user_id)
    if isinstance(lookup, DefaultLookup):
        return await fetch_default_user(store, sentinel_username)
    raise TypeError(f"unsupported lookup: {lookup!r}")
