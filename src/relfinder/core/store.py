"""
Persistent UI state for relfinder using SQLite.

The whole AppState is stored as one JSON blob under a single key, so a
restart picks up exactly where the last transition left off.

Modified: 2026-10-19
"""

import json
import logging
from pathlib import Path
from typing import Optional

import aiosqlite

from relfinder.core.exceptions import StateStoreError
from relfinder.core.models import AppState

logger = logging.getLogger(__name__)

DEFAULT_STATE_KEY = "state"


class StateStore:
    """
    SQLite key/value store holding the serialized AppState.

    Schema:
    - kv: key TEXT PRIMARY KEY, value TEXT (JSON)
    """

    def __init__(self, db_path: Optional[Path] = None, key: str = DEFAULT_STATE_KEY):
        """
        Initialize the state store.

        Args:
            db_path: Path to SQLite database (default: ~/.cache/relfinder/state.db)
            key: Key the state blob is stored under
        """
        if db_path is None:
            cache_dir = Path.home() / ".cache" / "relfinder"
            cache_dir.mkdir(parents=True, exist_ok=True)
            db_path = cache_dir / "state.db"

        self.db_path = db_path
        self.key = key

    async def initialize(self) -> None:
        """Create the key/value table if it doesn't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            await db.commit()

    async def save(self, state: AppState) -> None:
        """
        Write the entire state under the fixed key.

        Args:
            state: State to persist

        Raises:
            StateStoreError: If the database write fails
        """
        blob = json.dumps(state.to_dict())
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                    (self.key, blob),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StateStoreError(f"Failed to save state: {e}")

    async def load(self) -> Optional[AppState]:
        """
        Read the state back.

        Returns:
            The stored AppState, or None if nothing is stored or the blob
            is malformed (the caller then starts from a blank state)
        """
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute("SELECT value FROM kv WHERE key = ?", (self.key,))
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.warning(f"Could not read stored state: {e}")
            return None

        if row is None:
            return None

        try:
            return AppState.from_dict(json.loads(row[0]))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            # json.JSONDecodeError and bad enum values are both ValueErrors
            logger.warning(f"Discarding malformed stored state: {e}")
            return None

    async def load_or_blank(self) -> AppState:
        """Load the stored state, falling back to a blank one."""
        state = await self.load()
        return state if state is not None else AppState.blank()

    async def clear(self) -> None:
        """Remove the stored state."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM kv WHERE key = ?", (self.key,))
            await db.commit()
