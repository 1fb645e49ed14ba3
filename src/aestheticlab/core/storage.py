"""Durable key-value storage for the lab's collections.

The lab persists three collections, each under its own key:

- ``generations``: completed batches with their images and ratings
- ``presets``: named configurations
- ``prompt_history``: every submitted configuration

A store is a plain mapping of string keys to JSON-serialisable values.  Two
implementations are provided:

- :class:`JsonFileStore` keeps one ``<key>.json`` file per key in a directory.
- :class:`SqliteStore` keeps every key in a single SQLite table.

Loading is forgiving.  A missing key reads as an empty collection, and an
unreadable or corrupt value degrades to an empty collection with a logged
error instead of stopping the application.  Individual records that no
longer decode are dropped while the rest of the collection survives.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Protocol, TypeVar

from .config import AestheticLabConfig

logger = logging.getLogger(__name__)

GENERATIONS_KEY = "generations"
PRESETS_KEY = "presets"
PROMPT_HISTORY_KEY = "prompt_history"

R = TypeVar("R")


class KeyValueStore(Protocol):
    """String-keyed mapping of JSON-serialisable values."""

    def get(self, key: str) -> object | None:
        """Return the value stored under *key*, or ``None`` if absent."""
        ...

    def set(self, key: str, value: object) -> None:
        """Replace the value stored under *key*."""
        ...


class JsonFileStore:
    """Store each key as a JSON file inside *directory*.

    Args:
        directory: Directory holding the ``<key>.json`` files.  Created if
            missing.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized JSON store at {self.directory}")

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> object | None:
        """Read and parse ``<key>.json``.

        Raises:
            OSError: If the file exists but cannot be read.
            json.JSONDecodeError: If the file does not hold valid JSON.
        """
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as handle:
            return json.load(handle)

    def set(self, key: str, value: object) -> None:
        """Write *value* to ``<key>.json`` with 2-space indentation."""
        with open(self._path(key), "w", encoding="utf-8") as handle:
            json.dump(value, handle, indent=2)


class SqliteStore:
    """Store every key as a row of a single SQLite table.

    Args:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized SQLite store at {self.db_path}")

    def _initialize_db(self) -> None:
        """Create the key-value table if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """)
            conn.commit()

    def get(self, key: str) -> object | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: object) -> None:
        payload = json.dumps(value)
        with sqlite3.connect(self.db_path) as conn:
            # Upsert keeps one row per key
            conn.execute(
                """
                INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, payload, datetime.now().isoformat()),
            )
            conn.commit()


def create_store(config: AestheticLabConfig) -> KeyValueStore:
    """Build the store selected by ``config.storage_backend``."""
    if config.storage_backend == "sqlite":
        return SqliteStore(config.data_dir / "aestheticlab.db")
    return JsonFileStore(config.data_dir)


def load_collection(store: KeyValueStore, key: str, record_type: type[R]) -> tuple[R, ...]:
    """Load and decode the collection stored under *key*.

    The rules are intentionally conservative:

    - a missing value is an empty collection
    - a store error or a value that is not a list is an empty collection
    - entries that fail to decode are dropped, the rest are kept in order

    Args:
        store: The durable store.
        key: Collection key.
        record_type: Record class providing ``from_dict``.

    Returns:
        Tuple of decoded records in persisted order.
    """
    try:
        raw_entries = store.get(key)
    except Exception as e:
        logger.error(f"Could not load {key} from store: {e}")
        return ()

    if raw_entries is None:
        return ()

    if not isinstance(raw_entries, list):
        logger.error(f"Ignoring stored {key}: expected a list, got {type(raw_entries).__name__}")
        return ()

    records: list[R] = []
    for index, entry in enumerate(raw_entries):
        if not isinstance(entry, dict):
            logger.warning(f"Dropping {key}[{index}]: not an object")
            continue
        try:
            records.append(record_type.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Dropping {key}[{index}]: {e}")

    return tuple(records)


def save_collection(store: KeyValueStore, key: str, records: Iterable) -> None:
    """Encode *records* and write them under *key*.

    Raises:
        Exception: Whatever the store raises; callers decide how to report it.
    """
    store.set(key, [record.to_dict() for record in records])
    logger.debug(f"Persisted {key}")
