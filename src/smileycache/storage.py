"""Durable string key-value stores backing saved game state."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Protocol


class KeyValueStore(Protocol):
    """Persistence contract for string-keyed, string-valued state."""

    def get(self, key: str) -> str | None:
        """Return the stored value or ``None`` when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any prior value."""

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""

    def clear(self) -> None:
        """Delete every key."""

    def __contains__(self, key: object) -> bool:
        ...


class InMemoryKeyValueStore:
    """Session-only store; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._data


class JsonFileKeyValueStore:
    """Single JSON object on disk, rewritten on every write."""

    def __init__(self, file_path: str | Path, *, logger: logging.Logger | None = None) -> None:
        self._path = Path(file_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._logger = logger or logging.getLogger("smileycache.storage")
        self._data = self._read()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._write()

    def clear(self) -> None:
        self._data.clear()
        self._write()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError):
            self._logger.warning("state_file_unreadable", extra={"path": str(self._path)})
            return {}

        if not isinstance(payload, dict):
            self._logger.warning("state_file_unreadable", extra={"path": str(self._path)})
            return {}
        return {key: value for key, value in payload.items() if isinstance(value, str)}

    def _write(self) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._data, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self._path)


class SqliteKeyValueStore:
    """SQLite-backed store with a single ``kv`` table."""

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.db_path)
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self._conn.commit()

    def get(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return None if row is None else row[0]

    def set(self, key: str, value: str) -> None:
        self._conn.execute(
            "INSERT INTO kv (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )
        self._conn.commit()

    def remove(self, key: str) -> None:
        self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._conn.commit()

    def clear(self) -> None:
        self._conn.execute("DELETE FROM kv")
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._conn.execute("SELECT 1 FROM kv WHERE key = ?", (key,)).fetchone() is not None
