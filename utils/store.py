"""
JSON document store for users, projects and posts.
The whole document is read and overwritten on every change.
"""
import json
import os
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from config import Config
from utils.logger import app_logger


class JsonStore:
    """
    File-backed store holding one JSON object with a list per collection.
    """

    COLLECTIONS = ("users", "projects", "posts")

    def __init__(self, path: Optional[str] = None):
        """
        Initialize the store, creating the file with empty collections if needed.

        Args:
            path: Path to the JSON file (default: Config.DATA_FILE)
        """
        self._path = Path(path or Config.DATA_FILE)
        self._lock = threading.RLock()
        self._ensure_file()
        app_logger.info(f"Store initialized: {self._path}")

    @property
    def path(self) -> Path:
        return self._path

    def _empty(self) -> dict:
        return {name: [] for name in self.COLLECTIONS}

    def _ensure_file(self) -> None:
        if self._path.exists():
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self.write_all(self._empty())

    def read_all(self) -> dict:
        """Read the whole document. Missing collections are filled in as empty lists."""
        with self._lock:
            try:
                with self._path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                data = self._empty()
            except json.JSONDecodeError as e:
                app_logger.error(f"Store file {self._path} is corrupt: {e}")
                raise

        for name in self.COLLECTIONS:
            data.setdefault(name, [])
        return data

    def write_all(self, data: dict) -> None:
        """Overwrite the whole document. Writes to a temp file and renames it into place."""
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with self._lock:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)

    @contextmanager
    def transaction(self) -> Iterator[dict]:
        """
        Read-modify-write under the store lock.
        The document is written back only if the block exits without an exception.
        """
        with self._lock:
            data = self.read_all()
            yield data
            self.write_all(data)

    @staticmethod
    def next_id(items: list) -> int:
        """Millisecond timestamp id, bumped past the largest existing id."""
        now_ms = int(time.time() * 1000)
        last_id = max((item.get("id", 0) for item in items if isinstance(item.get("id"), int)), default=0)
        return max(now_ms, last_id + 1)


_store: Optional[JsonStore] = None


def get_store() -> JsonStore:
    """Get or create the process-wide store."""
    global _store
    if _store is None:
        _store = JsonStore()
    return _store


def set_store(store: Optional[JsonStore]) -> None:
    """Replace the process-wide store (used at startup and in tests)."""
    global _store
    _store = store
