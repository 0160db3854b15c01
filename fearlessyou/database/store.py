"""
Progress stores for FearlessYou.

A progress store keeps the set of completed days under a single key in a
key-value layer. ``load`` never fails its caller: anything unreadable counts as
no prior progress. ``save`` replaces the stored list wholesale and reports
failure as ``False``.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set

import structlog
from pymongo.collection import Collection

from ..config import StoreConfig, get_store_config
from ..exceptions import ProgressStoreError

logger = structlog.get_logger(__name__)

DEFAULT_KEY = "EarnedCoinsChallenges"


def _clean_days(raw: Any, key: str) -> Set[int]:
    """Turn a stored value into a set of valid day numbers."""
    if raw is None:
        return set()
    if not isinstance(raw, (list, tuple)):
        logger.warning("Stored progress is not a list, ignoring", key=key, value_type=type(raw).__name__)
        return set()

    days = set()
    for value in raw:
        if isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 30:
            days.add(value)
        else:
            logger.warning("Dropping invalid stored day", key=key, value=value)
    return days


class ProgressStore:
    """Base progress store."""

    def __init__(self, key: str = DEFAULT_KEY):
        self.key = key

    def _read(self) -> Any:
        raise NotImplementedError

    def _write(self, days: list):
        raise NotImplementedError

    def load(self) -> Set[int]:
        """Load completed days, or an empty set when nothing usable is stored."""
        try:
            raw = self._read()
        except Exception as e:
            logger.error("Failed to read progress", key=self.key, error=str(e))
            return set()

        days = _clean_days(raw, self.key)
        logger.info("Progress loaded", key=self.key, completed=len(days))
        return days

    def save(self, days: Iterable[int]) -> bool:
        """Replace the stored completed days."""
        payload = sorted(set(days))
        try:
            self._write(payload)
        except Exception as e:
            logger.error("Failed to save progress", key=self.key, error=str(e))
            return False

        logger.info("Progress saved", key=self.key, completed=len(payload))
        return True


class MemoryProgressStore(ProgressStore):
    """In-process key-value store."""

    def __init__(self, key: str = DEFAULT_KEY, data: Optional[Dict[str, Any]] = None):
        super().__init__(key)
        self.data: Dict[str, Any] = data if data is not None else {}

    def _read(self) -> Any:
        return self.data.get(self.key)

    def _write(self, days: list):
        self.data[self.key] = list(days)


class FileProgressStore(ProgressStore):
    """Key-value store backed by a local JSON file."""

    def __init__(self, path: Path, key: str = DEFAULT_KEY):
        super().__init__(key)
        self.path = Path(path)

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
        if not isinstance(document, dict):
            raise ValueError("Progress file does not hold a JSON object")
        return document

    def _read(self) -> Any:
        return self._read_document().get(self.key)

    def _write(self, days: list):
        try:
            document = self._read_document()
        except ValueError:
            logger.warning("Overwriting unreadable progress file", path=str(self.path))
            document = {}
        document[self.key] = days

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".progress-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise


class MongoProgressStore(ProgressStore):
    """Key-value store backed by a MongoDB collection, one document per key.

    Without an explicit collection the store connects on first use, so an
    unreachable server surfaces through the logged fallbacks of load and save.
    """

    def __init__(self, collection: Optional[Collection] = None, key: str = DEFAULT_KEY,
                 store_config: Optional[StoreConfig] = None):
        super().__init__(key)
        self.collection = collection
        self.store_config = store_config

    def _get_collection(self) -> Collection:
        if self.collection is None:
            from .connection import get_database_manager

            store_config = self.store_config or get_store_config()
            manager = get_database_manager(store_config)
            self.collection = manager.get_collection(store_config.collection)
        return self.collection

    def _read(self) -> Any:
        document = self._get_collection().find_one({"_id": self.key})
        if document is None:
            return None
        return document.get("value")

    def _write(self, days: list):
        self._get_collection().replace_one({"_id": self.key}, {"_id": self.key, "value": days}, upsert=True)


def create_progress_store(store_config: Optional[StoreConfig] = None) -> ProgressStore:
    """Build the progress store selected by configuration."""
    store_config = store_config or get_store_config()
    backend = store_config.backend.lower()

    if backend == "file":
        return FileProgressStore(store_config.path, key=store_config.key)
    if backend == "memory":
        return MemoryProgressStore(key=store_config.key)
    if backend == "mongodb":
        return MongoProgressStore(key=store_config.key, store_config=store_config)

    raise ProgressStoreError(f"Unknown progress store backend: {store_config.backend}")
