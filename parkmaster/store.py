"""
Whole-document JSON persistence for the parking collections.

Each collection is one named document: a list of records, or a singleton
object for settings. Reads of a missing document write the default back so
empty stores materialize on first touch.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Protocol

VEHICLES = "vehicles"
PERMANENT_CLIENTS = "permanent-clients"
SETTINGS = "settings"
DAILY_STATS = "daily-stats"
BACKUP = "backup"


class DocumentStore(Protocol):
    """Defines the operations the API needs from document persistence."""

    def read(self, name: str, default: Any) -> Any:
        ...

    def write(self, name: str, document: Any) -> None:
        ...

    def lock(self, name: str) -> Any:
        ...


class _DocumentLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    @contextmanager
    def lock(self, name: str) -> Iterator[None]:
        """Serialize read-modify-write sequences on one document."""
        with self._guard:
            doc_lock = self._locks.setdefault(name, threading.RLock())
        with doc_lock:
            yield


class FileDocumentStore(_DocumentLocks):
    """One `<name>.json` file per document inside `data_dir`."""

    def __init__(self, data_dir: str):
        super().__init__()
        os.makedirs(data_dir, exist_ok=True)
        self.data_dir = data_dir

    def path_for(self, name: str) -> str:
        return os.path.join(self.data_dir, f"{name}.json")

    def _load(self, name: str) -> Any:
        with open(self.path_for(name), "r", encoding="utf-8") as f:
            return json.load(f)

    def read(self, name: str, default: Any) -> Any:
        try:
            return self._load(name)
        except FileNotFoundError:
            pass
        with self.lock(name):
            # Another thread may have materialized it while we waited.
            try:
                return self._load(name)
            except FileNotFoundError:
                document = copy.deepcopy(default)
                self.write(name, document)
                return document

    def write(self, name: str, document: Any) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp, self.path_for(name))
        except Exception:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise


class InMemoryDocumentStore(_DocumentLocks):
    """Test double for document persistence."""

    def __init__(self):
        super().__init__()
        self.documents: Dict[str, Any] = {}

    def read(self, name: str, default: Any) -> Any:
        with self.lock(name):
            if name not in self.documents:
                self.write(name, default)
        # Hand out copies so callers mutate like they would a parsed file.
        return copy.deepcopy(self.documents[name])

    def write(self, name: str, document: Any) -> None:
        self.documents[name] = json.loads(json.dumps(document))

    def reset(self) -> None:
        """Clear all stored documents (useful in tests)."""
        self.documents.clear()
