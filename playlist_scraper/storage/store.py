from __future__ import annotations

import json
import re
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from pymongo import MongoClient


class DatasetStore(ABC):
    """Keyed scratch storage for scrape batches.

    An area holds an ordered list of batches; each batch is a list of
    JSON-serializable dicts. ``drop_area`` must be safe for unknown names.
    """

    @abstractmethod
    def open_area(self, name: str) -> None: ...

    @abstractmethod
    def append_batch(self, name: str, items: List[Dict[str, Any]]) -> None: ...

    @abstractmethod
    def read_batches(self, name: str) -> List[List[Dict[str, Any]]]: ...

    @abstractmethod
    def drop_area(self, name: str) -> None: ...


class MemoryDatasetStore(DatasetStore):
    """In-process store; Flask may call it from several threads"""

    def __init__(self):
        self._areas: Dict[str, List[List[Dict[str, Any]]]] = {}
        self._lock = threading.Lock()

    def open_area(self, name: str) -> None:
        with self._lock:
            if name in self._areas:
                raise KeyError(f"Dataset {name} is already open")
            self._areas[name] = []

    def append_batch(self, name: str, items: List[Dict[str, Any]]) -> None:
        with self._lock:
            if name not in self._areas:
                raise KeyError(f"Dataset {name} is not open")
            self._areas[name].append([dict(item) for item in items])

    def read_batches(self, name: str) -> List[List[Dict[str, Any]]]:
        with self._lock:
            if name not in self._areas:
                raise KeyError(f"Dataset {name} is not open")
            return [[dict(item) for item in batch] for batch in self._areas[name]]

    def drop_area(self, name: str) -> None:
        with self._lock:
            self._areas.pop(name, None)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._areas

    def __len__(self) -> int:
        with self._lock:
            return len(self._areas)


class FileDatasetStore(DatasetStore):
    """One JSON file per dataset under ``storage_path``"""

    _SAFE_NAME = re.compile(r"^[A-Za-z0-9_.-]+$")

    def __init__(self, storage_path: str = "playlist_datasets"):
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        if not self._SAFE_NAME.match(name):
            raise ValueError(f"Invalid dataset name: {name!r}")
        return self.storage_path / f"{name}.json"

    def _load(self, name: str) -> Dict[str, Any]:
        path = self._path(name)
        if not path.exists():
            raise KeyError(f"Dataset {name} is not open")
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _save(self, name: str, data: Dict[str, Any]) -> None:
        path = self._path(name)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        tmp_path.replace(path)

    def open_area(self, name: str) -> None:
        if self._path(name).exists():
            raise KeyError(f"Dataset {name} is already open")
        self._save(name, {"dataset": name, "created_at": datetime.now().isoformat(), "batches": []})
        logger.debug(f"Opened dataset file {self._path(name)}")

    def append_batch(self, name: str, items: List[Dict[str, Any]]) -> None:
        data = self._load(name)
        data["batches"].append(list(items))
        self._save(name, data)

    def read_batches(self, name: str) -> List[List[Dict[str, Any]]]:
        return self._load(name)["batches"]

    def drop_area(self, name: str) -> None:
        path = self._path(name)
        path.unlink(missing_ok=True)
        path.with_suffix(".json.tmp").unlink(missing_ok=True)


class MongoDatasetStore(DatasetStore):
    """Batches stored as documents in one collection, keyed by dataset name"""

    COLLECTION_NAME = "playlist_datasets"

    def __init__(self, collection=None, connection_string: Optional[str] = None,
                 database_name: str = "playlist-scraper"):
        if collection is None:
            client = MongoClient(connection_string, serverSelectionTimeoutMS=5000)
            client.admin.command('ping')
            collection = client[database_name][self.COLLECTION_NAME]
            logger.info(f"Connected to MongoDB database: {database_name}")
        self.collection = collection

    def open_area(self, name: str) -> None:
        # Header document marks the area as open; batches follow with seq >= 1
        self.collection.insert_one({"dataset": name, "seq": 0, "items": None, "created_at": datetime.now()})

    def append_batch(self, name: str, items: List[Dict[str, Any]]) -> None:
        if self.collection.count_documents({"dataset": name, "seq": 0}) == 0:
            raise KeyError(f"Dataset {name} is not open")
        seq = self.collection.count_documents({"dataset": name})
        self.collection.insert_one({"dataset": name, "seq": seq, "items": list(items)})

    def read_batches(self, name: str) -> List[List[Dict[str, Any]]]:
        docs = list(self.collection.find({"dataset": name, "seq": {"$gt": 0}}, {"_id": 0}).sort("seq", 1))
        return [doc["items"] for doc in docs]

    def drop_area(self, name: str) -> None:
        self.collection.delete_many({"dataset": name})


def create_store(backend: str = "memory", **kwargs) -> DatasetStore:
    """Create the dataset store for a configured backend name"""
    backend = (backend or "memory").lower()
    if backend == "memory":
        return MemoryDatasetStore()
    if backend == "file":
        return FileDatasetStore(kwargs.get("storage_path", "playlist_datasets"))
    if backend == "mongodb":
        return MongoDatasetStore(
            connection_string=kwargs.get("mongodb_uri"),
            database_name=kwargs.get("mongodb_database", "playlist-scraper"),
        )
    raise ValueError(f"Unknown storage backend: {backend}")
