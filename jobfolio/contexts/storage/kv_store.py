"""
Persisted key-value stores.

Every collection in JOBFOLIO is persisted as one JSON value under one key.
KeyValueStore defines the contract the rest of the system relies on:

    get(keys)            -> {key: value} for the keys that exist
    set({key: value})    -> write one or more keys
    remove(keys)         -> delete one or more keys
    clear()              -> delete everything
    get_bytes_in_use()   -> UTF-8 size of keys plus JSON-serialized values

Each single-key write is atomic; nothing coordinates writes across keys.

Implementations:
- MemoryKeyValueStore: process-local, used by tests and dry runs
- JsonFileKeyValueStore: one JSON document on disk, atomic temp-file writes
"""

import json
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from dotenv import load_dotenv

from jobfolio.contexts.storage.exceptions import StorageQuotaExceededError
from jobfolio.contexts.storage.logger import _log_debug, _log_error

load_dotenv()
JOBFOLIO_STORE_PATH = Path(os.getenv("JOBFOLIO_STORE_PATH", "data/jobfolio_store.json"))

Keys = Union[str, Iterable[str]]
ChangeListener = Callable[[Dict[str, Dict[str, Any]]], None]


def _as_key_list(keys: Keys) -> List[str]:
    if isinstance(keys, str):
        return [keys]
    return list(keys)


def _json_copy(value: Any) -> Any:
    """Copy a value through JSON so callers never share state with the store."""
    return json.loads(json.dumps(value, ensure_ascii=False))


def _entry_size(key: str, value: Any) -> int:
    return len(key.encode("utf-8")) + len(json.dumps(value, ensure_ascii=False).encode("utf-8"))


class KeyValueStore(ABC):
    """
    Base class for persisted key-value stores.

    Subclasses only provide _load() and _commit(); key selection, copying,
    quota enforcement and change notification live here.

    Args:
        quota_bytes: Optional byte limit. A write that would push
                     get_bytes_in_use() above it raises StorageQuotaExceededError
                     and leaves the store unchanged.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._listeners: List[ChangeListener] = []

    @abstractmethod
    def _load(self) -> Dict[str, Any]:
        """Return the full key-value mapping."""

    @abstractmethod
    def _commit(self, data: Dict[str, Any]) -> None:
        """Replace the full key-value mapping."""

    def get(self, keys: Optional[Keys] = None) -> Dict[str, Any]:
        """
        Read values for one key, several keys, or everything (keys=None).

        Missing keys are simply absent from the returned dict.
        """
        data = self._load()
        if keys is None:
            selected = data
        else:
            selected = {key: data[key] for key in _as_key_list(keys) if key in data}
        return _json_copy(selected)

    def set(self, items: Dict[str, Any]) -> None:
        """
        Write one or more keys.

        Raises:
            TypeError: If a value is not JSON-serializable
            StorageQuotaExceededError: If the write would exceed quota_bytes
        """
        data = self._load()
        updated = dict(data)
        changes = {}
        for key, value in items.items():
            stored = _json_copy(value)
            changes[key] = {"oldValue": data.get(key), "newValue": stored}
            updated[key] = stored

        self._check_quota(updated)
        self._commit(updated)
        _log_debug(f"Wrote key(s): {', '.join(items)}")
        self._notify(changes)

    def remove(self, keys: Keys) -> None:
        """Delete one or more keys; missing keys are ignored."""
        data = self._load()
        updated = dict(data)
        changes = {}
        for key in _as_key_list(keys):
            if key in updated:
                changes[key] = {"oldValue": updated.pop(key), "newValue": None}

        if changes:
            self._commit(updated)
            _log_debug(f"Removed key(s): {', '.join(changes)}")
            self._notify(changes)

    def clear(self) -> None:
        """Delete every key."""
        data = self._load()
        changes = {key: {"oldValue": value, "newValue": None} for key, value in data.items()}
        self._commit({})
        self._notify(changes)

    def get_bytes_in_use(self, keys: Optional[Keys] = None) -> int:
        """UTF-8 byte size of the selected keys and their serialized values."""
        data = self._load()
        selected = data.keys() if keys is None else [k for k in _as_key_list(keys) if k in data]
        return sum(_entry_size(key, data[key]) for key in selected)

    def add_listener(self, callback: ChangeListener) -> None:
        """
        Register a change listener.

        Callbacks receive {key: {"oldValue": ..., "newValue": ...}} after every
        write, removal or clear that touched at least one key.
        """
        self._listeners.append(callback)

    def remove_listener(self, callback: ChangeListener) -> None:
        """Unregister a change listener added with add_listener()."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _check_quota(self, data: Dict[str, Any]) -> None:
        if self.quota_bytes is None:
            return
        total = sum(_entry_size(key, value) for key, value in data.items())
        if total > self.quota_bytes:
            raise StorageQuotaExceededError(total, self.quota_bytes)

    def _notify(self, changes: Dict[str, Dict[str, Any]]) -> None:
        if not changes:
            return
        for callback in list(self._listeners):
            try:
                callback(changes)
            except Exception as e:
                # Listeners belong to the UI layer; a broken one must not fail the write
                _log_error(f"Change listener {callback!r} raised: {e}")


class MemoryKeyValueStore(KeyValueStore):
    """
    In-process key-value store.

    Args:
        initial: Optional starting contents (copied)
        quota_bytes: Optional byte limit
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None, quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes=quota_bytes)
        self._data: Dict[str, Any] = _json_copy(initial) if initial else {}

    def _load(self) -> Dict[str, Any]:
        return self._data

    def _commit(self, data: Dict[str, Any]) -> None:
        self._data = data


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as a single UTF-8 JSON document.

    Writes go to a temp file in the same directory first and are moved over
    the original only once fully written (atomic write pattern).

    Args:
        path: JSON file location (defaults to JOBFOLIO_STORE_PATH env variable)
        quota_bytes: Optional byte limit
    """

    def __init__(self, path: Optional[Path] = None, quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes=quota_bytes)
        self.path = Path(path) if path is not None else JOBFOLIO_STORE_PATH

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            text = f.read()
        return json.loads(text) if text.strip() else {}

    def _commit(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(suffix=".json", dir=str(self.path.parent), text=True)
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)

            # Only overwrite original if write succeeded
            shutil.move(temp_path, self.path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
