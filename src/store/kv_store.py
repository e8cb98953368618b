from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable
from uuid import uuid4

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_STORE_DIR = ROOT_DIR / "data" / "store"
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

USERS_KEY = "users"
SCHOLARSHIPS_KEY = "scholarships"
APPLICATIONS_KEY = "applications"
CURRENT_USER_KEY = "currentUser"
DATA_INITIALIZED_KEY = "dataInitialized"
ALL_KEYS = (USERS_KEY, SCHOLARSHIPS_KEY, APPLICATIONS_KEY, CURRENT_USER_KEY, DATA_INITIALIZED_KEY)

logger = logging.getLogger(__name__)


def _validate_key(key: str) -> str:
    if not isinstance(key, str) or not _KEY_PATTERN.match(key):
        raise ValueError(f"Invalid store key: {key!r}")
    return key


class KeyValueStore(ABC):
    """Text values under string keys. No transactions, no cross-key atomicity."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored text, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Absent keys are ignored."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List present keys in sorted order."""

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryStore(KeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> str | None:
        return self._values.get(_validate_key(key))

    def set(self, key: str, value: str) -> None:
        self._values[_validate_key(key)] = str(value)

    def remove(self, key: str) -> None:
        self._values.pop(_validate_key(key), None)

    def keys(self) -> list[str]:
        return sorted(self._values)


class JsonFileStore(KeyValueStore):
    """One `<key>.json` file per key inside `root_dir`."""

    def __init__(self, root_dir: Path | None = None) -> None:
        self.root_dir = Path(root_dir) if root_dir is not None else DEFAULT_STORE_DIR

    def _path_for(self, key: str) -> Path:
        return self.root_dir / f"{_validate_key(key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        output_path = self._path_for(key)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = output_path.parent / f"{output_path.name}.{uuid4().hex}.tmp"
        try:
            temp_path.write_text(str(value), encoding="utf-8")
            temp_path.replace(output_path)
        finally:
            if temp_path.exists():
                temp_path.unlink()

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()
            logger.debug("Removed store key %s", key)

    def keys(self) -> list[str]:
        if not self.root_dir.exists():
            return []
        return sorted(path.stem for path in self.root_dir.glob("*.json") if _KEY_PATTERN.match(path.stem))


class OverlayStore(KeyValueStore):
    """Keeps `local_keys` in a private layer and delegates every other key to `base`.

    Lets each UI visitor hold its own `currentUser` while sharing the collections.
    """

    def __init__(
        self,
        base: KeyValueStore,
        *,
        local_keys: Iterable[str] = (CURRENT_USER_KEY,),
        local: KeyValueStore | None = None,
    ) -> None:
        self.base = base
        self.local_keys = frozenset(_validate_key(key) for key in local_keys)
        self.local = local if local is not None else MemoryStore()

    def _target(self, key: str) -> KeyValueStore:
        return self.local if _validate_key(key) in self.local_keys else self.base

    def get(self, key: str) -> str | None:
        return self._target(key).get(key)

    def set(self, key: str, value: str) -> None:
        self._target(key).set(key, value)

    def remove(self, key: str) -> None:
        self._target(key).remove(key)

    def keys(self) -> list[str]:
        shared = {key for key in self.base.keys() if key not in self.local_keys}
        return sorted(shared | set(self.local.keys()))


def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Store key '{key}' does not hold valid JSON: {exc}") from exc


def write_json(store: KeyValueStore, key: str, payload: Any) -> None:
    store.set(key, json.dumps(payload, ensure_ascii=False))
