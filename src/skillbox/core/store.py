"""Key-value stores for persisted skill state."""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from skillbox.utils.config import Config

logger = logging.getLogger(__name__)


class StateStore(ABC):
    """
    Async key-value store.

    `set` only stages a value; `save` makes staged values durable.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value for key, or None if it was never set."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Replace the value for key."""

    @abstractmethod
    async def save(self) -> None:
        """Commit staged values."""


class MemoryStore(StateStore):
    """Non-durable store, used when no state file is configured."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})

    async def get(self, key: str) -> Any | None:
        return self._data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def save(self) -> None:
        return None


class JsonFileStore(StateStore):
    """
    Store backed by a single JSON file.

    The file is read lazily on first access and rewritten as a whole on
    save (write to a temp file, then replace).
    """

    @staticmethod
    def from_config(config: "Config") -> "JsonFileStore":
        return JsonFileStore(config.state_path)

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            self._data = {}
            if self.path.exists():
                try:
                    raw = json.loads(self.path.read_text(encoding="utf-8"))
                except (OSError, json.JSONDecodeError) as e:
                    logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
                    raw = {}
                if isinstance(raw, dict):
                    self._data = raw
                else:
                    logger.warning(f"Ignoring state file {self.path}: not an object")
        return self._data

    async def get(self, key: str) -> Any | None:
        return self._load().get(key)

    async def set(self, key: str, value: Any) -> None:
        self._load()[key] = value

    async def save(self) -> None:
        data = self._load()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)
