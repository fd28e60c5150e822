"""
Application settings: immutable snapshots persisted as one JSON object.

AppSettings never changes in place. set() and set_nested() return a new
snapshot, and consumers hold whichever snapshot they were handed.
SettingsStore loads, saves and resets that snapshot under a single
namespaced key in a JSON-file key-value store.
"""

import copy
import json
import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

logger = logging.getLogger(__name__)

SETTINGS_KEY = "appSettings"
DEFAULT_STORAGE_PATH = Path.home() / ".cropyield" / "storage.json"

DEFAULT_SETTINGS: Mapping[str, Any] = MappingProxyType({
    "darkMode": False,
    "locale": "en-US",
    "compactMode": False,
    "currency": "USD",
    "dateFormat": "MM/DD/YYYY",
    "emailNotifications": True,
    "pushNotifications": False,
    "weatherAlerts": True,
    "autoSave": True,
    "offlineMode": False,
})


class AppSettings(Mapping):
    """Read-only settings snapshot."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, Any] = copy.deepcopy(dict(values or {}))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AppSettings({self._values!r})"

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> "AppSettings":
        """Return a new snapshot with key set to value."""
        values = dict(self._values)
        values[key] = value
        return AppSettings(values)

    def set_nested(self, section: str, key: str, value: Any) -> "AppSettings":
        """
        Return a new snapshot with section[key] = value.

        Merges one level deep into an existing mapping section. If the
        section does not exist (or is not a mapping) the write is a no-op
        and this snapshot is returned unchanged; seed sections via set().
        """
        current = self._values.get(section)
        if not isinstance(current, Mapping):
            logger.debug("set_nested: section '%s' not present, ignoring", section)
            return self
        values = dict(self._values)
        merged = dict(current)
        merged[key] = value
        values[section] = merged
        return AppSettings(values)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._values)


class JsonFileStorage:
    """Durable string key-value store backed by one JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else DEFAULT_STORAGE_PATH

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read storage file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class SettingsStore:
    """
    Loads and persists AppSettings.

    Usage:
        store = SettingsStore()
        settings = store.load()
        settings = settings.set("darkMode", True)
        store.save(settings)
    """

    def __init__(self, storage: Optional[JsonFileStorage] = None,
                 defaults: Mapping[str, Any] = DEFAULT_SETTINGS):
        self.storage = storage or JsonFileStorage()
        self.defaults = dict(defaults)

    def load(self) -> AppSettings:
        """Defaults merged with whatever is stored; defaults alone if unreadable."""
        saved = self.storage.get_item(SETTINGS_KEY)
        if not saved:
            return AppSettings(self.defaults)
        try:
            stored = json.loads(saved)
        except ValueError:
            logger.warning("Stored settings are not valid JSON; using defaults")
            return AppSettings(self.defaults)
        if not isinstance(stored, dict):
            return AppSettings(self.defaults)
        merged = dict(self.defaults)
        merged.update(stored)
        return AppSettings(merged)

    def save(self, settings: AppSettings) -> None:
        self.storage.set_item(SETTINGS_KEY, json.dumps(settings.to_dict(), ensure_ascii=False))
        logger.info("Settings saved")

    def reset(self) -> AppSettings:
        """Forget stored settings and return the defaults."""
        self.storage.remove_item(SETTINGS_KEY)
        return AppSettings(self.defaults)
