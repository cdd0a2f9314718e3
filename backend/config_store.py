"""
Configuration store: playoff teams, player pool, settings and the generated catalog.
Everything is read and written wholesale; there are no partial updates.

FileConfigStore is what the API uses; MemoryConfigStore stands in for it in tests.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from backend.models import Settings

TEAMS_FILE = "playoff-teams.json"
POOL_FILE = "player-pool.json"
SETTINGS_FILE = "settings.json"
CATALOG_FILE = "players.csv"


class ConfigStore:
    """Load/save interface. Loaders return None when nothing has been saved yet."""

    def load_teams(self) -> list[str] | None:
        raise NotImplementedError

    def save_teams(self, teams: list[str]) -> None:
        raise NotImplementedError

    def load_pool(self) -> dict[str, Any] | None:
        raise NotImplementedError

    def save_pool(self, pool: dict[str, Any]) -> None:
        raise NotImplementedError

    def load_settings(self) -> dict[str, Any] | None:
        raise NotImplementedError

    def save_settings(self, settings: dict[str, Any]) -> None:
        raise NotImplementedError

    def load_catalog(self) -> str | None:
        raise NotImplementedError

    def save_catalog(self, text: str) -> None:
        raise NotImplementedError


class FileConfigStore(ConfigStore):
    """JSON/CSV files in one data directory."""

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, name: str) -> Path:
        return self.data_dir / name

    def _read_json(self, name: str) -> Any | None:
        path = self._path(name)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_text(self, name: str, text: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._path(name).write_text(text, encoding="utf-8")

    def _write_json(self, name: str, data: Any) -> None:
        self._write_text(name, json.dumps(data, indent=2))

    def load_teams(self) -> list[str] | None:
        data = self._read_json(TEAMS_FILE)
        if data is None:
            return None
        return list(data.get("teams", []))

    def save_teams(self, teams: list[str]) -> None:
        self._write_json(TEAMS_FILE, {"teams": teams})

    def load_pool(self) -> dict[str, Any] | None:
        return self._read_json(POOL_FILE)

    def save_pool(self, pool: dict[str, Any]) -> None:
        self._write_json(POOL_FILE, pool)

    def load_settings(self) -> dict[str, Any] | None:
        return self._read_json(SETTINGS_FILE)

    def save_settings(self, settings: dict[str, Any]) -> None:
        self._write_json(SETTINGS_FILE, settings)

    def load_catalog(self) -> str | None:
        path = self._path(CATALOG_FILE)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save_catalog(self, text: str) -> None:
        self._write_text(CATALOG_FILE, text)


class MemoryConfigStore(ConfigStore):
    """In-process store. Values are copied through JSON so callers cannot alias them."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def _get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def _put(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def load_teams(self) -> list[str] | None:
        return self._get(TEAMS_FILE)

    def save_teams(self, teams: list[str]) -> None:
        self._put(TEAMS_FILE, list(teams))

    def load_pool(self) -> dict[str, Any] | None:
        return self._get(POOL_FILE)

    def save_pool(self, pool: dict[str, Any]) -> None:
        self._put(POOL_FILE, pool)

    def load_settings(self) -> dict[str, Any] | None:
        return self._get(SETTINGS_FILE)

    def save_settings(self, settings: dict[str, Any]) -> None:
        self._put(SETTINGS_FILE, settings)

    def load_catalog(self) -> str | None:
        return self._get(CATALOG_FILE)

    def save_catalog(self, text: str) -> None:
        self._put(CATALOG_FILE, text)


def read_settings(store: ConfigStore) -> Settings:
    """Settings with defaults applied (entries open when nothing is saved)."""
    return Settings.from_dict(store.load_settings())
