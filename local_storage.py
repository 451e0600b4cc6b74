"""Per-client key/value storage backing demo mode.

Each client (identified by a random hex id kept in its session cookie) gets a
directory holding one JSON document per key, mirroring what a browser keeps
in ``localStorage``.
"""

from __future__ import annotations

import json
import logging
import re
import secrets
import time
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEMO_MODE_KEY = "demo_mode"
DEMO_DATA_KEY = "demo_data"
DEMO_PROFILE_KEY = "demo_profile"
DEMO_BUDGET_KEY = "demo_budgets"

ALL_KEYS = (DEMO_MODE_KEY, DEMO_DATA_KEY, DEMO_PROFILE_KEY, DEMO_BUDGET_KEY)

_CLIENT_ID = re.compile(r"^[0-9a-f]{32}$")
_KEY = re.compile(r"^[a-z_]+$")


def new_client_id() -> str:
    return secrets.token_hex(16)


class LocalStorage:
    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        if not _KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def get_json(self, key: str, default: Any) -> Any:
        stored = self.get_item(key)
        if stored is None:
            return default
        return json.loads(stored)

    def set_json(self, key: str, data: Any) -> None:
        self.set_item(key, json.dumps(data))


class DemoStore:
    """Hands out :class:`LocalStorage` instances rooted under one directory."""

    def __init__(self, root: Path, latency_scale: float = 1.0) -> None:
        self.root = root
        self.latency_scale = latency_scale

    def client(self, client_id: str) -> LocalStorage:
        if not _CLIENT_ID.match(client_id or ""):
            raise ValueError("Invalid client id")
        return LocalStorage(self.root / client_id)

    def pause(self, seconds: float) -> None:
        delay = seconds * self.latency_scale
        if delay > 0:
            logger.debug(f"demo latency: sleeping {delay:.3f}s")
            time.sleep(delay)
