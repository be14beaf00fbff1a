from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)

USER_KEY = "poste-user"
TENANT_KEY = "poste-tenant"
LOGGED_IN_KEY = "poste-system-logged-in"
LOGIN_TIME_KEY = "poste-system-login-time"


class JsonSessionStore:
    """Key/value storage persisted as one JSON file, survives restarts."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("session_store_unreadable path=%s error=%s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def get_item(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def set_items(self, items: dict[str, Any]) -> None:
        data = self._read()
        data.update(items)
        self._write(data)

    def remove_items(self, *keys: str) -> None:
        data = self._read()
        if not any(k in data for k in keys):
            return
        for k in keys:
            data.pop(k, None)
        self._write(data)

    def tenant(self) -> str | None:
        value = self.get_item(TENANT_KEY)
        return str(value) if value else None
