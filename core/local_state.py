"""
Client-local state

Small JSON-file key/value store for advisory client state: the remembered
e-mail, per-form auth attempt counters, per-form drafts and the welcome
flag. Nothing stored here is authoritative.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

REMEMBERED_EMAIL_KEY = "rememberedEmail"
WELCOME_SEEN_KEY = "hasSeenWelcomeIntro"


class LocalStateStore:
    """JSON file backed key/value store"""

    def __init__(self, path: Optional[str] = None):
        """
        Args:
            path: Backing file; None keeps state in memory only
        """
        self.path = Path(path) if path else None
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable local state at {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed local state at {self.path}")
            return {}
        return data

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(self._data, fh, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._save()

    def __contains__(self, key: str) -> bool:
        return key in self._data


__all__ = ["LocalStateStore", "REMEMBERED_EMAIL_KEY", "WELCOME_SEEN_KEY"]
