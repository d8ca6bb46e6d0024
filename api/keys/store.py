"""
API key allow-list backed by `apikeys.json`:

    {"validApiKeys": ["abc123", ...]}

The file is re-read on every lookup, so keys can be rotated without a restart.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class ApiKeyStore:
    def __init__(self, path: Path) -> None:
        self.path = path

    def reload(self) -> frozenset[str]:
        """
        Read the current key set. An unreadable or malformed file yields no keys.
        """
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("api_keys_read_failed path=%s error=%s", self.path, exc)
            return frozenset()

        keys = data.get("validApiKeys") if isinstance(data, dict) else None
        if not isinstance(keys, list):
            logger.error("api_keys_malformed path=%s", self.path)
            return frozenset()
        return frozenset(k for k in keys if isinstance(k, str))

    def contains(self, key: Any) -> bool:
        # Exact, case-sensitive match; non-string keys never match.
        if not isinstance(key, str):
            return False
        return key in self.reload()
