# quack_companion/services/session.py
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Well-known keys
TOKEN_KEY = "quack.quackToken"
ENDPOINT_KEY = "quack.endpoint"
VALID_ENDPOINT_KEY = "quack.isValidEndpoint"
VALID_TOKEN_KEY = "quack.isValidToken"
GUIDELINES_KEY = "quack.guidelines"
MESSAGES_KEY = "messages"


class Scope(str, Enum):
    GLOBAL = "global"
    WORKSPACE = "workspace"


class SessionStore:
    """Opaque key-value session state, persisted as a single JSON file.

    ``global`` holds credentials and cached guidelines, ``workspace`` holds
    the chat history. Passing ``path=None`` keeps everything in memory.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._state: dict[str, dict[str, Any]] = {scope.value: {} for scope in Scope}
        self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load session state from {self.path}: {str(e)}")
            return
        if not isinstance(data, dict):
            logger.error(f"Ignoring session state in {self.path}: expected a JSON object")
            return
        for scope in Scope:
            if isinstance(data.get(scope.value), dict):
                self._state[scope.value] = data[scope.value]

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._state, indent=2), encoding="utf-8")

    def get(self, key: str, default: Any = None, scope: Scope = Scope.GLOBAL) -> Any:
        return self._state[Scope(scope).value].get(key, default)

    def update(self, key: str, value: Any, scope: Scope = Scope.GLOBAL) -> None:
        """Set ``key``; ``None`` removes it."""
        values = self._state[Scope(scope).value]
        if value is None:
            values.pop(key, None)
        else:
            values[key] = value
        self._save()

    def clear(self, scope: Scope = Scope.GLOBAL) -> None:
        self._state[Scope(scope).value] = {}
        self._save()

    def keys(self, scope: Scope = Scope.GLOBAL) -> list[str]:
        return list(self._state[Scope(scope).value])
