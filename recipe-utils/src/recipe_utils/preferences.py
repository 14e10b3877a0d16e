"""Key-value stores for user preferences, with change observation."""

import json
import logging
import pathlib
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Dict, List, Union

logger = logging.getLogger(__name__)

PreferenceCallback = Callable[[str, Any], None]


class Preferences(ABC):
    """A preference store that notifies observers when a key changes."""

    def __init__(self):
        self._observers: Dict[str, List[PreferenceCallback]] = defaultdict(list)
        self._observers_lock = threading.Lock()

    @abstractmethod
    def get(self, key: str, default: Any = False) -> Any:
        pass

    @abstractmethod
    def _store(self, key: str, value: Any) -> None:
        pass

    def set(self, key: str, value: Any) -> None:
        """Store a value and notify the observers of ``key`` if it changed."""
        if self.get(key, None) == value:
            return
        self._store(key, value)
        with self._observers_lock:
            callbacks = list(self._observers[key])
        for callback in callbacks:
            callback(key, value)

    def observe(self, key: str, callback: PreferenceCallback) -> Callable[[], None]:
        """Call ``callback(key, value)`` whenever ``key`` changes.

        Returns:
            A function that removes the observer again.
        """
        with self._observers_lock:
            self._observers[key].append(callback)

        def unsubscribe() -> None:
            with self._observers_lock:
                if callback in self._observers[key]:
                    self._observers[key].remove(callback)

        return unsubscribe


class InMemoryPreferences(Preferences):
    def __init__(self, values: Dict[str, Any] = None):
        super().__init__()
        self._values = dict(values or {})

    def get(self, key: str, default: Any = False) -> Any:
        return self._values.get(key, default)

    def _store(self, key: str, value: Any) -> None:
        self._values[key] = value


class JsonFilePreferences(Preferences):
    """Preferences kept in a JSON object on disk."""

    def __init__(self, path: Union[str, pathlib.Path]):
        super().__init__()
        self.path = pathlib.Path(path)
        self._values = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = False) -> Any:
        return self._values.get(key, default)

    def _store(self, key: str, value: Any) -> None:
        self._values[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")
