"""Single-value observable cells."""

import threading
from typing import Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ObservableValue(Generic[T]):
    """Holds one value and pushes every update to its subscribers.

    New subscribers immediately receive the current value. Updates are
    delivered on the thread that publishes them, to every subscriber
    registered at the time of the update. Publishers that need a global order
    serialise their calls to ``set`` themselves.
    """

    def __init__(self, value: Optional[T] = None):
        self._value = value
        self._subscribers: List[Callable[[T], None]] = []
        self._lock = threading.RLock()

    @property
    def value(self) -> Optional[T]:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            callbacks = list(self._subscribers)
        for callback in callbacks:
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback and call it with the current value.

        Callbacks run outside the cell's lock, so they may read other state
        or subscribe to other cells.

        Returns:
            A function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)
            current = self._value
        callback(current)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def __repr__(self) -> str:
        return f"ObservableValue({self._value!r})"
