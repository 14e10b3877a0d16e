"""Serial dispatching of state updates onto one presentation thread."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


def _log_failure(future: Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error("Presentation update failed", exc_info=future.exception())


class SerialDispatcher:
    """Runs posted callables one at a time, in posting order."""

    def __init__(self, name: str = "presentation"):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    def post(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        future = self._executor.submit(func, *args, **kwargs)
        future.add_done_callback(_log_failure)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
