"""Retrying of translation requests that fail on a dropped connection."""

import logging
import time
from functools import wraps
from typing import Any, Callable, Tuple, Type

import requests

logger = logging.getLogger(__name__)

CONNECTION_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ReadTimeout,
    ConnectionResetError,
)


def retry_on_connection_error(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exceptions: Tuple[Type[BaseException], ...] = CONNECTION_ERRORS,
) -> Callable:
    """Retry a translation backend call when the connection drops.

    The delay doubles after every failed attempt, up to ``max_delay``. Errors
    outside ``exceptions`` (HTTP status errors, bad payloads) are raised at
    once.

    Args:
        max_retries: Total number of attempts, the first one included
        initial_delay: Delay before the second attempt, in seconds
        max_delay: Upper bound of the delay between attempts, in seconds
        exceptions: Exception types that trigger a retry

    Example:
        @retry_on_connection_error(max_retries=3, initial_delay=1.0)
        def post_batch(sentences):
            return session.post(url, json={"q": sentences})
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            f"{func.__name__} failed after {max_retries} attempts: {e}"
                        )
                        raise
                    logger.warning(
                        f"{func.__name__}: connection error on attempt "
                        f"{attempt}/{max_retries}: {e}. Retrying in {delay}s"
                    )
                    time.sleep(delay)
                    delay = min(delay * 2, max_delay)
                    attempt += 1

        return wrapper

    return decorator
