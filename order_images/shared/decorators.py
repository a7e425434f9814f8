import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


def log_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Log and re-raise any exception escaping the decorated call.

    The log line names the qualified function and the exception type so a
    failed upstream call can be traced without a full traceback.

    Usage::

        @log_errors
        def fetch_orders_page(self, url: str, params: dict | None = None) -> OrdersPage: ...
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            logger.error(f"[{func.__qualname__}] {type(exc).__name__}: {exc}")
            raise

    return wrapper


def timed(func: Callable[P, R]) -> Callable[P, R]:
    """Log how long the decorated pipeline stage took, whether or not it raised."""

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed = time.perf_counter() - started
            logger.debug(f"[{func.__qualname__}] finished in {elapsed:.2f}s")

    return wrapper
