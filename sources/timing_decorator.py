# timing_decorator.py
import time
import functools
from typing import Callable, Any, Optional, TypeVar, cast

from app_logger import log_debug

F = TypeVar("F", bound=Callable[..., Any])


def timed(label: Optional[str] = None) -> Callable[[F], F]:
    """
    Log how long the wrapped call took, at DEBUG level.
    The memory handler filters DEBUG out, so only the log file sees it.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                log_debug("[%s] took %.4f s", label or func.__qualname__,
                          time.perf_counter() - start)
        return cast(F, wrapper)
    return decorator
