"""
Decorators and context managers for timing operations.
"""
import time
import inspect
from functools import wraps
from contextlib import contextmanager

from utils.performance.tracker import get_tracker


def time_operation(category: str):
    """
    Decorator to time an operation and add it to the tracker.

    Works for both coroutine functions and plain functions. The duration is
    recorded whether the call succeeds or raises.

    Args:
        category: Category name for the metric (e.g., 'upload', 'synthesis')

    Returns:
        Decorated function that tracks execution time
    """
    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                get_tracker().add_metric(
                    category, time.time() - start_time, func_name=func.__name__
                )

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                get_tracker().add_metric(
                    category, time.time() - start_time, func_name=func.__name__
                )

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


@contextmanager
def time_operation_context(category: str, **context):
    """
    Context manager for timing a block with explicit context.

    Args:
        category: Category of the operation
        **context: Extra fields stored with the metric
    """
    start_time = time.time()
    try:
        yield
    finally:
        get_tracker().add_metric(category, time.time() - start_time, **context)
