from loguru import logger
import sys
import time
from functools import wraps


def timeit(func):  # pragma: no cover
    """
    Decorator that logs the execution time of the decorated function.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed = time.perf_counter() - start
            logger.debug(f"{func.__qualname__} executed in {elapsed:.6f}s")
    return wrapper


def configure_logging(level: str) -> None:
    """Point loguru at stderr with ``level`` as the threshold."""
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )
