import functools
import logging

logger = logging.getLogger(__name__)


def log_exceptions(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception:
            logger.error(f"Exception in {func.__qualname__}", exc_info=True)
            raise
    return wrapper
