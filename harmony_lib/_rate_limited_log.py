"""
Thread-safe rate-limited logging.

Topology resolution against a flaky node can fail many times in a row; this
keeps the warning visible without repeating it on every attempt.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60

# One cache per interval so entries expire on the interval the caller asked for
_caches = {}
_cache_lock = threading.RLock()


def _cache_for(interval: int) -> TTLCache:
    cache = _caches.get(interval)
    if cache is None:
        cache = TTLCache(maxsize=100, ttl=interval)
        _caches[interval] = cache
    return cache


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = DEFAULT_INTERVAL,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message at most once per interval, in a thread-safe manner.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        interval: Minimum interval between identical logs in seconds
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was emitted, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    with _cache_lock:
        cache = _cache_for(interval)
        if key in cache:
            return False
        log_method(message)
        cache[key] = True
    return True


def reset() -> None:
    """Forget every suppressed message (used by tests)."""
    with _cache_lock:
        _caches.clear()
