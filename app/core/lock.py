import logging
import threading
from contextlib import contextmanager

from app.core.errors import StoreBusyError

logger = logging.getLogger(__name__)


class StoreLock:
    """Process-wide mutual exclusion around record store requests."""

    def __init__(self):
        self._lock = threading.Lock()

    @contextmanager
    def hold(self, timeout: float):
        if not self._lock.acquire(timeout=timeout):
            logger.warning("Store lock not acquired within %.1fs", timeout)
            raise StoreBusyError(timeout)
        try:
            yield
        finally:
            self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()


store_lock = StoreLock()
