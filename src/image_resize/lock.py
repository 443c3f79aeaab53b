"""Non-blocking guard for the single resize dialog surface."""

import threading


class DialogLock:
    """Lets one resize dialog be open at a time.

    A second caller is turned away immediately instead of waiting.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def is_locked(self) -> bool:
        return self._lock.locked()

    def try_acquire(self) -> bool:
        """Take the lock if it is free. Returns False if it is already held."""
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        """Free the lock. Releasing a free lock is a no-op."""
        try:
            self._lock.release()
        except RuntimeError:
            pass
