"""Execution lease held while the local file server is running."""

import threading
from typing import Optional, Protocol

from common.logging_config import get_logger

logger = get_logger(__name__)


class ExecutionLease(Protocol):
    """Allowance from the host environment to keep running in the background."""

    def acquire(self) -> None:
        ...

    def release(self) -> None:
        ...


class KeepAliveLease:
    """
    Keeps the interpreter alive while acquired.

    Holds a non-daemon thread parked on an event, so the process keeps
    serving after the caller's main thread returns. Releasing the lease
    lets the thread finish. Both operations are idempotent.
    """

    def __init__(self, name: str = "FileServerLease"):
        self.name = name
        self._released = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def held(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def acquire(self) -> None:
        with self._lock:
            if self.held:
                return
            self._released.clear()
            self._thread = threading.Thread(
                target=self._released.wait,
                daemon=False,
                name=self.name
            )
            self._thread.start()
            logger.debug(f"Execution lease acquired [{self.name}]")

    def release(self) -> None:
        with self._lock:
            if self._thread is None:
                return
            self._released.set()
            self._thread.join(timeout=1.0)
            self._thread = None
            logger.debug(f"Execution lease released [{self.name}]")
