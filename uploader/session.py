"""Stateful adapter over one in-flight upload handle: progress, pause, resume, cancel."""

import threading
from typing import Callable, Optional

from common.constants import WAITING_PROGRESS_TEXT
from common.logging_config import get_logger
from common.utils import format_file_size
from uploader.handle import UploadHandle
from uploader.types import TransferProgress, UploadOutcome, UploadState

logger = get_logger(__name__)

PauseObserver = Callable[[], None]
ProgressObserver = Callable[[float, str], None]
CompletionObserver = Callable[[UploadOutcome], None]


def format_progress(progress: TransferProgress) -> str:
    """
    Format progress for display.

    Returns:
        Text such as "Uploading 1.00 MiB of 4.00 MiB (25%)"
    """
    sent = format_file_size(progress.bytes_sent)
    total = format_file_size(progress.bytes_total)
    percentage = int(progress.fraction_complete * 100)
    return f"Uploading {sent} of {total} ({percentage}%)"


class UploadSession:
    """
    Observes and controls one already-created upload handle.

    States: UPLOADING -> PAUSED -> UPLOADING, UPLOADING/PAUSED -> CANCELLED
    via stop(), UPLOADING -> COMPLETED when the handle completes.
    COMPLETED and CANCELLED are terminal: the handle is released and every
    later call or callback is ignored.

    Observers run synchronously on whichever thread the handle (or the
    caller of pause()) uses, outside the session lock. There is no
    dispatch queue between the handle and the observers.
    """

    def __init__(self, handle: Optional[UploadHandle]):
        self._lock = threading.RLock()
        self._handle = handle
        self._state = UploadState.UPLOADING if handle is not None else UploadState.IDLE
        self._last_progress: Optional[TransferProgress] = None
        self._last_fraction = 0.0
        self._last_text = WAITING_PROGRESS_TEXT

        self._on_pause: Optional[PauseObserver] = None
        self._on_progress: Optional[ProgressObserver] = None
        self._on_completion: Optional[CompletionObserver] = None

        if handle is not None:
            handle.on_progress(lambda sent, total: self._handle_progress(handle, sent, total))
            handle.on_completion(lambda outcome: self._handle_completion(handle, outcome))

    @property
    def state(self) -> UploadState:
        with self._lock:
            return self._state

    @property
    def is_paused(self) -> bool:
        return self.state == UploadState.PAUSED

    @property
    def last_cached_fraction(self) -> float:
        with self._lock:
            return self._last_fraction

    @property
    def last_cached_progress(self) -> str:
        with self._lock:
            return self._last_text

    @property
    def last_progress(self) -> Optional[TransferProgress]:
        with self._lock:
            return self._last_progress

    def set_pause_observer(self, observer: Optional[PauseObserver]) -> None:
        with self._lock:
            self._on_pause = observer

    def set_progress_observer(self, observer: Optional[ProgressObserver]) -> None:
        with self._lock:
            self._on_progress = observer

    def set_completion_observer(self, observer: Optional[CompletionObserver]) -> None:
        with self._lock:
            self._on_completion = observer

    def pause(self) -> None:
        with self._lock:
            if self._handle is None or self._state != UploadState.UPLOADING:
                return
            self._handle.suspend()
            self._state = UploadState.PAUSED
            observer = self._on_pause

        logger.info("Upload paused")
        if observer is not None:
            observer()

    def resume(self) -> None:
        with self._lock:
            if self._handle is None:
                return
            self._handle.resume()
            self._state = UploadState.UPLOADING

    def stop(self) -> None:
        with self._lock:
            handle = self._handle
            if handle is None:
                return
            self._handle = None
            self._state = UploadState.CANCELLED

        handle.cancel()
        logger.info("Upload session cancelled")

    def _handle_progress(self, source: UploadHandle, bytes_sent: int, bytes_total: int) -> None:
        with self._lock:
            if self._handle is not source:
                return
            progress = TransferProgress.from_counts(bytes_sent, bytes_total)
            text = format_progress(progress)
            self._last_progress = progress
            self._last_fraction = progress.fraction_complete
            self._last_text = text
            observer = self._on_progress

        if observer is not None:
            observer(progress.fraction_complete, text)

    def _handle_completion(self, source: UploadHandle, outcome: UploadOutcome) -> None:
        with self._lock:
            if self._handle is not source:
                return
            self._handle = None
            self._state = UploadState.COMPLETED
            observer = self._on_completion

        logger.info(f"Upload session completed [status={outcome.status_code}]")
        if observer is not None:
            observer(outcome)
