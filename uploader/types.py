"""Upload data type definitions (UploadState, TransferProgress, UploadOutcome)."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class UploadState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadState.COMPLETED, UploadState.CANCELLED)


@dataclass(frozen=True)
class TransferProgress:
    """
    Latest progress of an upload.
    """
    fraction_complete: float
    bytes_sent: int
    bytes_total: int

    @classmethod
    def from_counts(cls, bytes_sent: int, bytes_total: int) -> 'TransferProgress':
        if bytes_total > 0:
            fraction = min(max(bytes_sent / bytes_total, 0.0), 1.0)
        else:
            fraction = 0.0
        return cls(fraction_complete=fraction, bytes_sent=bytes_sent, bytes_total=bytes_total)


@dataclass(frozen=True)
class UploadOutcome:
    """
    Terminal result reported by an upload handle.

    The session does not interpret it: a transport error and an HTTP error
    status both arrive here and are the caller's to classify.
    """
    status_code: Optional[int] = None
    payload: Optional[Any] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300
