"""Upload handle contract and an httpx-backed implementation."""

import os
import threading
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Optional, Protocol, Union

import httpx

from common.constants import DEFAULT_UPLOAD_FIELD, STREAM_PIECE_SIZE
from common.logging_config import get_logger
from uploader.types import UploadOutcome

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]
CompletionCallback = Callable[[UploadOutcome], None]


class UploadHandle(Protocol):
    """An in-flight network upload that can be observed and controlled."""

    def on_progress(self, callback: ProgressCallback) -> None:
        ...

    def on_completion(self, callback: CompletionCallback) -> None:
        ...

    def suspend(self) -> None:
        ...

    def resume(self) -> None:
        ...

    def cancel(self) -> None:
        ...


class UploadCancelled(Exception):
    """Raised inside the request body stream to abort a cancelled upload."""
    pass


class ProgressFileReader:
    """File-like reader that reports progress and honours suspend/cancel between pieces."""

    def __init__(
        self,
        file_path: Union[str, Path],
        on_read: ProgressCallback,
        gate: threading.Event,
        cancelled: threading.Event,
    ):
        """
        Open the file to upload.

        Args:
            file_path: File to read
            on_read: Called with (bytes_sent, bytes_total) after every piece
            gate: Cleared while the upload is suspended
            cancelled: Set once the upload is cancelled

        Raises:
            OSError: If the file cannot be opened
        """
        self._file: BinaryIO = open(file_path, 'rb')
        self.file_size = os.fstat(self._file.fileno()).st_size
        self._on_read = on_read
        self._gate = gate
        self._cancelled = cancelled
        self._sent = 0

    def read(self, size: int = -1) -> bytes:
        self._gate.wait()
        if self._cancelled.is_set():
            raise UploadCancelled()

        piece = self._file.read(size if size > 0 else STREAM_PIECE_SIZE)
        if piece:
            self._sent += len(piece)
            self._on_read(self._sent, self.file_size)
        return piece

    def close(self) -> None:
        if self._file:
            self._file.close()

    def __enter__(self) -> 'ProgressFileReader':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class HttpUploadHandle:
    """
    Posts one file as multipart form data from a worker thread.

    Progress is reported per piece read from disk. Suspending blocks the
    worker before its next piece; cancelling aborts the request body and
    suppresses the completion signal. Transport and file errors are
    delivered through the completion signal as UploadOutcome.error.
    """

    def __init__(
        self,
        client: httpx.Client,
        url: str,
        file_path: Union[str, Path],
        field_name: str = DEFAULT_UPLOAD_FIELD,
        fields: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.client = client
        self.url = url
        self.file_path = Path(file_path)
        self.field_name = field_name
        self.fields = fields or {}
        self.headers = headers or {}

        self._progress_callback: Optional[ProgressCallback] = None
        self._completion_callback: Optional[CompletionCallback] = None
        self._gate = threading.Event()
        self._gate.set()
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def on_progress(self, callback: ProgressCallback) -> None:
        self._progress_callback = callback

    def on_completion(self, callback: CompletionCallback) -> None:
        self._completion_callback = callback

    def start(self) -> None:
        """Start the transfer on a daemon worker thread (once)."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name=f"Upload-{self.file_path.name}"
        )
        self._thread.start()

    def suspend(self) -> None:
        self._gate.clear()
        logger.debug(f"Upload suspended: {self.file_path.name}")

    def resume(self) -> None:
        self._gate.set()
        logger.debug(f"Upload resumed: {self.file_path.name}")

    def cancel(self) -> None:
        self._cancelled.set()
        self._gate.set()
        logger.info(f"Upload cancelled: {self.file_path.name}")

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        logger.info(f"Upload started: {self.file_path.name} -> {self.url}")
        try:
            with ProgressFileReader(self.file_path, self._emit_progress, self._gate, self._cancelled) as reader:
                response = self.client.post(
                    self.url,
                    data=self.fields,
                    files={self.field_name: (self.file_path.name, reader, 'application/octet-stream')},
                    headers=self.headers
                )
        except UploadCancelled:
            return
        except (httpx.HTTPError, OSError) as e:
            logger.warning(f"Upload failed: {self.file_path.name} error={e}")
            outcome = UploadOutcome(error=e)
        else:
            logger.info(f"Upload finished: {self.file_path.name} status={response.status_code}")
            outcome = UploadOutcome(status_code=response.status_code, payload=_parse_payload(response))

        if self._cancelled.is_set():
            return
        if self._completion_callback is not None:
            self._completion_callback(outcome)

    def _emit_progress(self, bytes_sent: int, bytes_total: int) -> None:
        if self._progress_callback is not None and not self._cancelled.is_set():
            self._progress_callback(bytes_sent, bytes_total)


def _parse_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None
