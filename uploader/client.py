"""Starts uploads of store files to the remote service."""

from pathlib import Path
from typing import Callable, Dict, Optional, Union

import httpx

from common.constants import DEFAULT_UPLOAD_FIELD, DEFAULT_UPLOAD_TIMEOUT_SECONDS
from common.exceptions import NotFoundError
from common.logging_config import get_logger
from uploader.handle import HttpUploadHandle
from uploader.session import UploadSession

logger = get_logger(__name__)


class UploadClient:
    """HTTP client that wraps each started upload in an UploadSession. No retries."""

    def __init__(
        self,
        upload_url: str,
        field_name: str = DEFAULT_UPLOAD_FIELD,
        timeout: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize upload client.

        Args:
            upload_url: Endpoint accepting multipart uploads
            field_name: Form field carrying the file
            timeout: Per-operation network timeout in seconds
            headers: Extra headers sent with every upload
        """
        self.upload_url = upload_url
        self.field_name = field_name
        self.headers = headers or {}
        self.session = httpx.Client(timeout=timeout)
        logger.info(f"Initialized UploadClient [upload_url={upload_url}]")

    def create_handle(
        self,
        file_path: Union[str, Path],
        fields: Optional[Dict[str, str]] = None,
    ) -> HttpUploadHandle:
        """
        Build a handle for one file without starting it.

        Raises:
            NotFoundError: If the file does not exist
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise NotFoundError(f"Cannot upload missing file: {file_path.name}")
        return HttpUploadHandle(
            self.session,
            self.upload_url,
            file_path,
            field_name=self.field_name,
            fields=fields,
            headers=self.headers
        )

    def start_upload(
        self,
        file_path: Union[str, Path],
        fields: Optional[Dict[str, str]] = None,
        attach: Optional[Callable[[UploadSession], None]] = None,
    ) -> UploadSession:
        """
        Start uploading a file and return the session controlling it.

        Args:
            file_path: File to upload
            fields: Extra form fields sent alongside the file
            attach: Called with the session before the transfer starts, so
                observers registered there see even an instant completion

        Returns:
            UploadSession controlling the transfer

        Raises:
            NotFoundError: If the file does not exist
        """
        handle = self.create_handle(file_path, fields)
        session = UploadSession(handle)
        if attach is not None:
            attach(session)
        handle.start()
        return session

    def close(self) -> None:
        self.session.close()
