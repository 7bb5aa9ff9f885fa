"""Pausable, cancellable uploads of package files."""

from uploader.client import UploadClient
from uploader.handle import HttpUploadHandle, UploadHandle
from uploader.session import UploadSession
from uploader.types import TransferProgress, UploadOutcome, UploadState

__all__ = [
    "UploadClient",
    "HttpUploadHandle",
    "UploadHandle",
    "UploadSession",
    "TransferProgress",
    "UploadOutcome",
    "UploadState",
]
