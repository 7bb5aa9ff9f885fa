"""Package file store and archive metadata extraction."""

from filestore.file_store import LocalFileStore, ManagedFile
from filestore.metadata_extractor import ArchiveMetadataExtractor

__all__ = [
    "LocalFileStore",
    "ManagedFile",
    "ArchiveMetadataExtractor",
]
