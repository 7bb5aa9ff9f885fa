"""Extracts Info.plist from a package archive and returns it as base64-encoded JSON."""

import base64
import json
import plistlib
import shutil
import tempfile
import zipfile
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict
from xml.parsers.expat import ExpatError

from common.constants import (
    BUNDLE_EXTENSION,
    METADATA_FILENAME,
    PAYLOAD_DIRNAME,
    SCRATCH_DIR_PREFIX,
)
from common.exceptions import (
    MalformedArchiveError,
    MissingMetadataError,
    NotFoundError,
    StorageFaultError,
    UnreadableMetadataError,
)
from common.logging_config import get_logger
from filestore.file_store import LocalFileStore, ManagedFile

logger = get_logger(__name__)

_SYMLINK_MODE = 0o120000
_FILE_TYPE_MASK = 0o170000


class ArchiveMetadataExtractor:
    """
    Reads the metadata descriptor of the application bundle inside a package.

    Every call unpacks into a fresh scratch directory under the store root
    and removes it before returning, whether extraction succeeded or not.
    """

    def __init__(self, store: LocalFileStore):
        self.store = store

    def extract_metadata(self, file: ManagedFile) -> str:
        """
        Extract the bundle's Info.plist as base64-encoded, pretty-printed JSON.

        Args:
            file: Package file held by the store

        Returns:
            Base64 text of the UTF-8 JSON document

        Raises:
            NotFoundError: If the package file does not exist
            MalformedArchiveError: If the archive is not a zip or lacks Payload/<name>.app
            MissingMetadataError: If the bundle has no Info.plist
            UnreadableMetadataError: If Info.plist cannot be parsed into a dictionary
            StorageFaultError: If the scratch directory cannot be created
        """
        metadata = self.extract_metadata_dict(file)
        json_text = json.dumps(metadata, indent=2, ensure_ascii=False, default=_json_default)
        return base64.b64encode(json_text.encode('utf-8')).decode('ascii')

    def extract_metadata_dict(self, file: ManagedFile) -> Dict[str, Any]:
        """
        Extract the bundle's Info.plist as a dictionary in document key order.

        Raises the same errors as extract_metadata().
        """
        try:
            archive_path = self.store.resolve_contained(file.name)
        except NotFoundError as e:
            raise NotFoundError(f"Package not found: {file.name}") from e

        try:
            scratch = Path(tempfile.mkdtemp(prefix=SCRATCH_DIR_PREFIX, dir=self.store.root))
        except OSError as e:
            raise StorageFaultError(f"Cannot create scratch directory: {e}") from e

        logger.debug(f"Extracting {file.name} into {scratch.name}")
        try:
            _safe_extract(archive_path, scratch)
            bundle = _find_bundle(scratch / PAYLOAD_DIRNAME)
            return _read_descriptor(bundle / METADATA_FILENAME)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)


def _safe_extract(archive_path: Path, destination: Path) -> None:
    """Extract a zip archive, refusing entries that would land outside destination."""
    destination_root = destination.resolve()
    try:
        with zipfile.ZipFile(archive_path, 'r') as archive:
            for entry in archive.infolist():
                name = entry.filename.replace('\\', '/')
                if not name:
                    continue
                pure = PurePosixPath(name)
                if pure.is_absolute() or '..' in pure.parts:
                    raise MalformedArchiveError(f"Unsafe archive entry: {name}")
                if (entry.external_attr >> 16) & _FILE_TYPE_MASK == _SYMLINK_MODE:
                    raise MalformedArchiveError(f"Archive contains symlink entry: {name}")

                target = (destination / pure.as_posix()).resolve()
                if destination_root not in (target, *target.parents):
                    raise MalformedArchiveError(f"Archive entry escapes extraction directory: {name}")

                if entry.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(entry, 'r') as source, target.open('wb') as handle:
                    shutil.copyfileobj(source, handle)
    except zipfile.BadZipFile as e:
        raise MalformedArchiveError(f"Not a valid zip archive: {e}") from e
    except (NotADirectoryError, IsADirectoryError, FileExistsError) as e:
        raise MalformedArchiveError(f"Archive entries clash: {e}") from e
    except OSError as e:
        raise StorageFaultError(f"Cannot unpack archive: {e}") from e


def _find_bundle(payload: Path) -> Path:
    if not payload.is_dir():
        raise MalformedArchiveError(f"Archive has no {PAYLOAD_DIRNAME} directory")

    bundles = [p for p in payload.iterdir() if p.suffix == BUNDLE_EXTENSION and p.is_dir()]
    if not bundles:
        raise MalformedArchiveError(f"No {BUNDLE_EXTENSION} bundle in {PAYLOAD_DIRNAME}")
    if len(bundles) > 1:
        names = ', '.join(sorted(p.name for p in bundles))
        raise MalformedArchiveError(f"Ambiguous bundles in {PAYLOAD_DIRNAME}: {names}")
    return bundles[0]


def _read_descriptor(descriptor: Path) -> Dict[str, Any]:
    if not descriptor.is_file():
        raise MissingMetadataError(f"{descriptor.parent.name} has no {METADATA_FILENAME}")

    try:
        with descriptor.open('rb') as f:
            data = plistlib.load(f)
    except (plistlib.InvalidFileException, ExpatError, ValueError, TypeError, OverflowError, OSError) as e:
        raise UnreadableMetadataError(f"Cannot parse {METADATA_FILENAME}: {e}") from e

    if not isinstance(data, dict):
        raise UnreadableMetadataError(f"{METADATA_FILENAME} is not a dictionary")
    return data


def _json_default(value: Any) -> Any:
    """Convert plist-only value types to JSON-compatible ones."""
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode('ascii')
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, plistlib.UID):
        return value.data
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
