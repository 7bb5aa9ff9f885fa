"""Manages package files in the store directory: listing, rename, delete, inbox adoption."""

import os
import shutil
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from common.constants import (
    INBOX_DIRNAME,
    MANAGED_EXTENSION,
    MAX_COLLISION_SUFFIX,
    RANDOM_SUFFIX_ATTEMPTS,
    RANDOM_SUFFIX_LENGTH,
)
from common.exceptions import NotFoundError, StorageFaultError
from common.logging_config import get_logger
from common.utils import format_file_size, natural_sort_key

logger = get_logger(__name__)


@dataclass(frozen=True)
class ManagedFile:
    """
    One package file in the store.

    Equality and hashing use the name only; size_display is a snapshot
    taken when the store was listed.
    """
    name: str
    size_display: str = field(default="", compare=False)


class LocalFileStore:
    """
    Owns a single directory of package files.

    Names are unique within the store: files arriving in the inbox are
    renamed on adoption when their name is already taken.
    """

    def __init__(
        self,
        root: Union[str, Path],
        inbox: Optional[Union[str, Path]] = None,
        extension: str = MANAGED_EXTENSION,
    ):
        """
        Initialize the store and create its root directory.

        Args:
            root: Store root directory
            inbox: Staging directory drained on every listing (default: root/Inbox)
            extension: Managed file extension, matched case-sensitively

        Raises:
            StorageFaultError: If the root directory cannot be created
        """
        self.root = Path(root).expanduser()
        self.inbox = Path(inbox).expanduser() if inbox is not None else self.root / INBOX_DIRNAME
        self.extension = extension

        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageFaultError(f"Cannot create store root {self.root}: {e}") from e

    def resolve_path(self, name: str) -> Path:
        """Join name onto the store root without checking existence."""
        return self.root / name

    def resolve_contained(self, name: str) -> Path:
        """
        Resolve a client-supplied name to a regular file directly inside the root.

        Args:
            name: Single path segment requested by a client

        Returns:
            Resolved absolute path of the file

        Raises:
            NotFoundError: If the name is not a plain segment, escapes the
                root after resolution, or does not name a regular file
        """
        if not _is_plain_name(name):
            raise NotFoundError(f"Invalid file name: {name!r}")

        root = self.root.resolve()
        try:
            candidate = (root / name).resolve()
        except (OSError, RuntimeError) as e:
            raise NotFoundError(f"Cannot resolve {name!r}: {e}") from e

        if candidate.parent != root:
            raise NotFoundError(f"Path escapes store root: {name!r}")
        if not candidate.is_file():
            raise NotFoundError(f"No such file: {name!r}")
        return candidate

    def size(self, name: str) -> str:
        """
        Get the human-readable size of a stored file.

        Returns:
            Formatted size, or "" if the file is missing or unreadable
        """
        try:
            return format_file_size(self.resolve_path(name).stat().st_size)
        except OSError:
            return ""

    def list(self) -> List[ManagedFile]:
        """
        List managed files after adopting anything waiting in the inbox.

        Returns:
            Files sorted by name in natural, case-insensitive order
        """
        self.adopt_inbox(self.inbox)

        try:
            entries = list(self.root.iterdir())
        except OSError as e:
            logger.error(f"Cannot enumerate store root {self.root}: {e}")
            return []

        seen = set()
        result = []
        for entry in entries:
            if entry.suffix != self.extension or not entry.is_file():
                continue
            if entry.name in seen:
                continue
            seen.add(entry.name)
            result.append(ManagedFile(name=entry.name, size_display=self.size(entry.name)))

        result.sort(key=lambda f: natural_sort_key(f.name))
        return result

    def rename(self, file: ManagedFile, new_name: str) -> None:
        """
        Rename a stored file within the root.

        Does nothing if the source file does not exist.

        Raises:
            StorageFaultError: If either name is not a plain file name inside
                the root, new_name is already taken, or the move itself fails
        """
        if not _is_plain_name(file.name):
            raise StorageFaultError(f"Invalid source name: {file.name!r}")

        source = self.resolve_path(file.name)
        if not source.exists():
            return

        if not _is_plain_name(new_name):
            raise StorageFaultError(f"Invalid target name: {new_name!r}")

        target = self.resolve_path(new_name)
        if target.exists():
            raise StorageFaultError(f"Cannot rename {file.name} to {new_name}: name already taken")

        try:
            source.rename(target)
        except OSError as e:
            raise StorageFaultError(f"Cannot rename {file.name} to {new_name}: {e}") from e

        logger.info(f"Renamed {file.name} -> {new_name}")

    def delete(self, file: ManagedFile) -> None:
        """
        Delete a stored file.

        Does nothing if the name is not a plain file name inside the root, the
        file is missing, or its directory denies deletion.

        Raises:
            StorageFaultError: If removal of a deletable file fails
        """
        if not _is_plain_name(file.name):
            logger.warning(f"Refusing to delete {file.name!r}: not a name inside the store")
            return

        path = self.resolve_path(file.name)
        if not self._is_deletable(path):
            return

        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageFaultError(f"Cannot delete {file.name}: {e}") from e

        logger.info(f"Deleted {file.name}")

    def adopt_inbox(self, inbox_root: Union[str, Path]) -> List[str]:
        """
        Move managed files from an inbox directory into the store.

        Colliding names get "_<n>" appended to their base name. A file that
        fails to move is logged and skipped; the rest are still adopted.

        Args:
            inbox_root: Directory to drain

        Returns:
            Names the adopted files received in the store
        """
        inbox_root = Path(inbox_root)
        if not inbox_root.is_dir():
            return []

        try:
            incoming = sorted(
                (p for p in inbox_root.iterdir() if p.suffix == self.extension and p.is_file()),
                key=lambda p: natural_sort_key(p.name),
            )
        except OSError as e:
            logger.warning(f"Cannot read inbox {inbox_root}: {e}")
            return []

        adopted = []
        for source in incoming:
            try:
                target = self._unique_target(source.name)
                shutil.move(str(source), str(target))
            except (OSError, StorageFaultError) as e:
                logger.warning(f"Failed to adopt {source.name} from inbox: {e}")
                continue
            adopted.append(target.name)
            logger.info(f"Adopted {source.name} from inbox as {target.name}")

        return adopted

    def _unique_target(self, name: str) -> Path:
        """
        Find a free path in the root for an incoming file name.

        Raises:
            StorageFaultError: If every numbered and random candidate is taken
        """
        target = self.resolve_path(name)
        if not target.exists():
            return target

        stem = Path(name).stem
        suffix = Path(name).suffix
        for i in range(1, MAX_COLLISION_SUFFIX + 1):
            target = self.resolve_path(f"{stem}_{i}{suffix}")
            if not target.exists():
                return target

        for _ in range(RANDOM_SUFFIX_ATTEMPTS):
            token = uuid.uuid4().hex[:RANDOM_SUFFIX_LENGTH]
            target = self.resolve_path(f"{stem}_{token}{suffix}")
            if not target.exists():
                return target

        raise StorageFaultError(f"No free name found for {name}")

    @staticmethod
    def _is_deletable(path: Path) -> bool:
        if not path.exists() and not path.is_symlink():
            return False
        return os.access(path.parent, os.W_OK | os.X_OK)


def _is_plain_name(name: str) -> bool:
    """True when name is a single path segment that cannot leave the directory it is joined to."""
    return bool(name) and name not in ('.', '..') and not any(c in name for c in ('/', '\\', '\x00'))
