"""Command handler functions for CLI operations."""

import base64
import binascii
from pathlib import Path
from typing import Optional

from common.exceptions import (
    BindFaultError,
    MalformedArchiveError,
    MissingMetadataError,
    NotFoundError,
    StorageFaultError,
    TransferException,
    UnreadableMetadataError,
)
from common.logging_config import get_logger
from cli.config import Config
from cli.models import (
    DeleteCommand,
    EndpointCommand,
    InfoCommand,
    ListCommand,
    RenameCommand,
    ServeCommand,
    StatusCommand,
    StopServerCommand,
    UploadCommand,
    UploadControlCommand,
    UrlCommand,
)
from cli.utils import ProgressPrinter
from fileserver.file_server import LocalFileServer
from filestore.file_store import LocalFileStore, ManagedFile
from filestore.metadata_extractor import ArchiveMetadataExtractor
from uploader.client import UploadClient
from uploader.session import UploadSession

logger = get_logger(__name__)


class Workspace:
    """Store, server and upload state shared by the REPL commands."""

    def __init__(self, config: Config, store: Optional[LocalFileStore] = None):
        self.config = config
        self.store = store or LocalFileStore(config.get_store_path(), config.get_inbox_path())
        self.extractor = ArchiveMetadataExtractor(self.store)
        host, port = config.get_server_address()
        self.server = LocalFileServer(self.store, host=host, port=port)
        self.upload_session: Optional[UploadSession] = None
        self._upload_client: Optional[UploadClient] = None

    def get_upload_client(self) -> UploadClient:
        """
        Get or create the upload client for the configured endpoint.

        Raises:
            ValueError: If no upload endpoint is configured
        """
        url = self.config.get_upload_url()
        if not url:
            raise ValueError("No upload endpoint configured. Please run: endpoint <url>")
        if self._upload_client is None or self._upload_client.upload_url != url:
            if self._upload_client is not None:
                self._upload_client.close()
            self._upload_client = UploadClient(
                url,
                field_name=self.config.get_upload_field(),
                timeout=self.config.get_timeout()
            )
        return self._upload_client

    def close(self) -> None:
        """Stop the server and cancel any running upload."""
        if self.upload_session is not None:
            self.upload_session.stop()
        self.server.stop()
        if self._upload_client is not None:
            self._upload_client.close()


_workspace: Optional[Workspace] = None


def get_workspace() -> Workspace:
    """
    Get or create global Workspace instance.

    Returns:
        Workspace instance
    """
    global _workspace
    if _workspace is None:
        logger.debug("Creating new Workspace instance")
        config = Config(Path.home() / '.ipadrop' / 'config.json')
        _workspace = Workspace(config)
    return _workspace


def handle_list(cmd: ListCommand, workspace: Optional[Workspace] = None) -> str:
    """
    Handle 'list' command.

    Returns:
        Formatted list of packages
    """
    workspace = workspace or get_workspace()
    files = workspace.store.list()
    if not files:
        return "No packages in store."

    width = max(len(f.name) for f in files)
    lines = [f"{f.name.ljust(width)}  {f.size_display or '?'}" for f in files]
    return "\n".join(lines)


def handle_rename(cmd: RenameCommand, workspace: Optional[Workspace] = None) -> str:
    """
    Handle 'rename' command.

    Returns:
        Success or error message
    """
    workspace = workspace or get_workspace()
    try:
        workspace.store.resolve_contained(cmd.name)
    except NotFoundError:
        return f"No such package: {cmd.name}"
    try:
        workspace.store.rename(ManagedFile(name=cmd.name), cmd.new_name)
    except StorageFaultError as e:
        return f"Rename failed: {e}"
    return f"Renamed {cmd.name} -> {cmd.new_name}"


def handle_delete(cmd: DeleteCommand, workspace: Optional[Workspace] = None) -> str:
    """
    Handle 'delete' command.

    Returns:
        Success or error message
    """
    workspace = workspace or get_workspace()
    try:
        path = workspace.store.resolve_contained(cmd.name)
    except NotFoundError:
        return f"No such package: {cmd.name}"
    try:
        workspace.store.delete(ManagedFile(name=cmd.name))
    except StorageFaultError as e:
        return f"Delete failed: {e}"
    if path.exists():
        return f"Cannot delete {cmd.name}: permission denied"
    return f"Deleted {cmd.name}"


def handle_info(cmd: InfoCommand, workspace: Optional[Workspace] = None) -> str:
    """
    Handle 'info' command.

    Returns:
        Decoded metadata JSON or error message
    """
    workspace = workspace or get_workspace()
    try:
        encoded = workspace.extractor.extract_metadata(ManagedFile(name=cmd.name))
    except NotFoundError:
        return f"No such package: {cmd.name}"
    except MalformedArchiveError as e:
        return f"Not a valid package: {e}"
    except (MissingMetadataError, UnreadableMetadataError) as e:
        return f"Package metadata unavailable: {e}"
    except TransferException as e:
        logger.error(f"Metadata extraction failed for {cmd.name}: {e}", exc_info=True)
        return f"Metadata extraction failed: {e}"

    try:
        return base64.b64decode(encoded).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as e:
        return f"Metadata could not be decoded: {e}"


def handle_url(cmd: UrlCommand, workspace: Optional[Workspace] = None) -> str:
    workspace = workspace or get_workspace()
    url = workspace.server.url_for(ManagedFile(name=cmd.name))
    if not workspace.server.is_running:
        return f"{url} (server not running, use: serve)"
    return url


def handle_serve(cmd: ServeCommand, workspace: Optional[Workspace] = None) -> str:
    """
    Handle 'serve' command.

    Returns:
        Success or error message
    """
    workspace = workspace or get_workspace()
    if workspace.server.is_running:
        return "Server already running."
    try:
        workspace.server.start()
    except BindFaultError as e:
        return f"Server could not start: {e}"
    return f"Serving {workspace.store.root} on port {workspace.server.bound_port}"


def handle_stop_server(cmd: StopServerCommand, workspace: Optional[Workspace] = None) -> str:
    workspace = workspace or get_workspace()
    if not workspace.server.is_running:
        return "Server is not running."
    workspace.server.stop()
    return "Server stopped."


def handle_endpoint(cmd: EndpointCommand, workspace: Optional[Workspace] = None) -> str:
    workspace = workspace or get_workspace()
    workspace.config.set_upload_url(cmd.url)
    return f"Upload endpoint set to {cmd.url}"


def handle_upload(cmd: UploadCommand, workspace: Optional[Workspace] = None) -> str:
    """
    Handle 'upload' command.

    Starts the transfer in the background; progress is printed as it arrives.

    Returns:
        Success or error message
    """
    logger.info(f"Executing upload command: {cmd.name}")
    workspace = workspace or get_workspace()

    current = workspace.upload_session
    if current is not None and not current.state.is_terminal:
        return "An upload is already in progress. Use: cancel"

    try:
        client = workspace.get_upload_client()
        session = client.start_upload(
            workspace.store.resolve_contained(cmd.name),
            attach=ProgressPrinter(cmd.name).attach
        )
    except ValueError as e:
        return f"Error: {e}"
    except NotFoundError:
        return f"No such package: {cmd.name}"

    workspace.upload_session = session
    return f"Uploading {cmd.name}..."


def handle_upload_control(cmd: UploadControlCommand, workspace: Optional[Workspace] = None) -> str:
    """
    Handle 'pause', 'resume' and 'cancel' commands.

    Returns:
        Resulting upload state
    """
    workspace = workspace or get_workspace()
    session = workspace.upload_session
    if session is None:
        return "No upload in progress."

    if cmd.action == "pause":
        session.pause()
    elif cmd.action == "resume":
        session.resume()
    else:
        session.stop()
    return f"Upload {session.state.value}."


def handle_status(cmd: StatusCommand, workspace: Optional[Workspace] = None) -> str:
    workspace = workspace or get_workspace()
    if workspace.server.is_running:
        lines = [f"Server: running on port {workspace.server.bound_port}"]
    else:
        lines = ["Server: stopped"]

    session = workspace.upload_session
    if session is None:
        lines.append("Upload: none")
    else:
        lines.append(f"Upload: {session.state.value} - {session.last_cached_progress}")
    return "\n".join(lines)
