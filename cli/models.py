"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class ListCommand:
    """List packages in the store."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class RenameCommand:
    """Rename a package."""

    name: str
    new_name: str
    command: Literal["rename"] = "rename"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a package."""

    name: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class InfoCommand:
    """Show package metadata."""

    name: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class UrlCommand:
    """Show the local server URL of a package."""

    name: str
    command: Literal["url"] = "url"


@dataclass(frozen=True)
class ServeCommand:
    """Start the local file server."""

    command: Literal["serve"] = "serve"


@dataclass(frozen=True)
class StopServerCommand:
    """Stop the local file server."""

    command: Literal["stop-server"] = "stop-server"


@dataclass(frozen=True)
class EndpointCommand:
    """Set the remote upload endpoint."""

    url: str
    command: Literal["endpoint"] = "endpoint"


@dataclass(frozen=True)
class UploadCommand:
    """Upload a package to the remote endpoint."""

    name: str
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class UploadControlCommand:
    """Pause, resume or cancel the current upload."""

    action: Literal["pause", "resume", "cancel"]


@dataclass(frozen=True)
class StatusCommand:
    """Show server and upload status."""

    command: Literal["status"] = "status"


CommandRequest = (
    ListCommand
    | RenameCommand
    | DeleteCommand
    | InfoCommand
    | UrlCommand
    | ServeCommand
    | StopServerCommand
    | EndpointCommand
    | UploadCommand
    | UploadControlCommand
    | StatusCommand
)
