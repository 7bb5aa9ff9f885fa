"""Read-only local HTTP server for store files."""

from fileserver.file_server import LocalFileServer, ServerState
from fileserver.lease import ExecutionLease, KeepAliveLease

__all__ = [
    "LocalFileServer",
    "ServerState",
    "ExecutionLease",
    "KeepAliveLease",
]
