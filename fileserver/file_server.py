"""Local HTTP server exposing store files on a fixed loopback port."""

import socket
import threading
import time
from enum import Enum
from typing import Callable, Optional
from urllib.parse import quote

import uvicorn

from common.constants import (
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    SERVER_START_TIMEOUT_SECONDS,
    SERVER_STOP_TIMEOUT_SECONDS,
)
from common.exceptions import BindFaultError
from common.logging_config import get_logger
from fileserver.lease import ExecutionLease, KeepAliveLease
from fileserver.routes import create_app
from filestore.file_store import LocalFileStore, ManagedFile

logger = get_logger(__name__)


class ServerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class LocalFileServer:
    """
    Serves the store root read-only over HTTP while holding an execution lease.

    The uvicorn event loop runs on a daemon thread; start() and stop() only
    wait for it within bounded timeouts.
    """

    def __init__(
        self,
        store: LocalFileStore,
        host: str = DEFAULT_SERVER_HOST,
        port: int = DEFAULT_SERVER_PORT,
        lease_factory: Callable[[], ExecutionLease] = KeepAliveLease,
    ):
        """
        Initialize the server in the STOPPED state.

        Args:
            store: Store whose files are served
            host: Interface to bind (loopback by default)
            port: Fixed TCP port; 0 picks a free port (see bound_port)
            lease_factory: Builds the execution lease acquired on start
        """
        self.store = store
        self.host = host
        self.port = port
        self.lease_factory = lease_factory
        self.state = ServerState.STOPPED

        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._lease: Optional[ExecutionLease] = None

    @property
    def is_running(self) -> bool:
        return self.state == ServerState.RUNNING

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually bound while running, None when stopped."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    def url_for(self, file: ManagedFile) -> str:
        """
        Build the loopback URL for a file; the server need not be running.

        Uses the bound port while running, so port 0 yields a reachable URL.
        """
        port = self.bound_port if self.is_running else self.port
        return f"http://{DEFAULT_SERVER_HOST}:{port}/{quote(file.name)}"

    def start(self) -> None:
        """
        Bind the port, start serving and acquire the execution lease.

        Raises:
            BindFaultError: If the port cannot be bound or the server does not
                come up; the server is left STOPPED with nothing held
        """
        if self.is_running:
            logger.warning("File server already running, ignoring start()")
            return

        try:
            self._socket = self._bind_socket()
            self._server = uvicorn.Server(uvicorn.Config(
                create_app(self.store),
                log_config=None,
                lifespan="off",
                access_log=False
            ))
            self._thread = threading.Thread(
                target=self._server.run,
                kwargs={"sockets": [self._socket]},
                daemon=True,
                name="LocalFileServer"
            )
            self._thread.start()
            self._wait_until_started()

            self._lease = self.lease_factory()
            self._lease.acquire()
        except BindFaultError:
            self._teardown()
            raise
        except Exception as e:
            logger.error(f"File server failed to start: {e}", exc_info=True)
            self._teardown()
            raise BindFaultError(f"File server failed to start: {e}") from e

        self.state = ServerState.RUNNING
        logger.info(f"File server started on {self.host}:{self.bound_port} serving {self.store.root}")

    def stop(self) -> None:
        """Stop serving and release the lease. No-op when already stopped."""
        if not self.is_running:
            return
        self._teardown()
        logger.info("File server stopped")

    def _bind_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.listen(128)
            sock.set_inheritable(True)
        except OSError as e:
            sock.close()
            logger.error(f"Cannot bind {self.host}:{self.port}: {e}")
            raise BindFaultError(f"Cannot bind {self.host}:{self.port}: {e}") from e
        return sock

    def _wait_until_started(self) -> None:
        deadline = time.monotonic() + SERVER_START_TIMEOUT_SECONDS
        while not self._server.started:
            if not self._thread.is_alive():
                raise BindFaultError("File server thread exited during startup")
            if time.monotonic() > deadline:
                raise BindFaultError("File server did not start in time")
            time.sleep(0.01)

    def _teardown(self) -> None:
        """Release whatever start() acquired, in reverse order."""
        if self._lease is not None:
            self._lease.release()
            self._lease = None

        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=SERVER_STOP_TIMEOUT_SECONDS)
            if self._thread.is_alive():
                logger.warning("File server thread did not exit in time")
        self._server = None
        self._thread = None

        if self._socket is not None:
            self._socket.close()
            self._socket = None

        self.state = ServerState.STOPPED
