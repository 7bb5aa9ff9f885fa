"""FastAPI application serving store files by name."""

import os
import time
import uuid
from typing import BinaryIO, Iterator

from fastapi import FastAPI, Request, status
from fastapi.responses import Response, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.constants import STREAM_PIECE_SIZE
from common.exceptions import NotFoundError
from common.logging_config import get_logger
from filestore.file_store import LocalFileStore

logger = get_logger(__name__)


def _stream_file(handle: BinaryIO, piece_size: int = STREAM_PIECE_SIZE) -> Iterator[bytes]:
    """
    Stream an already-open file in pieces and close it when done.

    Args:
        handle: Binary file object opened by the route
        piece_size: Size of each piece in bytes (default 64KB)

    Yields:
        File data pieces
    """
    with handle:
        while True:
            piece = handle.read(piece_size)
            if not piece:
                break
            yield piece


def create_app(store: LocalFileStore) -> FastAPI:
    """
    Build the read-only file server application for a store.

    Args:
        store: Store whose root is served

    Returns:
        FastAPI app with a single GET /{name} route
    """
    app = FastAPI(
        title="ipadrop local file server",
        docs_url=None,
        redoc_url=None,
        openapi_url=None
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(f"Not found: {exc} [request_id={request_id}] path={request.url.path}")
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unmatched paths (e.g. several segments) get the same empty body
        return Response(status_code=exc.status_code)

    @app.get("/{name}")
    def serve_file(name: str):
        """
        Return the raw bytes of storeRoot/name.

        Raises:
            - 404: Missing file, or a name resolving outside the store root
        """
        path = store.resolve_contained(name)
        try:
            handle = open(path, 'rb')
        except OSError as e:
            raise NotFoundError(f"Cannot open {name!r}: {e}") from e

        size = os.fstat(handle.fileno()).st_size
        return StreamingResponse(
            _stream_file(handle),
            media_type="application/octet-stream",
            headers={"Content-Length": str(size)}
        )

    return app
