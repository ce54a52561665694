"""File read and write handlers for /files/<name>."""

from pathlib import Path

from oneshot_http.bootstrap.config import FILES_ENDPOINT_PREFIX
from oneshot_http.domain.connection_id import get_logger
from oneshot_http.domain.errors import FileIOError, FileNotFound
from oneshot_http.domain.http_types import OutgoingResponse, RawRequest
from oneshot_http.domain.response_builders import (
    bad_request_response,
    created_response,
    forbidden_response,
    internal_error_response,
    not_found_response,
    octet_response,
)
from oneshot_http.domain.sandbox import ForbiddenPath, resolve_sandbox_path

FILE_LOGGER = get_logger("handlers.file")


def read_file(filepath: Path) -> bytes:
    """Return a regular file's bytes, mapping OS errors onto FileNotFound/FileIOError."""
    try:
        if not filepath.is_file():
            raise FileNotFound(filepath.as_posix())
        return filepath.read_bytes()
    except FileNotFoundError as exc:
        raise FileNotFound(filepath.as_posix()) from exc
    except OSError as exc:
        raise FileIOError(f"{filepath.as_posix()}: {exc}") from exc


def write_file(filepath: Path, payload: bytes) -> None:
    """Replace a file's contents, creating parent directories inside the sandbox."""
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "wb") as file_handle:
            file_handle.write(payload)
    except OSError as exc:
        raise FileIOError(f"{filepath.as_posix()}: {exc}") from exc


def _serve_file(resolved_path: Path) -> OutgoingResponse:
    try:
        payload = read_file(resolved_path)
    except FileNotFound:
        FILE_LOGGER.info(
            "File not found",
            extra={"event": "file_not_found", "path": resolved_path.as_posix()},
        )
        return not_found_response()
    except FileIOError as error:
        FILE_LOGGER.error(
            "File read failed",
            extra={"event": "file_read_failed", "error": str(error)},
        )
        return internal_error_response()
    FILE_LOGGER.info(
        "File read operation complete",
        extra={
            "event": "file_read_complete",
            "path": resolved_path.as_posix(),
            "bytes_out": len(payload),
        },
    )
    return octet_response(payload)


def _store_file(request: RawRequest, resolved_path: Path) -> OutgoingResponse:
    if request.content_length is None:
        FILE_LOGGER.warning(
            "File upload without Content-Length",
            extra={"event": "content_length_missing", "path": resolved_path.as_posix()},
        )
        return bad_request_response()
    try:
        write_file(resolved_path, request.body)
    except FileIOError as error:
        FILE_LOGGER.error(
            "File write failed",
            extra={"event": "file_write_failed", "error": str(error)},
        )
        return internal_error_response()
    FILE_LOGGER.info(
        "File write complete",
        extra={
            "event": "file_write_complete",
            "path": resolved_path.as_posix(),
            "bytes_in": len(request.body),
        },
    )
    return created_response()


def file_response(request: RawRequest, directory: str) -> OutgoingResponse:
    """Serve the file on GET and store the request body on POST."""
    filename = request.path[len(FILES_ENDPOINT_PREFIX) :]
    try:
        resolved_path = resolve_sandbox_path(directory, filename)
    except ForbiddenPath as error:
        FILE_LOGGER.warning(
            "Forbidden path access blocked",
            extra={
                "event": "forbidden_path",
                "path": filename,
                "method": request.method,
                "error": str(error),
            },
        )
        return forbidden_response()

    if request.method == "GET":
        return _serve_file(resolved_path)
    return _store_file(request, resolved_path)
