"""Pure HTTP response builders."""

from oneshot_http.domain.http_types import HeaderMap, OutgoingResponse

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"
# Latin-1 maps every byte to one code point, so echoed text round-trips exactly.
TEXT_ENCODING = "iso-8859-1"


def accepts_gzip(headers: HeaderMap) -> bool:
    """Return True when the literal token gzip appears in Accept-Encoding."""
    return "gzip" in headers.get("accept-encoding", "")


def empty_response() -> OutgoingResponse:
    """Return a 200 OK response with no body."""
    return OutgoingResponse("200 OK")


def text_response(message: str) -> OutgoingResponse:
    """Return a text/plain 200 response."""
    return OutgoingResponse("200 OK", TEXT_PLAIN, message.encode(TEXT_ENCODING))


def octet_response(payload: bytes) -> OutgoingResponse:
    """Return raw file contents as application/octet-stream."""
    return OutgoingResponse("200 OK", OCTET_STREAM, payload)


def created_response() -> OutgoingResponse:
    """Return a 201 response acknowledging a stored file."""
    return OutgoingResponse("201 Created")


def bad_request_response() -> OutgoingResponse:
    """Return a 400 response for an unusable request body framing."""
    return OutgoingResponse("400 Bad Request")


def forbidden_response() -> OutgoingResponse:
    """Return a 403 response for paths escaping the sandbox."""
    return OutgoingResponse("403 Forbidden")


def not_found_response() -> OutgoingResponse:
    """Return a 404 response."""
    return OutgoingResponse("404 Not Found")


def method_not_allowed_response() -> OutgoingResponse:
    """Return a 405 response for methods outside GET and POST."""
    return OutgoingResponse("405 Method Not Allowed")


def entity_too_large_response() -> OutgoingResponse:
    """Return a 413 response for bodies past the configured limit."""
    return OutgoingResponse("413 Payload Too Large")


def head_too_large_response() -> OutgoingResponse:
    """Return a 431 response for heads past the configured limit."""
    return OutgoingResponse("431 Request Header Fields Too Large")


def internal_error_response() -> OutgoingResponse:
    """Return a 500 response."""
    return OutgoingResponse("500 Internal Server Error")
