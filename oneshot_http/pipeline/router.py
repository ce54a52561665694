"""Request routing logic."""

import logging

from oneshot_http.bootstrap.config import ECHO_ENDPOINT_PREFIX, FILES_ENDPOINT_PREFIX
from oneshot_http.domain.connection_id import get_logger
from oneshot_http.domain.http_types import OutgoingResponse, RawRequest
from oneshot_http.domain.response_builders import (
    method_not_allowed_response,
    not_found_response,
)
from oneshot_http.handlers.file_handler import file_response
from oneshot_http.handlers.system_handlers import (
    handle_echo,
    handle_root,
    handle_user_agent,
)

ROUTER_LOGGER = get_logger("pipeline.router")


def _matched(route: str) -> None:
    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched", extra={"event": "route_matched", "route": route}
        )


def _not_found(request: RawRequest) -> OutgoingResponse:
    ROUTER_LOGGER.info(
        "No matching route found",
        extra={
            "event": "route_not_found",
            "route": request.path,
            "method": request.method,
        },
    )
    return not_found_response()


def route_request(request: RawRequest, directory: str) -> OutgoingResponse:
    """Map (method, path) onto a handler and return its response.

    GET serves every route, POST only /files/; other methods get 405. File
    routes answer 404 while no base directory is configured.
    """
    if request.method not in ("GET", "POST"):
        ROUTER_LOGGER.info(
            "Method not allowed",
            extra={"event": "method_not_allowed", "method": request.method},
        )
        return method_not_allowed_response()

    if request.path.startswith(FILES_ENDPOINT_PREFIX):
        if not directory:
            return _not_found(request)
        _matched("/files/*")
        return file_response(request, directory)

    if request.method == "POST":
        return _not_found(request)

    if request.path == "/":
        _matched("/")
        return handle_root(request)
    if request.path.startswith(ECHO_ENDPOINT_PREFIX):
        _matched("/echo/*")
        return handle_echo(request)
    if request.path == "/user-agent":
        _matched("/user-agent")
        return handle_user_agent(request)
    return _not_found(request)
