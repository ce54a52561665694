"""Handlers for the root, echo and user-agent routes."""

import logging

from oneshot_http.bootstrap.config import ECHO_ENDPOINT_PREFIX
from oneshot_http.domain.connection_id import get_logger
from oneshot_http.domain.http_types import OutgoingResponse, RawRequest
from oneshot_http.domain.response_builders import empty_response, text_response

SYSTEM_LOGGER = get_logger("handlers.system")


def handle_root(_request: RawRequest) -> OutgoingResponse:
    """Handle / with an empty 200."""
    return empty_response()


def handle_echo(request: RawRequest) -> OutgoingResponse:
    """Handle /echo/ requests by returning the path suffix."""
    content = request.path[len(ECHO_ENDPOINT_PREFIX) :]
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "content_length": len(content)},
        )
    return text_response(content)


def handle_user_agent(request: RawRequest) -> OutgoingResponse:
    """Handle /user-agent requests by returning the User-Agent header."""
    agent = request.headers["user-agent"]
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "User-agent request processed", extra={"event": "user_agent_request"}
        )
    return text_response(agent)
