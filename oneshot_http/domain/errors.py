"""Exception taxonomy for connection handling and route failures."""


class OneshotHttpError(Exception):
    """Base class for every error raised while serving a connection."""


class ConnectionReadError(OneshotHttpError):
    """The socket failed, timed out or closed while a read was outstanding."""


class ConnectionWriteError(OneshotHttpError):
    """The socket failed while the response was being written."""


class MalformedRequestLine(OneshotHttpError):
    """The request line did not carry at least a method and a path."""


class InvalidContentLength(OneshotHttpError):
    """Content-Length was missing or not a non-negative integer where required."""


class RequestHeadTooLarge(OneshotHttpError):
    """The head grew past the configured limit without a terminating blank line."""


class RequestEntityTooLarge(OneshotHttpError):
    """The declared body length exceeds the configured limit."""


class FileNotFound(OneshotHttpError):
    """The requested file does not exist or is not a regular file."""


class FileIOError(OneshotHttpError):
    """Any other filesystem failure while reading or writing a file."""
