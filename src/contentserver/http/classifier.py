"""
=============================================================================
REQUEST CLASSIFIER
=============================================================================

This server does not parse HTTP. It only answers one question about the
raw request bytes: "is this a GET for the root path?"

    Raw request bytes
    ┌──────────────────────────────────────────────────────────────┐
    │ G E T ␠ / ␠ H T T P / 1 . 1 \r \n │ Host: ... \r\n \r\n      │
    └──────────────────────────────────────────────────────────────┘
     ◄────────── 16 byte prefix ──────►
                    │
                    ├── exact match      → RequestShape.ROOT_GET
                    └── anything else    → RequestShape.OTHER

Anything else includes: another method, another path, another protocol
version, a malformed request line, and a request shorter than the prefix
(including an empty one). There is no third outcome.

=============================================================================
"""

from enum import Enum


ROOT_GET_PREFIX = b"GET / HTTP/1.1\r\n"


class RequestShape(Enum):
    """The closed set of request shapes the server distinguishes."""

    ROOT_GET = "root_get"
    OTHER = "other"


def classify(data: bytes) -> RequestShape:
    """
    Classify raw request bytes.

    Only the leading bytes are compared, so trailing headers (or stale
    buffer content past the request) never affect the result. A buffer
    shorter than the prefix simply fails the comparison.

    Args:
        data: The meaningful part of the request buffer.

    Returns:
        RequestShape.ROOT_GET on an exact prefix match, RequestShape.OTHER
        otherwise.
    """
    if bytes(data[:len(ROOT_GET_PREFIX)]) == ROOT_GET_PREFIX:
        return RequestShape.ROOT_GET
    return RequestShape.OTHER


def request_line(data: bytes, limit: int = 200) -> str:
    """
    Extract the first line of a request for log output.

    Non-ASCII bytes are escaped so a hostile request can't inject
    control characters into log files.
    """
    line = bytes(data).split(b"\r\n", 1)[0][:limit]
    return line.decode("ascii", errors="backslashreplace")
