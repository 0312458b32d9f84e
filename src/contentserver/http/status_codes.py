"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with two status codes:

    HTTP/1.1 200 OK           ← the success page was found and served
    HTTP/1.1 404 NOT FOUND    ← anything else, served from the fallback page

Note the reason phrase "NOT FOUND" is upper case on the wire. That is the
framing clients of this server expect, so the phrase table below is the
single source of truth rather than the standard library's http.HTTPStatus.

=============================================================================
"""

from enum import Enum, IntEnum


class HTTPStatus(IntEnum):
    """
    Status codes the server emits.

    IntEnum, so codes compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
}


class ResourceStatus(Enum):
    """Whether a resolved resource is the requested page or the fallback."""

    FOUND = "found"
    NOT_FOUND = "not_found"

    @property
    def http_status(self) -> HTTPStatus:
        """The status code a response for this resource carries."""
        if self is ResourceStatus.FOUND:
            return HTTPStatus.OK
        return HTTPStatus.NOT_FOUND
