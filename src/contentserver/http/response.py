"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Every response this server sends has exactly the same shape:

    HTTP/1.1 200 OK\r\n               ← Status line
    Content-Length: 2\r\n             ← Exact byte length of the body
    \r\n                              ← Blank separator
    hi                                ← Body bytes

There are no other headers. No Date, no Server, no Connection: the
connection is always closed after one response, so the client finds the
end of the body either from Content-Length or from the close.

=============================================================================
SERIALIZE, THEN SEND ONCE
=============================================================================

The whole response is built into one bytes object and handed to
socket.sendall(). sendall() loops until every byte is in the kernel's
send buffer, so nothing is left sitting in a user-space buffer when
write_response() returns.

=============================================================================
"""

from dataclasses import dataclass

from .resource import Resource
from .status_codes import HTTPStatus


CRLF = b"\r\n"
HTTP_VERSION = "HTTP/1.1"


@dataclass
class HTTPResponse:
    """
    A response to be sent (or one parsed back from the wire).

    Attributes:
        status: HTTP status code.
        body: Response body bytes.
        version: HTTP version for the status line.
    """

    status: HTTPStatus
    body: bytes = b""
    version: str = HTTP_VERSION

    @classmethod
    def for_resource(cls, resource: Resource) -> "HTTPResponse":
        """Build the response that serves a resolved resource."""
        return cls(status=resource.status.http_status, body=resource.body)

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE

        Example: "HTTP/1.1 404 NOT FOUND"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    def to_bytes(self) -> bytes:
        """Serialize to the exact wire format."""
        head = (
            f"{self.status_line}\r\n"
            f"Content-Length: {self.content_length}\r\n"
            f"\r\n"
        )
        return head.encode("ascii") + self.body


def write_response(conn, resource: Resource) -> HTTPResponse:
    """
    Serialize the response for a resource and send it on a connection.

    Args:
        conn: The client Connection.
        resource: The resolved resource to serve.

    Returns:
        The response that was sent (for access logging).

    Raises:
        WriteError: If the bytes could not be handed to the transport.
    """
    response = HTTPResponse.for_resource(resource)
    conn.send_response(response.to_bytes())
    return response


def parse_response(data: bytes) -> HTTPResponse:
    """
    Parse a framed response back into an HTTPResponse.

    Only the declared Content-Length bytes of the body are kept; anything
    after them is ignored.

    Raises:
        ValueError: If the status line, headers or length are malformed,
                    or the body is shorter than declared.
    """
    head, sep, rest = data.partition(CRLF + CRLF)
    if not sep:
        raise ValueError("Response has no header terminator")

    lines = head.decode("ascii").split("\r\n")
    parts = lines[0].split(" ", 2)
    if len(parts) != 3:
        raise ValueError(f"Malformed status line: {lines[0]!r}")

    version, code, phrase = parts
    try:
        status = HTTPStatus(int(code))
    except ValueError:
        raise ValueError(f"Unsupported status code: {code!r}")

    if phrase != status.phrase:
        raise ValueError(f"Unexpected reason phrase for {code}: {phrase!r}")

    content_length = None
    for line in lines[1:]:
        name, _, value = line.partition(":")
        if name.strip().lower() == "content-length":
            content_length = int(value.strip())

    if content_length is None:
        raise ValueError("Response has no Content-Length header")

    if len(rest) < content_length:
        raise ValueError(
            f"Body truncated: got {len(rest)} of {content_length} bytes"
        )

    return HTTPResponse(status=status, body=rest[:content_length], version=version)
