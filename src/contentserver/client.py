"""
Minimal client for talking to a content server.

Sends raw request bytes, reads until the server closes the connection
and parses the framed response:

    response = fetch("127.0.0.1", 7878)
    response.status        # HTTPStatus.OK
    response.body          # b"<!DOCTYPE html>..."

    fetch("127.0.0.1", 7878, b"GET /missing HTTP/1.1\\r\\n\\r\\n").status
    # HTTPStatus.NOT_FOUND
"""

import socket

from .http.response import HTTPResponse, parse_response


DEFAULT_REQUEST = b"GET / HTTP/1.1\r\n\r\n"


def fetch_raw(host: str, port: int, request: bytes = DEFAULT_REQUEST, timeout: float = 5.0) -> bytes:
    """
    Send a request and return everything the server wrote before closing.

    An empty result means the server closed the connection without a
    response (the way it reports per-connection failures).
    """
    with socket.create_connection((host, port), timeout=timeout) as sock:
        sock.sendall(request)

        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)

    return b"".join(chunks)


def fetch(host: str, port: int, request: bytes = DEFAULT_REQUEST, timeout: float = 5.0) -> HTTPResponse:
    """
    Send a request and parse the response.

    Raises:
        ConnectionError: If the server closed without responding.
        ValueError: If the response framing is malformed.
    """
    data = fetch_raw(host, port, request, timeout)
    if not data:
        raise ConnectionError(f"{host}:{port} closed the connection without a response")
    return parse_response(data)
