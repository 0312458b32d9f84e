"""
Unit tests for request classification.
"""

import pytest

from contentserver.http.classifier import (
    ROOT_GET_PREFIX,
    RequestShape,
    classify,
    request_line,
)


class TestClassify:
    """Tests for classify()."""

    def test_exact_prefix_is_root_get(self):
        """The bare request line is a root GET."""
        assert classify(b"GET / HTTP/1.1\r\n") is RequestShape.ROOT_GET

    def test_trailing_bytes_are_ignored(self, root_get_request: bytes):
        """Headers after the request line don't change the result."""
        assert classify(root_get_request) is RequestShape.ROOT_GET
        assert classify(ROOT_GET_PREFIX + b"Host: x\r\n\r\n") is RequestShape.ROOT_GET
        assert classify(ROOT_GET_PREFIX + b"\x00" * 1000) is RequestShape.ROOT_GET

    def test_stale_buffer_content_is_ignored(self):
        """A zero-filled buffer tail past the request is irrelevant."""
        buffer = bytearray(1024)
        buffer[:len(ROOT_GET_PREFIX)] = ROOT_GET_PREFIX
        assert classify(buffer) is RequestShape.ROOT_GET

    def test_other_path_is_other(self, missing_request: bytes):
        """Any path but / is OTHER."""
        assert classify(missing_request) is RequestShape.OTHER
        assert classify(b"GET /index.html HTTP/1.1\r\n\r\n") is RequestShape.OTHER

    @pytest.mark.parametrize("raw", [
        b"POST / HTTP/1.1\r\n\r\n",
        b"HEAD / HTTP/1.1\r\n\r\n",
        b"get / HTTP/1.1\r\n\r\n",
        b"GET / HTTP/1.0\r\n\r\n",
        b"GET / HTTP/2\r\n\r\n",
        b"GET /  HTTP/1.1\r\n\r\n",
        b"GET / HTTP/1.1\n\n",
        b" GET / HTTP/1.1\r\n",
        b"\x16\x03\x01\x02\x00\x01\x00\x01\xfc\x03\x03",
    ])
    def test_near_misses_are_other(self, raw: bytes):
        """Different method, version, spacing or terminator is OTHER."""
        assert classify(raw) is RequestShape.OTHER

    @pytest.mark.parametrize("length", range(len(ROOT_GET_PREFIX)))
    def test_truncated_prefix_is_other(self, length: int):
        """Every strict prefix of the pattern (including empty) is OTHER."""
        assert classify(ROOT_GET_PREFIX[:length]) is RequestShape.OTHER

    def test_accepts_memoryview(self):
        """Buffers can be passed without copying."""
        assert classify(memoryview(b"GET / HTTP/1.1\r\n")) is RequestShape.ROOT_GET


class TestRequestLine:
    """Tests for request_line() log helper."""

    def test_first_line_only(self, missing_request: bytes):
        assert request_line(missing_request) == "GET /missing HTTP/1.1"

    def test_non_ascii_is_escaped(self):
        assert request_line(b"GET /\xff HTTP/1.1\r\n") == "GET /\\xff HTTP/1.1"

    def test_limit(self):
        assert request_line(b"A" * 500, limit=10) == "A" * 10
