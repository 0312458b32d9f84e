"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The wire-level pieces of the server:

    classifier.py     Raw request bytes → RequestShape (ROOT_GET / OTHER)
    status_codes.py   The two status codes and their reason phrases
    resource.py       Resource: page name, status and body bytes
    response.py       HTTPResponse framing, write_response, parse_response

=============================================================================
"""

from .classifier import ROOT_GET_PREFIX, RequestShape, classify, request_line
from .status_codes import HTTPStatus, ResourceStatus
from .resource import Resource
from .response import HTTPResponse, parse_response, write_response

__all__ = [
    "ROOT_GET_PREFIX",
    "RequestShape",
    "classify",
    "request_line",
    "HTTPStatus",
    "ResourceStatus",
    "Resource",
    "HTTPResponse",
    "parse_response",
    "write_response",
]
