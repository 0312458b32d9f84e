"""
=============================================================================
RESOURCE RESOLVER
=============================================================================

Maps a classified request to one of two pages on disk and loads it.

    RequestShape.ROOT_GET  ──►  success page    (hello.html)  ──►  FOUND
    RequestShape.OTHER     ──►  not-found page  (404.html)    ──►  NOT_FOUND

The mapping is a pure function of the shape. Loading is not: the file
is read fresh on every request, so editing a page on disk takes effect
on the next request without a restart.

=============================================================================
MISSING PAGES
=============================================================================

If the selected file is missing or unreadable, resolve() raises
ResourceError. The server does NOT synthesize a replacement body; the
request's connection is closed without a response. A broken document
root is a deployment error and is meant to be loud in the logs.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Tuple

from ..errors import ResourceError
from ..http.classifier import RequestShape
from ..http.resource import Resource
from ..http.status_codes import ResourceStatus


logger = logging.getLogger(__name__)


class ResourceResolver:
    """
    Resolves request shapes to pages under a document root.

    Usage:
        resolver = ResourceResolver("/var/www/pages")
        resource = resolver.resolve(RequestShape.ROOT_GET)
        resource.body  # contents of /var/www/pages/hello.html
    """

    def __init__(
        self,
        document_root: str,
        success_page: str = "hello.html",
        not_found_page: str = "404.html",
    ):
        """
        Args:
            document_root: Directory holding both pages.
            success_page: File served for a root GET.
            not_found_page: File served for every other request.

        The directory is not checked here; a missing page only fails the
        requests that need it.
        """
        self.document_root = Path(document_root)
        self.success_page = success_page
        self.not_found_page = not_found_page

    @classmethod
    def from_config(cls, config) -> "ResourceResolver":
        return cls(
            document_root=config.document_root,
            success_page=config.success_page,
            not_found_page=config.not_found_page,
        )

    def page_for(self, shape: RequestShape) -> Tuple[str, ResourceStatus]:
        """Select the page name and status for a request shape."""
        if shape is RequestShape.ROOT_GET:
            return self.success_page, ResourceStatus.FOUND
        return self.not_found_page, ResourceStatus.NOT_FOUND

    def resolve(self, shape: RequestShape) -> Resource:
        """
        Load the page for a request shape.

        Raises:
            ResourceError: If the page file can't be read.
        """
        name, status = self.page_for(shape)
        path = self.document_root / name

        try:
            body = path.read_bytes()
        except OSError as e:
            raise ResourceError(name, e.strerror or str(e)) from e

        logger.debug(f"Loaded {path} ({len(body)} bytes)")
        return Resource(name=name, status=status, body=body)
