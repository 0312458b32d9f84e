"""
Resolved resources: a named, file-backed body plus a found/not-found status.
"""

from dataclasses import dataclass, field

from .status_codes import ResourceStatus


@dataclass(frozen=True)
class Resource:
    """
    A page loaded from storage for exactly one request.

    Resources are never cached; the resolver builds a new one from disk
    for every request.

    Attributes:
        name: File name of the page relative to the document root.
        status: FOUND for the success page, NOT_FOUND for the fallback.
        body: Full file contents.
    """

    name: str
    status: ResourceStatus
    body: bytes = field(default=b"", repr=False)

    @property
    def length(self) -> int:
        """Body length in bytes (the Content-Length of the response)."""
        return len(self.body)
