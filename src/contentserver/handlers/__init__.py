"""
Request handlers.

Currently a single one: ResourceResolver, which turns a classified
request into a page loaded from the document root.
"""

from .resolver import ResourceResolver

__all__ = ["ResourceResolver"]
