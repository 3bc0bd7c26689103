"""
Exceptions raised by the blog toolkit.

Library code raises these and never prints; the CLI and the dev server
catch BlogError and report it on stderr.
"""

from typing import Optional


class BlogError(Exception):
    """Base class for all blog errors."""


class FetchFailure(BlogError):
    """A remote fetch failed: transport error, non-2xx status or bad body."""

    def __init__(self, message: str, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class InvalidDate(BlogError, ValueError):
    """A timestamp was missing or could not be parsed."""


class PostNotFound(BlogError):
    """No post document exists for the requested slug."""

    def __init__(self, slug: str):
        super().__init__(f"No post found for slug '{slug}'")
        self.slug = slug


class InvalidPreviewToken(BlogError):
    """A preview token could not be resolved to a document."""


class ConfigError(BlogError):
    """Required configuration is missing."""
