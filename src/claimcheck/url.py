"""URL handling utilities."""

from __future__ import annotations

import logging
from urllib.parse import urlparse, urlunparse

logger = logging.getLogger(__name__)


def extract_domain(url: str) -> str:
    """Extract domain name from URL.

    Args:
        url: The URL to extract the domain from.

    Returns:
        The domain name (without 'www.' prefix), or the input itself if it
        has no network location.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    domain = parsed.netloc
    if not domain:
        logger.debug(f"Could not get domain from url {url}")
        return url
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def normalize_url(url: str) -> str:
    """Normalize a URL for deduplication.

    Lowercases scheme and host, drops the fragment and a trailing slash on
    the path. The query string is kept since it often identifies the page.
    """
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.netloc:
        return url.rstrip("/")
    path = parsed.path.rstrip("/")
    return urlunparse(
        (parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, "")
    )
