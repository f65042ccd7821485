"""Input validation utilities."""

import ipaddress
from urllib.parse import urlparse

from recipe_collector.utils.exceptions import ValidationError

BLOCKED_HOSTS = frozenset({"localhost", "localhost.localdomain", "0.0.0.0", "::1"})


def validate_url(url: str) -> str:
    """
    Validate a page URL before fetching it.

    Only http(s) URLs with a public hostname pass; loopback, private,
    link-local and reserved addresses are rejected.

    Returns:
        The trimmed URL

    Raises:
        ValidationError: If the URL is malformed or points at an internal host
    """
    if not url or not isinstance(url, str):
        raise ValidationError("URL must be a non-empty string")

    url = url.strip()
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise ValidationError(f"Invalid URL format: {str(e)}") from e

    if parsed.scheme not in ("http", "https"):
        raise ValidationError("URL must use http or https protocol")
    if not hostname:
        raise ValidationError("URL must have a valid hostname")
    if hostname.lower() in BLOCKED_HOSTS:
        raise ValidationError("URL cannot point to localhost")

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return url

    if address.is_private or address.is_loopback or address.is_link_local or address.is_reserved:
        raise ValidationError("URL cannot point to private IP ranges")
    return url
