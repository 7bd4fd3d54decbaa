"""Normalization and validation of webhook target URLs."""
from __future__ import annotations

import ipaddress
import re
from urllib.parse import urlsplit

_SCHEME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
# Registered names as RFC 3986 allows them in practice: dot-separated labels
_HOST_NAME = re.compile(r"^(?:[a-z0-9_-]+\.)*[a-z0-9_-]+\.?$")
ALLOWED_SCHEMES = ("http", "https")


class InvalidWebhookURL(ValueError):
    """Raised when a webhook URL is not an absolute HTTP(S) URL."""


def normalize_webhook_url(value: str | None) -> str:
    """Return ``value`` with an explicit scheme, or raise InvalidWebhookURL.

    Values without a ``scheme://`` prefix are assumed to be plain HTTP.
    The scheme is lower-cased so stored URLs always begin with ``http://``
    or ``https://``.
    """
    url = (value or "").strip()
    if not url:
        raise InvalidWebhookURL("URL can't be blank")

    if any(ch.isspace() or not ch.isprintable() for ch in url):
        raise InvalidWebhookURL(f"{value!r} is not a valid URL")

    if not _SCHEME_PREFIX.match(url):
        url = f"http://{url}"

    try:
        parts = urlsplit(url)
        _ = parts.port  # raises ValueError on an out-of-range port
    except ValueError as exc:
        raise InvalidWebhookURL(f"{value!r} is not a valid URL") from exc

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES or not _valid_host(parts.hostname):
        raise InvalidWebhookURL(f"{value!r} is not a valid URL")

    return scheme + url[len(parts.scheme):]


def _valid_host(host: str | None) -> bool:
    if not host:
        return False
    if ":" in host:
        # bracketed IPv6 literal, optionally with a zone id
        try:
            ipaddress.IPv6Address(host.split("%", 1)[0])
        except ValueError:
            return False
        return True
    return bool(_HOST_NAME.match(host))


def url_host(url: str) -> str | None:
    """Hostname part of a stored webhook URL."""
    return urlsplit(url).hostname
