"""URL and attribute-name sanitisation for generated markup."""

import re
from typing import Iterable
from urllib.parse import urlsplit

from core.config import get_settings
from core.logging_config import get_logger

logger = get_logger(__name__)

ALLOWED_SCHEMES = ("http", "https")

DANGEROUS_URL_PATTERNS = [
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:(?!image/(png|jpg|jpeg|gif|webp|svg\+xml))", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
    re.compile(r"file:", re.IGNORECASE),
    re.compile(r"about:", re.IGNORECASE),
    re.compile(r"chrome(-extension)?:", re.IGNORECASE),
]

_ATTRIBUTE_NAME = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:.\-]*$")
_DATA_KEY_INVALID = re.compile(r"[^a-z0-9-]+")


def contains_dangerous_pattern(url: str) -> bool:
    """Check the URL for script-capable or local schemes."""
    return any(pattern.search(url) for pattern in DANGEROUS_URL_PATTERNS)


def is_approved_domain(host: str | None, approved: Iterable[str]) -> bool:
    """Check host against an allow-list, accepting subdomains."""
    if not host:
        return False
    host = host.lower()
    return any(host == domain or host.endswith(f".{domain}") for domain in approved)


def validate_url(
    url: str | None,
    *,
    allow_relative: bool = True,
    require_approved: bool = False,
    approved_domains: Iterable[str] | None = None,
    fallback: str | None = None,
) -> str | None:
    """
    Validate a URL destined for an ``href``/``src``/``action`` attribute.

    Args:
        url: Candidate URL
        allow_relative: Accept paths without scheme and host
        require_approved: Require the host to be on the approved list
        approved_domains: Override for the configured approved hosts
        fallback: Value returned when the URL is rejected

    Returns:
        The URL unchanged when acceptable, otherwise ``fallback``
    """
    if not url or not str(url).strip():
        return fallback
    url = str(url).strip()

    if contains_dangerous_pattern(url):
        logger.warning("dangerous_url_blocked", url=url)
        return fallback

    try:
        parts = urlsplit(url)
    except ValueError:
        logger.warning("invalid_url_format", url=url)
        return fallback

    if not parts.scheme and not parts.netloc:
        if allow_relative:
            return url
        logger.warning("relative_url_rejected", url=url)
        return fallback

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        logger.warning("url_scheme_rejected", scheme=parts.scheme, url=url)
        return fallback

    if require_approved:
        domains = approved_domains if approved_domains is not None else get_settings().approved_image_domains
        if not is_approved_domain(parts.hostname, domains):
            logger.warning("unapproved_domain", host=parts.hostname)
            return fallback

    return url


def validate_image_src(src: str | None, approved_domains: Iterable[str] | None = None) -> str:
    """Validate an image source, falling back to the configured placeholder."""
    placeholder = get_settings().image_placeholder
    result = validate_url(
        src,
        allow_relative=True,
        require_approved=True,
        approved_domains=approved_domains,
        fallback=placeholder,
    )
    return result or placeholder


def validate_link_href(href: str | None) -> str:
    """Validate a link destination, falling back to ``#``."""
    return validate_url(href, allow_relative=True, fallback="#") or "#"


def sanitize_data_key(key: str) -> str:
    """
    Normalize a data attribute key.

    Examples:
        >>> sanitize_data_key("userId")
        'data-user-id'
        >>> sanitize_data_key("data-action")
        'data-action'
    """
    text = re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", str(key)).lower().replace("_", "-")
    if text.startswith("data-"):
        text = text[5:]
    text = _DATA_KEY_INVALID.sub("", text).strip("-")
    return f"data-{text or 'value'}"


def is_valid_attribute_name(name: str) -> bool:
    """Check an attribute name can be emitted without quoting issues."""
    return bool(_ATTRIBUTE_NAME.match(name)) and not name.lower().startswith("on")


def attribute_name(key: str) -> str:
    """Map a Python keyword (``aria_label``, ``class_``, ``for_``) to an attribute name."""
    key = key.rstrip("_")
    return key.replace("_", "-")
