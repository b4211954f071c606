"""
Hostname and registrable-domain helpers.

registrable_domain() is a heuristic, not a Public Suffix List lookup: it
keeps the last two labels, or the last three when the name ends in a known
second-level label under a two-letter country code (apr.gov.rs, bbc.co.uk).
Stored rule keys were computed with exactly this rule, so changing it would
silently re-key existing rules.
"""

from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from .utils.config import get_config


def hostname(url: Optional[str]) -> Optional[str]:
    """Extract the hostname from a URL, or None if there is none."""
    if not url:
        return None
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host or None


def registrable_domain(
    host: Optional[str],
    known_second_level: Optional[Iterable[str]] = None,
) -> Optional[str]:
    if not host:
        return None

    if known_second_level is None:
        known_second_level = get_config().domains.known_second_level
    known = frozenset(known_second_level)

    parts = host.split(".")
    if len(parts) <= 2:
        return host

    tld = parts[-1]
    sld = parts[-2]
    if len(tld) == 2 and sld in known:
        # e.g. foo.apr.gov.rs -> apr.gov.rs
        return ".".join(parts[-3:])
    return ".".join(parts[-2:])


def domain_for_url(url: Optional[str]) -> Optional[str]:
    return registrable_domain(hostname(url))


def origin_patterns(domain: Optional[str]) -> List[str]:
    """Permission origin patterns covering a domain and all its subdomains."""
    if not domain:
        return []
    return [f"*://{domain}/*", f"*://*.{domain}/*"]


def host_matches(host: str, key: str) -> bool:
    return host == key or host.endswith("." + key)
