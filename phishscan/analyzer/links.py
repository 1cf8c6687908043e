"""Link extraction and per-link risk analysis."""

from __future__ import annotations

import re
from typing import Iterator, Optional
from urllib.parse import SplitResult, urlsplit

from .models import LinkFinding

# An anchor with a double-quoted href, or a bare http(s) token outside markup.
# A single left-to-right scan, so URLs inside a matched anchor are not re-emitted.
LINK_PATTERN = re.compile(
    r'<a\s+(?:[^>]*?\s+)?href="([^"]*)"[^>]*>(.*?)</a>|https?://[^\s<]+',
    re.I,
)

IPV4_HOST_PATTERN = re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}")

# Characters that can never appear in a host name
_INVALID_HOST_CHARS = re.compile(r"[\s<>\"'`{}|\\^%]")

# Schemes that require a host to be a usable URL
_HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss"}

SHORTENER_DOMAINS = ("bit.ly", "tinyurl.com", "goo.gl", "t.co")
COMMON_BRANDS = ("paypal", "amazon", "microsoft", "apple", "google", "facebook", "bank")
MAX_HOST_LABELS = 4

MALFORMED_URL = "Invalid or malformed URL"
URL_MISMATCH = "URL mismatch: displayed URL differs from actual destination"
IP_ADDRESS_HOST = "URL uses IP address instead of domain name"
SHORTENED_URL = "Shortened URL detected"
EXCESSIVE_SUBDOMAINS = "Excessive subdomain levels"
AT_SYMBOL = "URL contains @ symbol (possible redirection)"
INSECURE_HTTP = "Insecure HTTP connection (not HTTPS)"


def parse_url(value: str) -> Optional[SplitResult]:
    """Parse an absolute URL, returning None instead of raising when it is not one."""
    candidate = (value or "").strip()
    if not candidate:
        return None
    try:
        parsed = urlsplit(candidate)
        # Accessing .port validates it (out-of-range ports raise ValueError)
        parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if not scheme:
        return None
    if scheme in _HOST_SCHEMES:
        host = parsed.hostname or ""
        if not host or _INVALID_HOST_CHARS.search(host):
            return None
    return parsed


def parse_display_url(text: str) -> Optional[SplitResult]:
    """Parse link text as a URL only when it names a host (e.g. "http://bank.com")."""
    parsed = parse_url(text)
    if parsed is None or not parsed.hostname:
        return None
    return parsed


def iter_link_candidates(content: str) -> Iterator[tuple[str, str]]:
    """Yield (url, display_text) pairs in order of appearance."""
    for match in LINK_PATTERN.finditer(content or ""):
        whole = match.group(0)
        url = match.group(1) or whole
        display_text = match.group(2) or whole
        yield url, display_text


def analyze_link(url: str, display_text: str) -> LinkFinding:
    """Run every link check independently; any suspicious check flags the link."""
    finding = LinkFinding(url=url, display_text=display_text)
    factors = finding.risk_factors

    parsed = parse_url(url)
    if parsed is None:
        factors.append(MALFORMED_URL)
        finding.is_suspicious = True
        return finding

    host = (parsed.hostname or "").lower()
    suspicious = False

    displayed = parse_display_url(display_text)
    if displayed is not None and (displayed.hostname or "").lower() != host:
        factors.append(URL_MISMATCH)
        suspicious = True

    if IPV4_HOST_PATTERN.fullmatch(host):
        factors.append(IP_ADDRESS_HOST)
        suspicious = True

    if any(domain in host for domain in SHORTENER_DOMAINS):
        factors.append(SHORTENED_URL)
        suspicious = True

    if len(host.split(".")) > MAX_HOST_LABELS:
        factors.append(EXCESSIVE_SUBDOMAINS)
        suspicious = True

    if "@" in url:
        factors.append(AT_SYMBOL)
        suspicious = True

    for brand in COMMON_BRANDS:
        if brand in host and not host.endswith(f"{brand}.com"):
            factors.append(f'Suspicious use of brand name "{brand}" in domain')
            suspicious = True

    # Informational only; plain HTTP alone does not flag the link
    if parsed.scheme.lower() == "http":
        factors.append(INSECURE_HTTP)

    finding.is_suspicious = suspicious
    return finding


def analyze_links(content: str) -> list[LinkFinding]:
    """Extract every link from raw content and analyze each independently."""
    return [analyze_link(url, text) for url, text in iter_link_candidates(content)]
