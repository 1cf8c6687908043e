"""Sender address and domain normalization utilities."""

from __future__ import annotations

from email.utils import parseaddr

import tldextract

# Bundled public suffix snapshot only; never fetch the list over the network.
_extract = tldextract.TLDExtract(suffix_list_urls=())


def normalize_email(value: str) -> str:
    """
    Normalize a sender address to a lookup key.

    - Accepts "Display Name <addr@host>" as well as a bare address
    - Lowercase, surrounding whitespace stripped
    """
    raw = (value or "").strip()
    if not raw:
        return ""
    _, address = parseaddr(raw)
    return (address or raw).strip().lower()


def email_domain(value: str) -> str:
    """Return the host part of a sender address ("" when there is none)."""
    address = normalize_email(value)
    if "@" not in address:
        return ""
    return address.rsplit("@", 1)[1].strip(".")


def registered_domain(value: str) -> str:
    """Return the registrable domain for a host or address (best-effort)."""
    host = email_domain(value) if "@" in (value or "") else (value or "").strip().lower()
    if not host:
        return ""
    extracted = _extract(host)
    if extracted.domain and extracted.suffix:
        return f"{extracted.domain}.{extracted.suffix}".lower()
    return host
