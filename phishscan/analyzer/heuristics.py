"""Sender and content heuristics.

Stateless predicates over sender information and message text. Every list
here is fixed; callers extend detection through detection rules instead.
"""

from __future__ import annotations

import re

from ..utils.domains import email_domain

FREE_MAIL_DOMAINS = ("gmail.com", "yahoo.com", "hotmail.com", "outlook.com")

# Display names that claim to be a company, brand or service desk
CORPORATE_NAME_PATTERN = re.compile(r"bank|paypal|amazon|microsoft|apple|support|service", re.I)

URGENT_PHRASES = (
    "act now",
    "immediate action",
    "within 24 hours",
    "account will be closed",
    "suspended",
    "verify immediately",
)

HIDDEN_TEXT_PATTERN = re.compile(r'<span[^>]*style="[^"]*display:\s*none[^"]*"[^>]*>', re.I)
TINY_TEXT_PATTERN = re.compile(r'<span[^>]*style="[^"]*font-size:\s*[0-2]px[^"]*"[^>]*>', re.I)

COMMON_MISSPELLINGS = (
    "paypa1",
    "amaz0n",
    "micros0ft",
    "g00gle",
    "verfy",
    "acccount",
    "susppended",
    "secuirty",
)
MIN_MISSPELLINGS = 2


def is_free_mail_sender(email: str) -> bool:
    return email_domain(email) in FREE_MAIL_DOMAINS


def is_suspicious_sender(email: str, name: str) -> bool:
    """Flag a no-reply "support" sender or a free-mail sender posing as a company."""
    email_lower = (email or "").lower()
    name_lower = (name or "").lower()

    if "noreply" in email_lower and "support" in name_lower:
        return True

    return is_free_mail_sender(email_lower) and bool(CORPORATE_NAME_PATTERN.search(name_lower))


def find_urgent_phrases(corpus: str) -> list[str]:
    return [phrase for phrase in URGENT_PHRASES if phrase in corpus]


def has_urgent_language(corpus: str) -> bool:
    """Plain substring check against the lowercased corpus."""
    return bool(find_urgent_phrases(corpus))


def has_suspicious_formatting(content: str) -> bool:
    """Hidden or near-invisible inline-styled text in the raw content."""
    content = content or ""
    return bool(HIDDEN_TEXT_PATTERN.search(content) or TINY_TEXT_PATTERN.search(content))


def find_misspellings(corpus: str) -> list[str]:
    return [word for word in COMMON_MISSPELLINGS if word in corpus]


def has_spelling_errors(corpus: str) -> bool:
    return len(find_misspellings(corpus)) >= MIN_MISSPELLINGS
