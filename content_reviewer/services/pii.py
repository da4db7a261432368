"""
PII display safeguards.

A secondary check on review text before it is displayed: the backend redacts
PII before storage, these helpers spot anything that slipped through and
render the backend's redaction placeholders as styled spans.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List

from markupsafe import Markup, escape

logger = logging.getLogger(__name__)

PII_PATTERNS: Dict[str, re.Pattern] = {
    "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
    "phone": re.compile(
        r"(?<!\w)(?:\+44\s?|0)(?:\d{2}\s?\d{4}\s?\d{4}|\d{3}\s?\d{3}\s?\d{4}|\d{4}\s?\d{6}|\d{5}\s?\d{5})\b"
    ),
    "ni_number": re.compile(
        r"\b[A-CEGHJ-PR-TW-Z][A-CEGHJ-NPR-TW-Z]\s?\d{2}\s?\d{2}\s?\d{2}\s?[A-D]?\b", re.IGNORECASE
    ),
    "postcode": re.compile(
        r"\b[A-Z]{1,2}\d{1,2}\s?\d[A-Z]{2}\b|\b[A-Z]{1,2}\d[A-Z]\s?\d[A-Z]{2}\b", re.IGNORECASE
    ),
    "credit_card": re.compile(r"\b(?:\d{4}[-\s]?){3}\d{1,4}\b"),
}

# placeholder -> (tooltip, masked text)
REDACTIONS: Dict[str, tuple] = {
    "[EMAIL_REDACTED]": ("Email address", "***@***.***"),
    "[PHONE_REDACTED]": ("Phone number", "***-***-****"),
    "[NI_NUMBER_REDACTED]": ("National Insurance number", "**-**-**-*"),
    "[POSTCODE_REDACTED]": ("Postcode", "*** ***"),
    "[CARD_NUMBER_REDACTED]": ("Card number", "****-****-****-****"),
    "[IP_ADDRESS_REDACTED]": ("IP address", "***.***.***.***"),
    "[DATE_REDACTED]": ("Date", "**/**/****"),
    "[DRIVING_LICENSE_REDACTED]": ("Driving license", "********"),
    "[PASSPORT_REDACTED]": ("Passport number", "*********"),
    "[SSN_REDACTED]": ("Social security number", "***-**-****"),
    "[ACCOUNT_NUMBER_REDACTED]": ("Account number", "********"),
    "[SORT_CODE_REDACTED]": ("Sort code", "**-**-**"),
}

_PLACEHOLDER_RE = re.compile("|".join(re.escape(p) for p in REDACTIONS), re.IGNORECASE)


def detect_pii(text: str) -> List[str]:
    """Names of the PII patterns found in text, in a stable order."""
    if not text or not isinstance(text, str):
        return []
    return [name for name, pattern in PII_PATTERNS.items() if pattern.search(text)]


def has_redaction_placeholders(text: str) -> bool:
    if not text or not isinstance(text, str):
        return False
    return _PLACEHOLDER_RE.search(text) is not None


def _span(match: "re.Match") -> str:
    label, masked = REDACTIONS[match.group(0).upper()]
    return f'<span class="pii-redacted" title="{label} redacted for privacy">{masked}</span>'


def _masked(match: "re.Match") -> str:
    return REDACTIONS[match.group(0).upper()][1]


def mask_redactions(text: str) -> str:
    """Plain-text rendition of sanitize_for_display for the PDF and Word exports."""
    if not has_redaction_placeholders(text):
        return text or ""
    return _PLACEHOLDER_RE.sub(_masked, text)


def sanitize_for_display(text: str) -> Markup:
    """Escape text for HTML, then render redaction placeholders as spans."""
    if not text:
        return Markup("")
    if not has_redaction_placeholders(text):
        return escape(text)
    escaped = str(escape(text))
    return Markup(_PLACEHOLDER_RE.sub(_span, escaped))


def warn_if_pii(text: str, field_name: str) -> List[str]:
    found = detect_pii(text)
    if found:
        # pattern names only, never the matched text
        logger.warning("Unredacted PII pattern(s) %s detected in %s", found, field_name)
    return found
