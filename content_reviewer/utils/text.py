from __future__ import annotations

import re


def truncate(s: str, n: int) -> str:
    s = s or ""
    return s if len(s) <= n else s[:n] + "..."


def title_from_text(text: str, n: int = 10) -> str:
    """First n characters as a title, with an ellipsis when the text is longer."""
    text = (text or "").strip()
    head = text[:n].strip()
    return head + ("..." if len(text) > n else "")


_XML_BREAKS_RE = re.compile(r"[\x0b\x0c]")
_XML_INVALID_RE = re.compile(r"[\x00-\x08\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def xml_safe(text: str) -> str:
    """Drop characters XML 1.0 cannot carry; vertical tab and form feed become line breaks."""
    return _XML_INVALID_RE.sub("", _XML_BREAKS_RE.sub("\n", text or ""))
