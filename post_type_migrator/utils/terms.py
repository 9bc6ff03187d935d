from __future__ import annotations

from html import unescape
import re


_TAG_RE = re.compile(r"<[^>]*>")


def normalize_term_name(value: str) -> str:
    """Unescape HTML entities, drop tags and collapse inner whitespace.

    Preserves original casing.  Mirrors the text sanitizing applied to
    command line input before it reaches the content store.
    """
    if not value:
        return ""
    text = _TAG_RE.sub("", unescape(value))
    text = re.sub(r"\s+", " ", text).strip()
    return text


def slugify(value: str) -> str:
    """Build a term slug: lowercase alphanumerics joined by single dashes."""
    text = normalize_term_name(value).lower()
    out = []
    prev_dash = False
    for ch in text:
        if ch.isalnum():
            out.append(ch)
            prev_dash = False
        else:
            if not prev_dash:
                out.append("-")
            prev_dash = True
    slug = "".join(out).strip("-")
    return slug[:200]
