"""Snippet extraction and keyword highlighting.

Pure string functions, independent of any index.
"""
from __future__ import annotations

import re
import string
from typing import Iterable, Sequence

ELLIPSIS = "..."
_SNAP_CHARS = 20

def query_keywords(query: str) -> list[str]:
    """Whitespace-delimited query tokens plus their punctuation-stripped forms.

    Deduplicated case-insensitively, longest first so alternations prefer the
    longest keyword.
    """
    seen: dict[str, str] = {}
    for token in query.split():
        for candidate in (token, token.strip(string.punctuation)):
            if candidate and candidate.lower() not in seen:
                seen[candidate.lower()] = candidate
    return sorted(seen.values(), key=lambda k: (-len(k), k.lower()))

def find_offset(text: str, terms: Iterable[str]) -> int | None:
    """Position of the first term (in the given order) found in text, case-insensitive.

    Whitespace inside a term matches any run of whitespace.
    """
    for term in terms:
        parts = term.split()
        if not parts:
            continue
        pattern = r"\s+".join(re.escape(p) for p in parts)
        m = re.search(pattern, text, re.IGNORECASE)
        if m:
            return m.start()
    return None

def make_snippet(text: str, offset: int | None, max_chars: int = 300) -> str:
    """Cut at most max_chars of text, centred on offset, else from the start.

    Edges are snapped to nearby whitespace and marked with an ellipsis when cut.
    """
    if max_chars <= 0:
        raise ValueError(f"Invalid max_chars: {max_chars}. Must be positive.")
    if len(text) <= max_chars:
        return text.strip()

    if offset is None:
        start = 0
    else:
        start = max(0, min(offset, len(text)) - max_chars // 2)
    end = min(len(text), start + max_chars)
    start = max(0, end - max_chars)

    if start > 0:
        limit = min(start + _SNAP_CHARS, offset if offset is not None else end)
        sp = text.find(" ", start, max(start, limit))
        if sp != -1:
            start = sp + 1
    if end < len(text):
        sp = text.rfind(" ", max(start, end - _SNAP_CHARS), end)
        if sp != -1 and (offset is None or sp > offset):
            end = sp

    body = text[start:end].strip()
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(text) else ""
    return f"{prefix}{body}{suffix}"

def highlight(text: str, keywords: Sequence[str], open_marker: str = "**", close_marker: str = "**") -> str:
    """Wrap whole-word, case-insensitive keyword occurrences in emphasis markers.

    Keywords are regex-escaped. Occurrences already wrapped in the markers are
    left alone, so highlighting twice gives the same text.
    """
    kws = sorted({k for k in keywords if k}, key=lambda k: (-len(k), k))
    if not kws or not text:
        return text
    alternation = "|".join(re.escape(k) for k in kws)
    pattern = re.compile(
        rf"(?<!\w)(?<!{re.escape(open_marker)})({alternation})(?!\w)(?!{re.escape(close_marker)})",
        re.IGNORECASE,
    )
    return pattern.sub(lambda m: f"{open_marker}{m.group(1)}{close_marker}", text)
