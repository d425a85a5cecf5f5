"""Highlighting and preview extraction for search results.

Matches use the same prefix semantics as the inverted index: the search term
must start a word and may be followed by any further word characters, so
searching "cat" marks "cataclysm" but not "bobcat".

Styles:
- "html" wraps matches in ``<span class="highlight">`` and turns line breaks
  into ``<br>``
- "plain" wraps matches in ``[[...]]`` and leaves line breaks alone
"""

from __future__ import annotations

import re
from typing import Literal


HighlightStyle = Literal["html", "plain"]

HTML_OPEN = '<span class="highlight">'
HTML_CLOSE = "</span>"
PLAIN_OPEN = "[["
PLAIN_CLOSE = "]]"

LINE_BREAK_PATTERN = re.compile(r"\r\n|\n")
_SENTENCE_BREAK = re.compile(r"[.!?]\s+")
_WHITESPACE = re.compile(r"\s+")
_WORD_CHAR = re.compile(r"\w")


def prefix_match_pattern(search_term: str) -> re.Pattern[str]:
    """Compile the case-insensitive word-prefix pattern for ``search_term``."""
    return re.compile(rf"(?<!\w)({re.escape(search_term)}\w*)", re.IGNORECASE)


def _markers(style: HighlightStyle) -> tuple[str, str]:
    if style == "html":
        return HTML_OPEN, HTML_CLOSE
    return PLAIN_OPEN, PLAIN_CLOSE


def normalize_line_breaks(content: str, style: HighlightStyle = "html") -> str:
    if style != "html":
        return content
    return LINE_BREAK_PATTERN.sub("<br>", content)


def highlight(content: str, search_term: str, style: HighlightStyle = "html") -> str:
    """Wrap every word starting with ``search_term`` in highlight markers.

    Args:
        content: Full document text.
        search_term: Term that was searched; blank terms only normalize line breaks.
        style: "html" or "plain".

    Returns:
        Marked-up text.
    """
    term = search_term.strip()
    if not term:
        return normalize_line_breaks(content, style)

    open_marker, close_marker = _markers(style)
    marked = prefix_match_pattern(term).sub(lambda match: f"{open_marker}{match.group(1)}{close_marker}", content)
    return normalize_line_breaks(marked, style)


def count_occurrences(content: str, search_term: str) -> int:
    """Count case-insensitive occurrences of ``search_term`` anywhere in ``content``."""
    term = search_term.strip()
    if not term:
        return 0
    return len(re.findall(re.escape(term), content, re.IGNORECASE))


def sentence_start(text: str, position: int, window: int = 200) -> int:
    """Index where the sentence holding ``position`` begins, looking back at most ``window`` chars.

    Without a sentence break in the window, start at the first whitespace past
    a quarter of the window so the excerpt does not open mid-word.
    """
    if position <= 0:
        return 0
    lo = max(0, position - window)
    breaks = [match.end() for match in _SENTENCE_BREAK.finditer(text, lo, position)]
    if breaks:
        return breaks[-1]
    gap = _WHITESPACE.search(text, lo + (position - lo) // 4, position)
    return gap.end() if gap else lo


def sentence_end(text: str, position: int, window: int = 200) -> int:
    """Index just past the sentence holding ``position``, looking ahead at most ``window`` chars."""
    if position >= len(text):
        return len(text)
    hi = min(len(text), position + window)
    stop = _SENTENCE_BREAK.search(text, position, hi)
    if stop:
        return stop.end()
    ceiling = position + (hi - position) * 3 // 4
    gaps = [match.start() for match in _WHITESPACE.finditer(text, position, hi) if match.start() <= ceiling]
    return gaps[-1] if gaps else hi


def _splits_word(text: str, position: int) -> bool:
    if not 0 < position < len(text):
        return False
    return bool(_WORD_CHAR.match(text, position - 1)) and bool(_WORD_CHAR.match(text, position))


def _snap_to_words(text: str, lo: int, hi: int, start: int, end: int) -> tuple[int, int]:
    """Pull ``lo`` and ``hi`` inward off partial words without crossing the match."""
    if lo < start and _splits_word(text, lo):
        gap = _WHITESPACE.search(text, lo, start)
        lo = gap.end() if gap else start
    if hi > end and _splits_word(text, hi):
        gaps = [match.start() for match in _WHITESPACE.finditer(text, end, hi)]
        hi = gaps[-1] if gaps else end
    return lo, hi


def excerpt_around(text: str, start: int, end: int, max_chars: int = 300, context: int = 100) -> str:
    """Cut an excerpt containing ``text[start:end]``.

    The excerpt is widened by ``context`` characters and snapped to sentence
    edges; if that exceeds ``max_chars`` it is re-centred on the match instead.
    Either way it never opens or closes on a partial word.
    """
    if not text:
        return ""
    lo = sentence_start(text, max(0, start - context), window=context)
    hi = sentence_end(text, min(len(text), end + context), window=context)
    if hi - lo > max_chars:
        middle = (start + end) // 2
        lo = max(0, middle - max_chars // 2)
        hi = min(len(text), middle + max_chars // 2)
    lo, hi = _snap_to_words(text, lo, hi, start, end)
    return text[lo:hi].strip()


def build_preview(
    content: str,
    search_term: str,
    max_chars: int = 300,
    style: HighlightStyle = "html",
) -> str:
    """Highlighted excerpt around the first word starting with ``search_term``.

    Falls back to the beginning of the document when nothing matches.
    """
    if not content:
        return ""

    term = search_term.strip()
    match = prefix_match_pattern(term).search(content) if term else None
    if match is None:
        return normalize_line_breaks(content[:max_chars].strip(), style)

    excerpt = excerpt_around(content, match.start(1), match.end(1), max_chars=max_chars, context=max_chars // 3)
    return highlight(excerpt, term, style=style)
