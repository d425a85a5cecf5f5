"""Analyzer utilities for the prefix search stack.

Text is turned into index terms by a small composable pipeline: a regex
tokenizer followed by token filters. The default term analyzer lowercases the
input, keeps runs of word characters and drops tokens that are too short to be
useful for prefix matching.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


DEFAULT_MIN_TERM_LENGTH = 3

_WORD_PATTERN = re.compile(r"\w+", re.UNICODE)
_NON_WORD_PATTERN = re.compile(r"\W+", re.UNICODE)


@dataclass
class Token:
    """One word of a document, with its offsets in the (lowercased) text."""

    text: str
    position: int
    start_char: int
    end_char: int


class Tokenizer(Protocol):
    """Splits text into tokens."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Transforms or drops tokens from a stream."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Yields one token per regex match; by default runs of word characters."""

    def __init__(self, pattern: str | re.Pattern[str] = _WORD_PATTERN) -> None:
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class LowercaseFilter:
    """Case-folds token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if not token.text.islower():
                token.text = token.text.lower()
            yield token


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = DEFAULT_MIN_TERM_LENGTH) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


class AnalyzerPipeline:
    """A tokenizer followed by filters; positions are renumbered after filtering."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)  # lazily chained
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):
            token.position = idx
        return tokens


class TermAnalyzer:
    """Default analyzer used to build and query the inverted index.

    The whole text is lowercased before tokenizing, so case folding that
    changes string length cannot split or merge words differently from the
    highlighter.
    """

    def __init__(self, *, min_length: int = DEFAULT_MIN_TERM_LENGTH) -> None:
        self.min_length = min_length
        self.pipeline = AnalyzerPipeline(RegexTokenizer(), [LowercaseFilter(), MinLengthFilter(min_length)])

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        return self.pipeline(text.lower())

    def terms(self, text: str) -> list[str]:
        return [token.text for token in self(text)]


_default_analyzer = TermAnalyzer()


def tokenize(text: str, *, min_length: int = DEFAULT_MIN_TERM_LENGTH) -> list[str]:
    """Normalize raw text into index terms.

    >>> tokenize("Hi, a cat-nap!")
    ['cat', 'nap']
    """
    if min_length == DEFAULT_MIN_TERM_LENGTH:
        return _default_analyzer.terms(text)
    return TermAnalyzer(min_length=min_length).terms(text)


def extract_words(text: str) -> list[str]:
    """Split lowercased text on runs of non-word characters, keeping every word."""
    return [word for word in _NON_WORD_PATTERN.split(text.lower()) if word]


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens in raw text (display metric, no filtering)."""
    return len(text.split())
