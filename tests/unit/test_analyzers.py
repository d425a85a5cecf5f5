"""Unit tests for the term analyzer pipeline."""

import pytest

from local_doc_search.search.analyzers import (
    AnalyzerPipeline,
    LowercaseFilter,
    MinLengthFilter,
    RegexTokenizer,
    TermAnalyzer,
    count_words,
    extract_words,
    tokenize,
)


pytestmark = pytest.mark.unit


class TestTokenize:
    def test_drops_short_tokens_and_punctuation(self):
        assert tokenize("Hi, a cat-nap!") == ["cat", "nap"]

    def test_case_folds_terms(self):
        assert tokenize("The QUICK Brown fox") == ["the", "quick", "brown", "fox"]

    def test_keeps_duplicates_in_order(self):
        assert tokenize("cat dog cat") == ["cat", "dog", "cat"]

    def test_underscores_and_digits_are_word_characters(self):
        assert tokenize("foo_bar 2024 ab") == ["foo_bar", "2024"]

    def test_empty_and_punctuation_only_text(self):
        assert tokenize("") == []
        assert tokenize("... !!! --") == []

    def test_no_stemming(self):
        assert tokenize("running runs") == ["running", "runs"]

    def test_custom_min_length(self):
        assert tokenize("an ox ran", min_length=2) == ["an", "ox", "ran"]


class TestTermAnalyzer:
    def test_positions_are_renumbered_after_filtering(self):
        tokens = TermAnalyzer()("Hi, a cat-nap!")

        assert [token.position for token in tokens] == [0, 1]
        assert tokens[0].start_char == 6
        assert tokens[0].end_char == 9

    def test_pipeline_composes_filters(self):
        pipeline = AnalyzerPipeline(RegexTokenizer(r"[a-z]+"), [LowercaseFilter(), MinLengthFilter(4)])

        assert [token.text for token in pipeline("tree leaf branch")] == ["tree", "leaf", "branch"]
        assert [token.text for token in pipeline("ox cow")] == []


class TestWordHelpers:
    def test_count_words_counts_whitespace_delimited_tokens(self):
        assert count_words("  one two\nthree\t") == 3
        assert count_words("a, b-c") == 2

    def test_count_words_empty(self):
        assert count_words("") == 0

    def test_extract_words_keeps_short_words(self):
        assert extract_words("Hi, a cat-nap!") == ["hi", "a", "cat", "nap"]
