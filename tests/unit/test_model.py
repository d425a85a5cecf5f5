"""Unit tests for domain model entities and value objects."""

import dataclasses

from pydantic import ValidationError
import pytest

from local_doc_search.domain.model import Document, IngestionFailure, IngestionReport, Posting


pytestmark = pytest.mark.unit


class TestDocument:
    def test_positional_and_keyword_construction(self):
        by_position = Document("1000", "notes.txt", "cat nap", 2)
        by_keyword = Document(id="1000", name="notes.txt", content="cat nap", word_count=2)

        assert by_position == by_keyword

    def test_word_count_defaults_to_zero(self):
        assert Document(id="1", name="a.txt", content="").word_count == 0

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            Document(id="", name="a.txt", content="cat")

    def test_negative_word_count_rejected(self):
        with pytest.raises(ValidationError):
            Document(id="1", name="a.txt", content="cat", word_count=-1)

    def test_frozen(self):
        document = Document(id="1", name="a.txt", content="cat")

        with pytest.raises(dataclasses.FrozenInstanceError):
            document.name = "b.txt"

    def test_from_dict_accepts_both_key_styles(self):
        camel = Document.from_dict({"id": 7, "name": "a.txt", "content": "cat", "wordCount": 1})
        snake = Document.from_dict({"id": "7", "name": "a.txt", "content": "cat", "word_count": 1})

        assert camel == snake
        assert camel.to_dict() == {"id": "7", "name": "a.txt", "content": "cat", "wordCount": 1}


class TestPosting:
    def test_frequency_is_required(self):
        with pytest.raises((TypeError, ValidationError)):
            Posting(doc_id="1")

    def test_frequency_must_be_positive(self):
        with pytest.raises(ValidationError):
            Posting(doc_id="1", frequency=0)

    def test_doc_name_defaults_to_empty(self):
        posting = Posting(doc_id="1", frequency=2)

        assert posting.to_dict() == {"docId": "1", "frequency": 2, "docName": ""}


class TestIngestionReport:
    def test_counts(self):
        report = IngestionReport(
            ingested=[Document(id="1", name="a.txt", content="cat")],
            failures=[IngestionFailure(filename="b.png", error_kind="UnsupportedFormat", message="nope")],
        )

        assert report.succeeded == 1
        assert report.failed == 1
