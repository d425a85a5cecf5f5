"""
Search indexing and query package.

This package provides the in-memory search core:
- analyzers: Tokenizer pipeline (lowercase, word split, minimum length)
- inverted_index: Term -> postings mapping with prefix lookup
- document_store: Document records keyed by time-derived ids
- highlight: Prefix-aware highlighting and result previews
"""
