"""Tests for snippet cutting and keyword highlighting."""
from __future__ import annotations

import pytest

from docsift.retrieval.snippets import find_offset, highlight, make_snippet, query_keywords


class TestQueryKeywords:
    def test_punctuation_stripped_forms_added(self):
        assert query_keywords("Lazy dog, lazy!") == ["lazy!", "dog,", "Lazy", "dog"]

    def test_blank(self):
        assert query_keywords("   ") == []


class TestFindOffset:
    def test_whitespace_flexible(self):
        assert find_offset("The quick  brown\nfox", ["brown fox"]) == 11

    def test_first_term_in_order_wins(self):
        assert find_offset("a b c", ["zz", "c", "a"]) == 4

    def test_case_insensitive(self):
        assert find_offset("Hello WORLD", ["world"]) == 6

    def test_not_found(self):
        assert find_offset("abc", ["xyz", ""]) is None


class TestMakeSnippet:
    TEXT = " ".join(["alpha"] * 100 + ["TARGET"] + ["omega"] * 100)

    def test_short_text_returned_whole(self):
        assert make_snippet("  short text  ", 0, 300) == "short text"

    def test_window_centred_on_offset(self):
        offset = self.TEXT.index("TARGET")
        snippet = make_snippet(self.TEXT, offset, 100)
        assert "TARGET" in snippet
        assert snippet.startswith("...") and snippet.endswith("...")
        assert len(snippet) <= 100 + 6

    def test_no_offset_starts_at_beginning(self):
        snippet = make_snippet(self.TEXT, None, 50)
        assert snippet.startswith("alpha")
        assert snippet.endswith("...")

    def test_words_not_cut(self):
        snippet = make_snippet(self.TEXT, self.TEXT.index("TARGET"), 100)
        words = snippet.strip(".").split()
        assert set(words) <= {"alpha", "omega", "TARGET"}

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            make_snippet("text", 0, 0)


class TestHighlight:
    def test_whole_words_case_insensitive(self):
        assert highlight("The LAZY dog sat on dogma.", ["lazy", "dog"]) == "The **LAZY** **dog** sat on dogma."

    def test_idempotent(self):
        once = highlight("lazy dog, lazy dog", ["lazy", "dog"])
        assert highlight(once, ["lazy", "dog"]) == once

    def test_regex_characters_are_literal(self):
        assert highlight("I like c++ a lot, not c", ["c++"]) == "I like **c++** a lot, not c"
        assert highlight("a.b and axb", ["a.b"]) == "**a.b** and axb"

    def test_custom_markers(self):
        assert highlight("find me", ["me"], "<mark>", "</mark>") == "find <mark>me</mark>"

    def test_no_keywords(self):
        assert highlight("unchanged", []) == "unchanged"
