"""Unit tests for citation extraction."""

from __future__ import annotations

import pytest

from veritas.core.citations import Citation, deduplicate_citations, extract_citations


@pytest.mark.unit
class TestExtractCitations:
    def test_markdown_links(self) -> None:
        text = "Fleming noticed it in 1928 [BBC](https://bbc.co.uk/history) and [Nobel](https://nobelprize.org/1945)."

        citations = extract_citations(text)

        assert citations == [
            Citation(title="BBC", url="https://bbc.co.uk/history"),
            Citation(title="Nobel", url="https://nobelprize.org/1945"),
        ]

    def test_bare_urls_in_order(self) -> None:
        text = "See https://a.example/x, then [B](https://b.example/y) and http://c.example."

        urls = [c.url for c in extract_citations(text)]

        assert urls == ["https://a.example/x", "https://b.example/y", "http://c.example"]

    def test_bare_url_uses_url_as_title(self) -> None:
        [citation] = extract_citations("Source: https://archive.org/details/report")
        assert citation.title == citation.url

    def test_no_links(self) -> None:
        assert extract_citations("No sources were found.") == []


@pytest.mark.unit
class TestDeduplicateCitations:
    def test_cosmetic_duplicates_removed(self) -> None:
        citations = [
            Citation(title="first", url="https://Example.org/page/"),
            Citation(title="second", url="https://example.org/page#section"),
            Citation(title="third", url="https://example.org/other"),
        ]

        unique = deduplicate_citations(citations)

        assert [c.title for c in unique] == ["first", "third"]

    def test_query_string_distinguishes(self) -> None:
        citations = [
            Citation(title="a", url="https://example.org/search?q=1"),
            Citation(title="b", url="https://example.org/search?q=2"),
        ]

        assert len(deduplicate_citations(citations)) == 2
