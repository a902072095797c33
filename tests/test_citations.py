"""Tests for splitting model output into display text and citations."""

import pytest

from retrieval_toolkit.config import RetrievalSettings
from retrieval_toolkit.conversation_database.data_models.source import Citation
from retrieval_toolkit.utils.citations import ResponseParser


@pytest.fixture
def parser() -> ResponseParser:
    return ResponseParser()


def test_trailing_list_is_split_off(parser):
    parsed = parser.parse('Paris is the capital.\n[{"url":"a"},{"url":"b"}]')

    assert parsed.text == "Paris is the capital."
    assert parsed.citations == [Citation(url="a"), Citation(url="b")]


def test_bold_sources_heading_is_stripped(parser):
    parsed = parser.parse('The answer is 42.\n\n**Sources:**\n[{"url":"a"}]')

    assert parsed.text == "The answer is 42."
    assert "Sources:" not in parsed.text
    assert parsed.citations == [Citation(url="a")]


@pytest.mark.parametrize(
    "heading",
    ["Sources:", "References:", "**References:**", "**Sources**:", "**References**:", "List of Filepaths and URLs:"],
)
def test_every_known_heading_is_stripped(parser, heading):
    parsed = parser.parse(f'Body text.\n{heading}\n[{{"url": "/notes/a.md"}}]')

    assert parsed.text == "Body text."
    assert parsed.citations == [Citation(url="/notes/a.md")]


def test_heading_only_stripped_as_suffix(parser):
    parsed = parser.parse('Sources: are discussed here.\n[{"url":"a"}]')

    assert parsed.text == "Sources: are discussed here."


def test_malformed_block_keeps_full_text(parser):
    response = 'Some answer.\n[{"url": "https://example.com"'

    parsed = parser.parse(response)

    assert parsed.text == response
    assert parsed.citations == []


def test_empty_list_marker_is_dropped(parser):
    parsed = parser.parse("Nothing to cite here.\n[]")

    assert parsed.text == "Nothing to cite here."
    assert parsed.citations == []


def test_no_bracket_returns_text_unchanged(parser):
    parsed = parser.parse("Plain answer without sources.")

    assert parsed.text == "Plain answer without sources."
    assert parsed.citations == []


def test_citations_not_requested_returns_text_verbatim(parser):
    response = 'Answer.\n[{"url":"a"}]'

    parsed = parser.parse(response, include_citations=False)

    assert parsed.text == response
    assert parsed.citations == []


def test_citations_not_requested_only_drops_empty_list_marker(parser):
    parsed = parser.parse("Answer.\n[]", include_citations=False)

    assert parsed.text == "Answer.\n"
    assert parsed.citations == []


def test_bracket_in_prose_that_is_not_json_keeps_text(parser):
    response = "See item [3] in the list for details."

    parsed = parser.parse(response)

    assert parsed.text == response
    assert parsed.citations == []


def test_entries_without_url_are_ignored(parser):
    parsed = parser.parse('Answer.[{"url": "a"}, "https://b.example", {"title": "c"}]')

    assert parsed.text == "Answer."
    assert parsed.citations == [Citation(url="a")]


def test_list_without_any_citation_is_a_decode_failure(parser):
    response = 'Answer. [1, 2, {"title": "x"}]'

    parsed = parser.parse(response)

    assert parsed.text == response
    assert parsed.citations == []


def test_json_object_instead_of_list_keeps_text(parser):
    response = 'Answer. [not json] {"url": "a"}'

    parsed = parser.parse(response)

    assert parsed.text == response


def test_custom_heading_table_from_settings():
    settings = RetrievalSettings(heading_variants=("Quellen:",))
    parser = ResponseParser.from_settings(settings)

    parsed = parser.parse('Antwort.\nQuellen:\n[{"url":"a"}]')

    assert parsed.text == "Antwort."
    assert parser.parse('Answer.\nSources:\n[{"url":"a"}]').text == "Answer.\nSources:"
