"""Tests for line splitting and section header detection."""

import pytest

from argmap.extraction.rules import HeaderRules
from argmap.extraction.segmenter import Section, SectionSegmenter


@pytest.fixture
def segmenter():
    return SectionSegmenter()


class TestSplitLines:
    """Tests for SectionSegmenter.split_lines."""

    def test_trims_and_drops_blank_lines(self, segmenter):
        assert segmenter.split_lines("  one  \n\n   \ntwo\n") == ["one", "two"]

    def test_drops_marker_lines(self, segmenter):
        text = "SUMMARY:\nShort summary.\nDETAILED ANALYSIS:\nBody"
        assert segmenter.split_lines(text) == ["Short summary.", "Body"]

    def test_marker_with_trailing_text_is_dropped(self, segmenter):
        assert segmenter.split_lines("SUMMARY: inline summary") == []

    def test_markers_case_insensitive(self, segmenter):
        assert segmenter.split_lines("Summary:\nDetailed Analysis:") == []

    def test_empty_input(self, segmenter):
        assert segmenter.split_lines("") == []


class TestIsHeader:
    """Tests for header candidate detection."""

    def test_colon_line_is_header(self, segmenter):
        assert segmenter.is_header("Utilitarian Analysis:")

    def test_line_without_colon(self, segmenter):
        assert not segmenter.is_header("Utilitarian Analysis")

    @pytest.mark.parametrize(
        "line",
        [
            "For example: parking fees",
            "A 2019 study: results",
            "Research findings:",
            "However: a caveat",
            "HOWEVER: shouting",
        ],
    )
    def test_excluded_keywords(self, segmenter, line):
        assert not segmenter.is_header(line)

    def test_length_limit(self, segmenter):
        assert segmenter.is_header("x" * 148 + ":")
        assert not segmenter.is_header("x" * 149 + ":")

    def test_custom_rules(self):
        segmenter = SectionSegmenter(HeaderRules(excluded_keywords=("note",), max_length=20))
        assert segmenter.is_header("Research findings:")
        assert not segmenter.is_header("Note: careful")
        assert not segmenter.is_header("A rather long header line:")


class TestSegment:
    """Tests for grouping lines into sections."""

    def test_lines_before_first_header_discarded(self, segmenter):
        sections = segmenter.segment("Preamble line here\nRisks:\nA real risk here.")
        assert sections == [Section("Risks:", ("A real risk here.",))]

    def test_multiple_sections_in_order(self, segmenter):
        text = "First:\na\nb\nSecond:\nc"
        sections = segmenter.segment(text)
        assert [s.header for s in sections] == ["First:", "Second:"]
        assert sections[0].lines == ("a", "b")
        assert sections[1].lines == ("c",)

    def test_empty_section_kept(self, segmenter):
        sections = segmenter.segment("Empty:\nFull:\nline")
        assert sections[0].lines == ()

    def test_no_headers(self, segmenter):
        assert segmenter.segment("just prose\nmore prose") == []

    def test_excluded_header_becomes_body(self, segmenter):
        sections = segmenter.segment("Analysis:\nFor example: the Stockholm trial")
        assert sections[0].lines == ("For example: the Stockholm trial",)


class TestSectionTitle:
    """Tests for Section.title."""

    def test_removes_first_colon(self):
        assert Section("Utilitarian Analysis:").title == "Utilitarian Analysis"

    def test_keeps_later_colons(self):
        assert Section("Rights: Duty: Care").title == "Rights Duty: Care"
