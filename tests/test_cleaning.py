"""Tests for response cleaning."""

from argmap.extraction.cleaning import clean_response


class TestCleanResponse:
    """Tests for clean_response."""

    def test_removes_think_block(self):
        raw = "<think>\nweighing options\n</think>\nSUMMARY:\nText"
        assert clean_response(raw) == "SUMMARY:\nText"

    def test_removes_case_insensitive(self):
        assert clean_response("<THINK>x</Think>Answer") == "Answer"

    def test_removes_unbalanced_tags(self):
        assert clean_response("Answer</think>") == "Answer"

    def test_collapses_blank_runs(self):
        assert clean_response("a\n\n\n\nb") == "a\n\nb"

    def test_keeps_single_blank_line(self):
        assert clean_response("a\n\nb") == "a\n\nb"

    def test_strips(self):
        assert clean_response("  \n text \n ") == "text"

    def test_empty(self):
        assert clean_response("") == ""
