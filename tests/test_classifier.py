"""Tests for argument and detail classification."""

import pytest

from argmap.extraction.classifier import ArgumentClassifier, Classification
from argmap.extraction.models import ArgumentType, Framework
from argmap.extraction.rules import DetailRules, RuleTable


@pytest.fixture
def classifier():
    return ArgumentClassifier()


class TestSectionClassification:
    """Tests for section framework and type."""

    def test_section_framework(self, classifier):
        assert classifier.section_framework("Utilitarian Analysis") == Framework.CONSEQUENCE_BASED

    def test_counterargument_section_is_opposing(self, classifier):
        assert classifier.section_type("Critical Counterarguments") == ArgumentType.OPPOSING

    def test_opposing_views_section(self, classifier):
        assert classifier.section_type("Opposing Views") == ArgumentType.OPPOSING

    def test_other_sections_neutral(self, classifier):
        assert classifier.section_type("Synthesis") == ArgumentType.NEUTRAL


class TestArgumentClassification:
    """Tests for level-2 argument lines."""

    def test_length_threshold(self, classifier):
        assert not classifier.is_argument("x" * 20)
        assert classifier.is_argument("x" * 21)

    def test_classify(self, classifier):
        result = classifier.classify(
            "This clearly benefits society through measurable welfare gains.",
            Framework.CONSEQUENCE_BASED,
        )
        assert result == Classification(
            type=ArgumentType.SUPPORTING,
            framework=Framework.CONSEQUENCE_BASED,
            strength=4,
        )

    def test_framework_passed_through(self, classifier):
        result = classifier.classify("A neutral observation about zoning", None)
        assert result.framework is None
        assert result.type == ArgumentType.NEUTRAL


class TestDetailClassification:
    """Tests for look-ahead detail lines."""

    def test_counter_detail(self, classifier):
        line = "However critics argue it ignores individual rights."
        assert classifier.classify_detail(line) == ArgumentType.COUNTERARGUMENT

    def test_evidence_detail(self, classifier):
        line = "For example, Stockholm cut traffic by a fifth."
        assert classifier.classify_detail(line) == ArgumentType.EVIDENCE

    def test_short_line_not_detail(self, classifier):
        assert classifier.classify_detail("But why?") is None

    def test_length_boundary(self, classifier):
        assert classifier.classify_detail("evidence" + "x" * 7) is None  # 15 chars
        assert classifier.classify_detail("evidence" + "x" * 8) == ArgumentType.EVIDENCE

    def test_line_without_keyword(self, classifier):
        assert classifier.classify_detail("Commuters would pay more each day.") is None


class TestCollectDetails:
    """Tests for the bounded look-ahead."""

    def test_collects_up_to_two(self, classifier):
        following = [
            "However critics argue it ignores rights.",
            "Research from Stockholm supports the claim.",
            "Furthermore this third line would qualify too.",
        ]
        details = classifier.collect_details(following)
        assert [t for _, t in details] == [ArgumentType.COUNTERARGUMENT, ArgumentType.EVIDENCE]

    def test_stops_at_first_non_detail(self, classifier):
        following = [
            "A plain line that is long enough.",
            "Research that would otherwise qualify.",
        ]
        assert classifier.collect_details(following) == []

    def test_empty(self, classifier):
        assert classifier.collect_details([]) == []

    def test_custom_lookahead(self):
        classifier = ArgumentClassifier(RuleTable(detail=DetailRules(lookahead=1)))
        following = [
            "Research from one city is encouraging.",
            "Additionally, a second city reports gains.",
        ]
        assert len(classifier.collect_details(following)) == 1
