"""Tests for theme classification."""

import pytest

from crosslink_auditor.config import AuditConfig
from crosslink_auditor.themes import ThemeClassifier


@pytest.fixture
def classifier(config):
    return ThemeClassifier(config)


class TestScoreThemes:
    """Tests for raw theme scoring."""

    def test_scores_every_theme_in_order(self, classifier, make_item, config):
        """Test that every taxonomy theme gets a score, in taxonomy order."""
        scores = classifier.score_themes(make_item("a"))

        assert list(scores) == list(config.theme_names)
        assert all(score == 0 for score in scores.values())

    def test_body_counts_whole_words_only(self, classifier, make_item):
        """Test that partial-word matches don't count."""
        item = make_item("a", body_text="rebilling billings prebilling")

        assert classifier.score_themes(item)["Billing & payments"] == 0

    def test_body_counts_each_occurrence(self, classifier, make_item):
        """Test that every whole-word occurrence adds a point."""
        item = make_item("a", body_text="Billing, billing and more BILLING.")

        assert classifier.score_themes(item)["Billing & payments"] == 3

    def test_topic_phrase_containing_keyword(self, classifier, make_item):
        """Test +2 per keyword contained in a topic phrase."""
        item = make_item("a", topics=["payment processing fees"])

        # "payment" and "payment processing" both match
        assert classifier.score_themes(item)["Billing & payments"] == 4

    def test_stop_word_only_topic_is_ignored(self, classifier, make_item):
        """Test that phrases made entirely of stop words don't score."""
        item = make_item("a", topics=["software business"])

        assert classifier.score_themes(item)["Software & technology"] == 0

    def test_topic_with_content_word_scores(self, classifier, make_item):
        """Test that a phrase with a non-stop word is matched."""
        item = make_item("a", topics=["software pricing"])

        assert classifier.score_themes(item)["Software & technology"] == 2


class TestClassify:
    """Tests for the classify method."""

    def test_threshold_reached(self, classifier, make_item):
        """Test that a score of exactly 5 qualifies."""
        item = make_item("a", body_text="billing " * 5)

        assert classifier.classify(item) == ("Billing & payments",)

    def test_threshold_not_reached(self, classifier, make_item):
        """Test that a score of 4 does not qualify."""
        item = make_item("a", body_text="billing " * 4)

        assert classifier.classify(item) == ()

    def test_topic_and_body_points_combine(self, classifier, make_item):
        """Test that topic points and body points add up."""
        item = make_item("a", body_text="invoicing", topics=["payment processing fees"])

        assert classifier.classify(item) == ("Billing & payments",)

    def test_multi_label_in_taxonomy_order(self, classifier, make_item):
        """Test that a keyword shared by two themes qualifies both."""
        item = make_item("a", body_text="scheduling " * 5)

        assert classifier.classify(item) == ("Business operations", "Staff management")

    def test_stop_words_affect_qualification(self, classifier, make_item):
        """Test that an ignored topic can keep a theme below threshold."""
        ignored = make_item("a", body_text="platform platform platform", topics=["software business"])
        counted = make_item("b", body_text="platform platform platform", topics=["software pricing"])

        assert "Software & technology" not in classifier.classify(ignored)
        assert "Software & technology" in classifier.classify(counted)

    def test_empty_item(self, classifier, make_item):
        """Test that an item with no text has no themes."""
        assert classifier.classify(make_item("a")) == ()

    def test_custom_threshold(self, make_item):
        """Test that the threshold comes from config."""
        classifier = ThemeClassifier(AuditConfig(theme_score_threshold=2))
        item = make_item("a", body_text="billing billing")

        assert classifier.classify(item) == ("Billing & payments",)

    def test_custom_taxonomy(self, make_item):
        """Test classifying against a custom taxonomy."""
        config = AuditConfig(theme_taxonomy={"Grooming": ("grooming", "bath")})
        classifier = ThemeClassifier(config)
        item = make_item("a", body_text="grooming bath grooming bath grooming")

        assert classifier.classify(item) == ("Grooming",)
