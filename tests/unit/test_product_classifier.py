"""
Unit tests for the keyword product classifier.
"""

import pytest

from catalog_organizer.core.classification import ProductClassifier, classify
from catalog_organizer.core.classification.rules import RuleTable
from catalog_organizer.core.models import DEFAULT_PRODUCT_TYPE, ClassificationRule, ScentRule


class TestProductClassifier:
    """Test product type and tag suggestions."""

    def test_longest_keyword_wins(self, classifier):
        result = classifier.classify("Lavender Dreams Soy Candle")

        assert result.product_type == "CANDLE"
        assert {"candle", "soy-wax", "floral"} <= result.tags

    def test_longest_keyword_wins_regardless_of_table_order(self):
        table = RuleTable(
            [
                ClassificationRule(keyword="candle", product_type="CANDLE_TYPE"),
                ClassificationRule(keyword="soy candle", product_type="SOY_CANDLE_TYPE"),
            ]
        )
        classifier = ProductClassifier(table)

        assert classifier.classify("Vanilla Soy Candle").product_type == "SOY_CANDLE_TYPE"
        assert classifier.classify("Vanilla Candle").product_type == "CANDLE_TYPE"

    def test_equal_length_keywords_keep_table_order(self):
        table = RuleTable(
            [
                ClassificationRule(keyword="abc", product_type="FIRST"),
                ClassificationRule(keyword="xyz", product_type="SECOND"),
            ]
        )

        assert ProductClassifier(table).classify("xyz and abc").product_type == "FIRST"

    def test_matching_is_case_insensitive(self, classifier):
        result = classifier.classify("ROSE LOTION")

        assert result.product_type == "LOTION"
        assert "floral" in result.tags

    def test_no_match_defaults_to_other(self, classifier):
        result = classifier.classify("Mystery Gift Box", ["gift"])

        assert result.product_type == DEFAULT_PRODUCT_TYPE
        assert result.tags == frozenset({"gift"})

    @pytest.mark.parametrize("title", ["", "   "])
    def test_empty_title_keeps_existing_tags(self, classifier, title):
        result = classifier.classify(title, ["keep-me"])

        assert result.product_type == DEFAULT_PRODUCT_TYPE
        assert result.tags == frozenset({"keep-me"})

    def test_existing_tags_are_never_removed(self, classifier):
        result = classifier.classify("Lemon Body Spray", ["sale", "summer"])

        assert {"sale", "summer", "body-spray", "citrus"} <= result.tags

    def test_tag_only_rule_applies_alongside_type_rule(self, classifier):
        result = classifier.classify("Calm Down Girl Candle")

        assert result.product_type == "CANDLE"
        assert {"calm-down-girl", "candle"} <= result.tags

    def test_tag_only_rule_does_not_set_product_type(self, classifier):
        result = classifier.classify("Calm Down Girl Gift Card")

        assert result.product_type == DEFAULT_PRODUCT_TYPE
        assert result.tags == frozenset({"calm-down-girl"})

    def test_all_matching_scents_are_added(self, classifier):
        result = classifier.classify("Lemon Rose Orange Lotion")

        assert {"citrus", "floral"} <= result.tags

    def test_classification_is_idempotent(self, classifier):
        first = classifier.classify("Lavender Lemon Soy Candle", ["gift"])
        second = classifier.classify("Lavender Lemon Soy Candle", first.tags)

        assert second == first

    def test_match_product_type_rule(self, classifier):
        rule = classifier.match_product_type_rule("Big Soy Candle")

        assert rule is not None
        assert rule.keyword == "soy candle"
        assert classifier.match_product_type_rule("Gift Card") is None

    def test_scent_rules_in_custom_table(self):
        table = RuleTable(scent_rules=[ScentRule(keyword="Cedar", tag="Woodsy")])

        result = ProductClassifier(table).classify("Cedar Bar")

        assert result.product_type == DEFAULT_PRODUCT_TYPE
        assert result.tags == frozenset({"woodsy"})


class TestBundledRules:
    """Test classification with the rules shipped in the package."""

    def test_soy_candle_with_scent(self):
        result = classify("Lavender Dreams Soy Candle")

        assert result.product_type == "CANDLE"
        assert {"floral", "candle", "soy-wax"} <= result.tags

    @pytest.mark.parametrize(
        "title,expected_type",
        [
            ("Peppermint Whipped Body Butter", "BODY BUTTER"),
            ("Ocean Breeze Room Spray", "ROOM SPRAY"),
            ("Pink Sugar Body Mist", "BODY SPRAY MIST"),
            ("Rosemary Herbal Hair Oil", "BODY OIL"),
            ("Man Cave Wax Melt", "WAX MELT"),
            ("Calm Down Girl T-Shirt", "CLOTHING"),
            ("Gift Card", "OTHER"),
        ],
    )
    def test_product_types(self, title, expected_type):
        assert classify(title).product_type == expected_type
