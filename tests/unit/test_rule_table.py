"""
Unit tests for loading classification rule tables from YAML.
"""

import pytest

from catalog_organizer.core.classification.rules import (
    DEFAULT_RULES_PATH,
    RuleTable,
    RuleTableParser,
    load_rule_table,
)
from catalog_organizer.core.errors import RuleTableError
from catalog_organizer.core.models import ClassificationRule


class TestRuleTable:
    """Test rule partitioning and ordering."""

    def test_type_rules_sorted_longest_first(self, rule_table):
        lengths = [len(rule.keyword) for rule in rule_table.type_rules]

        assert lengths == sorted(lengths, reverse=True)
        assert rule_table.type_rules[0].keyword == "soy candle"

    def test_tag_only_rules_kept_apart(self, rule_table):
        assert [rule.keyword for rule in rule_table.tag_rules] == ["calm down girl"]
        assert all(rule.product_type is not None for rule in rule_table.type_rules)

    def test_scent_mapping_expanded(self, rule_table):
        pairs = {(rule.keyword, rule.tag) for rule in rule_table.scent_rules}

        assert pairs == {
            ("lavender", "floral"),
            ("rose", "floral"),
            ("lemon", "citrus"),
            ("orange", "citrus"),
        }

    def test_product_types_distinct(self, rule_table):
        assert rule_table.product_types.count("CANDLE") == 1
        assert set(rule_table.product_types) == {"CANDLE", "BODY SPRAY MIST", "LOTION"}

    def test_keywords_are_normalized(self):
        rule = ClassificationRule(keyword="  Soy CANDLE ", product_type="CANDLE", tags="Candle, Soy-Wax")

        assert rule.keyword == "soy candle"
        assert rule.tags == frozenset({"candle", "soy-wax"})

    def test_len_counts_every_rule(self, rule_table):
        assert len(rule_table) == 4 + 1 + 4


class TestRuleTableParser:
    """Test YAML parsing and validation."""

    @pytest.fixture
    def parser(self):
        return RuleTableParser()

    def test_scent_rules_as_list(self, parser):
        table = parser.parse_dict({"scent_rules": [{"keyword": "cedar", "tag": "woodsy"}]})

        assert table.scent_rules[0].tag == "woodsy"

    def test_empty_document_gives_empty_table(self, parser):
        table = parser.load_from_string("")

        assert len(table) == 0

    def test_empty_keyword_rejected(self, parser):
        with pytest.raises(RuleTableError):
            parser.load_from_string("product_type_rules:\n  - keyword: ''\n    product_type: X\n")

    def test_unknown_rule_shape_rejected(self, parser):
        with pytest.raises(RuleTableError):
            parser.load_from_string("product_type_rules:\n  - just-a-string\n")

    def test_non_mapping_document_rejected(self, parser):
        with pytest.raises(RuleTableError):
            parser.load_from_string("- a\n- b\n")

    def test_malformed_yaml_rejected(self, parser):
        with pytest.raises(RuleTableError):
            parser.load_from_string("product_type_rules: [unclosed")

    def test_missing_file_rejected(self, parser, tmp_path):
        with pytest.raises(RuleTableError):
            parser.load_from_file(tmp_path / "missing.yaml")

    def test_save_and_load(self, parser, rule_table, tmp_path):
        path = tmp_path / "rules" / "saved.yaml"

        parser.save_to_file(rule_table, path)
        loaded = parser.load_from_file(path)

        assert loaded.type_rules == rule_table.type_rules
        assert loaded.tag_rules == rule_table.tag_rules
        assert set(loaded.scent_rules) == set(rule_table.scent_rules)

    def test_bundled_rules_load(self):
        table = load_rule_table()

        assert DEFAULT_RULES_PATH.exists()
        assert "CANDLE" in table.product_types
        assert isinstance(table, RuleTable)
        assert load_rule_table() is table
