"""
Classification Rule Table
Holds the keyword -> product type/tag rules and the keyword -> scent tag rules,
and loads them from YAML files.
"""

import logging
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from ..errors import RuleTableError
from ..models import ClassificationRule, ScentRule

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).resolve().parents[2] / "data" / "classification_rules.yaml"


class RuleTable:
    """
    Immutable set of classification rules.

    Product-type rules are kept sorted by keyword length, longest first, so the
    first match found is always the most specific one. Ties keep table order.
    """

    def __init__(
        self,
        rules: Iterable[ClassificationRule] = (),
        scent_rules: Iterable[ScentRule] = (),
    ):
        rules = list(rules)
        self._type_rules = tuple(
            sorted(
                (rule for rule in rules if not rule.is_tag_only),
                key=lambda rule: len(rule.keyword),
                reverse=True,
            )
        )
        self._tag_rules = tuple(rule for rule in rules if rule.is_tag_only)
        self._scent_rules = tuple(scent_rules)

    @property
    def type_rules(self) -> tuple[ClassificationRule, ...]:
        return self._type_rules

    @property
    def tag_rules(self) -> tuple[ClassificationRule, ...]:
        return self._tag_rules

    @property
    def scent_rules(self) -> tuple[ScentRule, ...]:
        return self._scent_rules

    @property
    def product_types(self) -> list[str]:
        """Distinct product type labels, in match order."""
        seen: list[str] = []
        for rule in self._type_rules:
            if rule.product_type not in seen:
                seen.append(rule.product_type)
        return seen

    def __len__(self) -> int:
        return len(self._type_rules) + len(self._tag_rules) + len(self._scent_rules)

    def __repr__(self) -> str:
        return (
            f"RuleTable(type_rules={len(self._type_rules)}, "
            f"tag_rules={len(self._tag_rules)}, scent_rules={len(self._scent_rules)})"
        )


class RuleTableParser:
    """Parser for YAML rule files."""

    def _parse_scent_rules(self, raw: Any) -> list[ScentRule]:
        # Either {tag: [keywords]} or [{keyword, tag}]
        if isinstance(raw, dict):
            return [
                ScentRule(keyword=keyword, tag=tag)
                for tag, keywords in raw.items()
                for keyword in (keywords or [])
            ]
        return [ScentRule(**entry) for entry in raw or []]

    def parse_dict(self, rules_dict: dict[str, Any] | None) -> RuleTable:
        """Validate a rules dictionary and build a RuleTable.

        Raises:
            RuleTableError: If the dictionary doesn't match the rule schema
        """
        if rules_dict is None:
            rules_dict = {}
        if not isinstance(rules_dict, dict):
            raise RuleTableError(f"Rule file must be a mapping, got {type(rules_dict).__name__}")

        try:
            rules = [ClassificationRule(**entry) for entry in rules_dict.get("product_type_rules") or []]
            for entry in rules_dict.get("tag_rules") or []:
                rules.append(ClassificationRule(**{**entry, "product_type": None}))
            scent_rules = self._parse_scent_rules(rules_dict.get("scent_rules"))
        except (TypeError, ValidationError) as e:
            raise RuleTableError(f"Invalid rule definition: {e}") from e

        table = RuleTable(rules, scent_rules)
        logger.debug(f"Parsed {table!r}")
        return table

    def load_from_file(self, file_path: Union[str, Path]) -> RuleTable:
        """Load a rule table from a YAML file.

        Args:
            file_path: Path to the YAML rule file

        Returns:
            Parsed RuleTable

        Raises:
            RuleTableError: If the file is missing, malformed or invalid
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise RuleTableError(f"Rule file not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                rules_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RuleTableError(f"Malformed rule file {file_path}: {e}") from e

        table = self.parse_dict(rules_dict)
        logger.info(f"Loaded {len(table)} classification rules from {file_path.name}")
        return table

    def load_from_string(self, yaml_string: str) -> RuleTable:
        """Load a rule table from a YAML string."""
        try:
            rules_dict = yaml.safe_load(yaml_string)
        except yaml.YAMLError as e:
            raise RuleTableError(f"Malformed rules: {e}") from e
        return self.parse_dict(rules_dict)

    def save_to_file(self, table: RuleTable, file_path: Union[str, Path]) -> None:
        """Save a RuleTable to a YAML file that load_from_file reads back."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        scents: dict[str, list[str]] = {}
        for rule in table.scent_rules:
            scents.setdefault(rule.tag, []).append(rule.keyword)

        rules_dict = {
            "product_type_rules": [
                {"keyword": rule.keyword, "product_type": rule.product_type, "tags": sorted(rule.tags)}
                for rule in table.type_rules
            ],
            "tag_rules": [
                {"keyword": rule.keyword, "tags": sorted(rule.tags)} for rule in table.tag_rules
            ],
            "scent_rules": scents,
        }
        with open(file_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(rules_dict, f, default_flow_style=False, sort_keys=False)


@lru_cache(maxsize=None)
def load_rule_table(file_path: Union[str, Path, None] = None) -> RuleTable:
    """Load (and cache) a rule table; the bundled rules when no path is given."""
    return RuleTableParser().load_from_file(file_path or DEFAULT_RULES_PATH)
