"""
Product Classifier
Suggests a product type and tags for a product title using the keyword rule table.
Pure and deterministic: no I/O, and re-classifying a result changes nothing.
"""

from collections.abc import Iterable

from ..models import DEFAULT_PRODUCT_TYPE, ClassificationResult, ClassificationRule
from .rules import RuleTable, load_rule_table


class ProductClassifier:
    """Longest-keyword-match classifier over a RuleTable."""

    def __init__(self, rule_table: RuleTable | None = None):
        self.rule_table = rule_table if rule_table is not None else load_rule_table()

    def match_product_type_rule(self, title: str) -> ClassificationRule | None:
        """Return the winning product-type rule for a title, or None."""
        lowered = title.lower()
        for rule in self.rule_table.type_rules:
            if rule.matches(lowered):
                return rule
        return None

    def classify(self, title: str, existing_tags: Iterable[str] = ()) -> ClassificationResult:
        """
        Classify a single title.

        Args:
            title: Product title
            existing_tags: Tags already on the product; always kept

        Returns:
            ClassificationResult with the suggested product type and the tag union
        """
        tags = set(existing_tags)

        if not title or not title.strip():
            return ClassificationResult(product_type=DEFAULT_PRODUCT_TYPE, tags=frozenset(tags))

        lowered = title.lower()
        product_type = DEFAULT_PRODUCT_TYPE

        winner = self.match_product_type_rule(title)
        if winner is not None:
            product_type = winner.product_type
            tags |= winner.tags

        for rule in self.rule_table.tag_rules:
            if rule.matches(lowered):
                tags |= rule.tags

        for scent in self.rule_table.scent_rules:
            if scent.matches(lowered):
                tags.add(scent.tag)

        return ClassificationResult(product_type=product_type, tags=frozenset(tags))


def classify(
    title: str,
    existing_tags: Iterable[str] = (),
    rule_table: RuleTable | None = None,
) -> ClassificationResult:
    """Classify a title with the given rule table (the bundled rules by default)."""
    return ProductClassifier(rule_table).classify(title, existing_tags)
