"""
Keyword-based product classification.
"""

from .classifier import ProductClassifier, classify
from .rules import DEFAULT_RULES_PATH, RuleTable, RuleTableParser, load_rule_table

__all__ = [
    "DEFAULT_RULES_PATH",
    "ProductClassifier",
    "RuleTable",
    "RuleTableParser",
    "classify",
    "load_rule_table",
]
