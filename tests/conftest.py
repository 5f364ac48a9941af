"""
Pytest configuration and fixtures for catalog organizer tests
"""

import pytest

from catalog_organizer.core.classification import ProductClassifier
from catalog_organizer.core.classification.rules import RuleTableParser
from catalog_organizer.core.models import Product
from catalog_organizer.core.store.memory_store import InMemoryProductStore

SAMPLE_RULES_YAML = """
product_type_rules:
  - keyword: soy candle
    product_type: CANDLE
    tags: [candle, soy-wax]
  - keyword: candle
    product_type: CANDLE
    tags: [candle]
  - keyword: body spray
    product_type: BODY SPRAY MIST
    tags: [body-spray]
  - keyword: lotion
    product_type: LOTION
    tags: [lotion]
tag_rules:
  - keyword: calm down girl
    tags: [calm-down-girl]
scent_rules:
  floral: [lavender, rose]
  citrus: [lemon, orange]
"""


@pytest.fixture(scope="session")
def rule_table():
    """Small rule table independent of the bundled rules."""
    return RuleTableParser().load_from_string(SAMPLE_RULES_YAML)


@pytest.fixture
def classifier(rule_table):
    return ProductClassifier(rule_table)


@pytest.fixture
def sample_products():
    """A handful of products: some unclassified, one already organized."""
    return [
        Product(id="1", title="Lavender Dreams Soy Candle", inventory_quantity=3),
        Product(id="2", title="Lemon Body Spray", product_type="LOTION", tags=["sale"], inventory_quantity=10),
        Product(
            id="3",
            title="Rose Lotion",
            product_type="LOTION",
            tags=["lotion", "floral"],
            inventory_quantity=0,
        ),
        Product(id="4", title="Mystery Gift Box", inventory_quantity=7),
        Product(id="5", title="Calm Down Girl Candle", tags=["Featured"], inventory_quantity=1),
    ]


@pytest.fixture
def memory_store(sample_products):
    return InMemoryProductStore(sample_products)
