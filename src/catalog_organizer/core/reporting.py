"""
Catalog Reporting Module

Tabular views of the catalog, preview batches and apply reports for operator
review and CSV export.
"""

from collections.abc import Iterable
from typing import Any

import pandas as pd

from .models import ApplyReport, ClassificationState, PreviewItem, Product, QuantityState

UNCATEGORIZED = "Uncategorized"


def products_to_dataframe(products: Iterable[Product]) -> pd.DataFrame:
    rows = [
        {
            "id": product.id,
            "title": product.title,
            "product_type": product.product_type,
            "tags": ", ".join(sorted(product.tags)),
            "inventory_quantity": product.inventory_quantity,
            "available_for_sale": product.available_for_sale,
            "status": product.status,
        }
        for product in products
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "id",
            "title",
            "product_type",
            "tags",
            "inventory_quantity",
            "available_for_sale",
            "status",
        ],
    )


def summarize_catalog(products: Iterable[Product]) -> dict[str, Any]:
    """
    Count products by product type and by tag.

    Returns:
        Dict with total, by_product_type and by_tag
    """
    products = list(products)
    types = pd.Series(
        [product.product_type or UNCATEGORIZED for product in products], dtype="object"
    )
    tags = pd.Series([tag for product in products for tag in product.tags], dtype="object")
    return {
        "total": len(products),
        "by_product_type": {str(k): int(v) for k, v in types.value_counts().items()},
        "by_tag": {str(k): int(v) for k, v in tags.value_counts().items()},
    }


def _format_state(state) -> str:
    if isinstance(state, ClassificationState):
        tags = ", ".join(sorted(state.tags))
        return f"{state.product_type} [{tags}]"
    if isinstance(state, QuantityState):
        return str(state.quantity)
    return str(state)


def preview_to_dataframe(items: Iterable[PreviewItem]) -> pd.DataFrame:
    """One row per preview item with current/proposed columns."""
    rows = []
    for item in items:
        row: dict[str, Any] = {
            "entity_id": item.entity_id,
            "label": item.label,
            "has_changes": item.has_changes,
        }
        current, proposed = item.current_value, item.proposed_value
        if isinstance(proposed, ClassificationState):
            row.update(
                {
                    "current_product_type": current.product_type,
                    "proposed_product_type": proposed.product_type,
                    "current_tags": ", ".join(sorted(current.tags)),
                    "proposed_tags": ", ".join(sorted(proposed.tags)),
                    "added_tags": ", ".join(sorted(proposed.tags - current.tags)),
                }
            )
        else:
            row.update(
                {
                    "current_quantity": current.quantity,
                    "proposed_quantity": proposed.quantity,
                    "delta": proposed.quantity - current.quantity,
                }
            )
        rows.append(row)
    return pd.DataFrame(rows)


def report_to_dataframe(report: ApplyReport) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "entity_id": outcome.entity_id,
                "success": outcome.success,
                "error_type": outcome.error_type.value if outcome.error_type else None,
                "error": outcome.error,
            }
            for outcome in report.outcomes
        ],
        columns=["entity_id", "success", "error_type", "error"],
    )


def describe_change(item: PreviewItem) -> list[str]:
    """Human-readable lines describing one preview item."""
    lines = [f"- {item.label or item.entity_id}"]
    current, proposed = item.current_value, item.proposed_value
    if isinstance(proposed, ClassificationState):
        lines.append(f"  Product Type: {current.product_type} -> {proposed.product_type}")
        lines.append(
            f"  Tags: [{', '.join(sorted(current.tags))}] -> [{', '.join(sorted(proposed.tags))}]"
        )
    else:
        lines.append(f"  Quantity: {_format_state(current)} -> {_format_state(proposed)}")
    return lines


def find_low_stock(products: Iterable[Product], threshold: int = 5) -> list[Product]:
    """Active products at or below the threshold, lowest stock first."""
    low = [
        product
        for product in products
        if product.status == "active" and product.inventory_quantity <= threshold
    ]
    return sorted(low, key=lambda product: (product.inventory_quantity, product.title))
