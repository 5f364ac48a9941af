"""
Value objects shared by the classifier, diff engine and batch apply engine.

All models are frozen: a preview or report, once built, is never mutated.
"""

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import ApplyErrorType

DEFAULT_PRODUCT_TYPE = "OTHER"


def normalize_tags(value: Any) -> frozenset[str]:
    """Lowercase, strip and de-duplicate a tag collection (list, set or comma string)."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    return frozenset(str(tag).strip().lower() for tag in value if str(tag).strip())


class Product(BaseModel):
    """A product as held by the product store."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque unique identifier")
    title: str = Field("", description="Free-text display name")
    product_type: str | None = Field(None, description="Single-valued category label")
    tags: frozenset[str] = Field(default_factory=frozenset, description="Lowercase labels")
    inventory_quantity: int = Field(0, ge=0, description="Units in stock")
    available_for_sale: bool = Field(False, description="True while stock is above zero")
    status: str = Field("active", description="Catalog status")

    @model_validator(mode="before")
    @classmethod
    def _derive_availability(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("available_for_sale") is None:
            data = dict(data)
            data["available_for_sale"] = int(data.get("inventory_quantity") or 0) > 0
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> frozenset[str]:
        return normalize_tags(value)


class ClassificationRule(BaseModel):
    """Keyword rule assigning a product type and seed tags.

    A rule without a product type is tag-only: it contributes its tags whenever
    the keyword matches and never competes for the product type.
    """

    model_config = ConfigDict(frozen=True)

    keyword: str = Field(..., min_length=1, description="Case-insensitive title substring")
    product_type: str | None = Field(None, description="Product type label, None for tag-only")
    tags: frozenset[str] = Field(default_factory=frozenset, description="Tags added on match")

    @field_validator("keyword", mode="before")
    @classmethod
    def _normalize_keyword(cls, value: Any) -> str:
        return str(value).strip().lower()

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> frozenset[str]:
        return normalize_tags(value)

    @property
    def is_tag_only(self) -> bool:
        return self.product_type is None

    def matches(self, lowered_title: str) -> bool:
        return self.keyword in lowered_title


class ScentRule(BaseModel):
    """Keyword rule adding a single scent tag."""

    model_config = ConfigDict(frozen=True)

    keyword: str = Field(..., min_length=1)
    tag: str = Field(..., min_length=1)

    @field_validator("keyword", "tag", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> str:
        return str(value).strip().lower()

    def matches(self, lowered_title: str) -> bool:
        return self.keyword in lowered_title


class ClassificationResult(BaseModel):
    """Suggested product type and tag set for one title."""

    model_config = ConfigDict(frozen=True)

    product_type: str = DEFAULT_PRODUCT_TYPE
    tags: frozenset[str] = Field(default_factory=frozenset)


class ClassificationState(BaseModel):
    """The classification fields of a product, as diffed and written."""

    model_config = ConfigDict(frozen=True)

    product_type: str | None = None
    tags: frozenset[str] = Field(default_factory=frozenset)

    @classmethod
    def from_product(cls, product: Product) -> "ClassificationState":
        return cls(product_type=product.product_type, tags=product.tags)

    def to_patch(self) -> dict[str, Any]:
        return {"product_type": self.product_type, "tags": sorted(self.tags)}


class QuantityState(BaseModel):
    """The stock field of a product, as diffed and written."""

    model_config = ConfigDict(frozen=True)

    quantity: int = Field(0, ge=0)

    @classmethod
    def from_product(cls, product: Product) -> "QuantityState":
        return cls(quantity=product.inventory_quantity)

    def to_patch(self) -> dict[str, Any]:
        return {
            "inventory_quantity": self.quantity,
            "available_for_sale": self.quantity > 0,
        }


StateT = TypeVar("StateT", ClassificationState, QuantityState)


class PreviewItem(BaseModel, Generic[StateT]):
    """Current vs. proposed state of one entity, reviewed before apply."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    label: str = ""
    current_value: StateT
    proposed_value: StateT
    has_changes: bool


class ApplyOutcome(BaseModel):
    """Result of one attempted write."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    success: bool
    error: str | None = None
    error_type: ApplyErrorType | None = None
    retryable: bool = False


class ApplyReport(BaseModel):
    """Aggregated outcome of a batch apply."""

    model_config = ConfigDict(frozen=True)

    success_count: int = 0
    error_count: int = 0
    outcomes: tuple[ApplyOutcome, ...] = ()

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[ApplyOutcome]) -> "ApplyReport":
        outcomes = tuple(outcomes)
        successes = sum(1 for outcome in outcomes if outcome.success)
        return cls(
            success_count=successes,
            error_count=len(outcomes) - successes,
            outcomes=outcomes,
        )

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> list[ApplyOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def failed_ids(self) -> list[str]:
        return [outcome.entity_id for outcome in self.failures]

    @property
    def retryable_ids(self) -> list[str]:
        """Failed entities worth another attempt (not the ones that no longer exist)."""
        return [outcome.entity_id for outcome in self.failures if outcome.retryable]
