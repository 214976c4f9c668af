"""Data models for Medusa store entities."""

from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Money(BaseModel):
    """An amount tagged with its currency code."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency: str


class Price(BaseModel):
    """A direct price entry on a variant."""

    model_config = ConfigDict(extra="allow", frozen=True)

    amount: Decimal
    currency_code: Optional[str] = None


class CalculatedAmount(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    calculated_amount: Optional[Decimal] = None
    original_amount: Optional[Decimal] = None


class CalculatedPriceSet(BaseModel):
    """Price set computed by the backend for a region/context."""

    model_config = ConfigDict(extra="allow", frozen=True)

    amount: Optional[CalculatedAmount] = None
    currency_code: Optional[str] = None


class ProductVariant(BaseModel):
    """A purchasable configuration of a product."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: Optional[str] = None
    title: Optional[str] = None
    prices: Optional[list[Price]] = Field(default_factory=list)
    calculated_price_set: Optional[CalculatedPriceSet] = None
    price: Optional[Decimal] = Field(None, description="Flat price, default currency")
    # v2 backends send an object here; only the scalar form carries a price
    calculated_price: Union[Decimal, dict[str, Any], None] = None
    original_price: Optional[Decimal] = None


class Collection(BaseModel):
    """A product collection."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    title: str
    handle: Optional[str] = None


class Product(BaseModel):
    """A product as returned by the list endpoint, pricing included."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: Optional[str] = Field(None, description="Product ID (prod_...)")
    title: str = ""
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    collection: Optional[Collection] = None
    variants: list[ProductVariant] = Field(default_factory=list)


class LineItem(BaseModel):
    """One variant + quantity entry within a cart."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    variant_id: Optional[str] = None
    quantity: int = Field(ge=1, description="Quantity of the variant")
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    unit_price: Optional[Decimal] = None


class Cart(BaseModel):
    """The remote cart, mirrored locally."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    items: list[LineItem] = Field(default_factory=list)
    subtotal: Optional[Decimal] = None
    total: Optional[Decimal] = None
    region_id: Optional[str] = None
    currency_code: Optional[str] = None

    @property
    def item_count(self) -> int:
        """Total quantity across all line items."""
        return sum(item.quantity for item in self.items)
