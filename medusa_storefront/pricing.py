"""Variant price extraction.

The list endpoint may describe a variant's price in one of several shapes
depending on backend version and request context. Prices are extracted on
read and never stored back into the cache.
"""

import logging
from decimal import Decimal
from typing import Optional

from .models import Money, Product, ProductVariant

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "usd"


def extract_price(variant: ProductVariant, default_currency: str = DEFAULT_CURRENCY) -> Optional[Money]:
    """
    Extract a display price from a variant.

    Rules, first match wins:
    1. calculated_price_set.amount (calculated, else original), tagged with
       the set's currency code or the default currency
    2. the first entry of prices
    3. the flat price or calculated_price field, tagged with the default currency

    Returns:
        Money, or None when the variant carries no price at all
    """
    price_set = variant.calculated_price_set
    if price_set is not None and price_set.amount is not None:
        amount = price_set.amount.calculated_amount
        if amount is None:
            amount = price_set.amount.original_amount
        if amount is not None:
            return Money(amount=amount, currency=price_set.currency_code or default_currency)

    if variant.prices:
        first = variant.prices[0]
        return Money(amount=first.amount, currency=first.currency_code or default_currency)

    flat = variant.price if variant.price is not None else variant.calculated_price
    if isinstance(flat, Decimal):
        return Money(amount=flat, currency=default_currency)

    return None


def product_prices(product: Product, default_currency: str = DEFAULT_CURRENCY) -> dict[str, Optional[Money]]:
    """Map each identified variant of a product to its extracted price."""
    return {
        variant.id: extract_price(variant, default_currency)
        for variant in product.variants
        if variant.id
    }


def lowest_price(product: Product, default_currency: str = DEFAULT_CURRENCY) -> Optional[Money]:
    """Cheapest variant price of a product, used for "from" labels."""
    prices = [p for p in (extract_price(v, default_currency) for v in product.variants) if p]
    if not prices:
        logger.debug(f"No price available for product {product.id}")
        return None
    return min(prices, key=lambda money: money.amount)


def format_money(money: Optional[Money]) -> str:
    """Render a price for text output."""
    if money is None:
        return "no price available"
    return f"{money.amount} {money.currency.upper()}"
