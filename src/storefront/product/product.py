"""Product aggregate — catalogue entry with its stock counters.

Stock Level Model:
    total:     Units ever put on sale for this product
    remaining: Units still available for new orders
    sold:      Units committed to placed (non-cancelled) orders

``remaining + sold == total`` holds for every StockLevels value, so a stock
movement always replaces the whole value object in one assignment.

Pricing follows the storefront convention: when a discount percent is set,
the entered price becomes ``old_price`` and the selling ``price`` is the
discounted amount.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.errors import InsufficientStock, InvalidInput
from storefront.product.events import (
    ProductAdded,
    ProductRepriced,
    ProductRestocked,
    StockReleased,
    StockReserved,
)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Product")
class StockLevels:
    total = Integer(default=0, min_value=0)
    remaining = Integer(default=0, min_value=0)
    sold = Integer(default=0, min_value=0)

    @invariant.post
    def remaining_and_sold_must_add_up_to_total(self):
        if (self.remaining or 0) + (self.sold or 0) != (self.total or 0):
            raise ValidationError(
                {"stock": [f"remaining ({self.remaining}) + sold ({self.sold}) must equal total ({self.total})"]}
            )


def _price_with_discount(price, discount):
    """Return ``(selling_price, old_price)`` for a list price and discount percent."""
    if discount:
        return round(price - (price * discount) / 100, 2), price
    return round(price, 2), None


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Product:
    product_name = String(required=True, max_length=255)
    description = Text()
    unit = String(required=True, max_length=50)
    price = Float(required=True, min_value=0.0)
    old_price = Float()
    discount = Float(default=0.0, min_value=0.0, max_value=100.0)
    images = Text()  # JSON array of image URLs
    stock = ValueObject(StockLevels)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, product_name, unit, price, total_units, discount=0.0, images=None, description=None):
        if total_units is None or total_units < 0:
            raise ValidationError({"total_units": ["Total units must be a positive number"]})

        selling_price, old_price = _price_with_discount(price, discount)
        now = datetime.now(UTC)
        product = cls(
            product_name=product_name,
            description=description,
            unit=unit,
            price=selling_price,
            old_price=old_price,
            discount=discount or 0.0,
            images=json.dumps(images or []),
            stock=StockLevels(total=total_units, remaining=total_units, sold=0),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                product_name=product_name,
                unit=unit,
                price=selling_price,
                discount=discount or 0.0,
                total_units=total_units,
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def total_units(self):
        return self.stock.total if self.stock else 0

    @property
    def remaining_units(self):
        return self.stock.remaining if self.stock else 0

    @property
    def sold_units(self):
        return self.stock.sold if self.stock else 0

    def image_urls(self):
        return json.loads(self.images) if self.images else []

    # -------------------------------------------------------------------
    # Catalogue edits
    # -------------------------------------------------------------------
    def reprice(self, price, discount=0.0):
        previous_price = self.price
        self.price, self.old_price = _price_with_discount(price, discount)
        self.discount = discount or 0.0
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRepriced(
                product_id=str(self.id),
                previous_price=previous_price,
                new_price=self.price,
                old_price=self.old_price,
                discount=self.discount,
            )
        )

    def restock(self, total_units):
        """Set a new total. Units already sold stay sold; the rest is remaining."""
        if total_units < self.sold_units:
            raise InvalidInput("Total units cannot be less than sold units", sold_units=self.sold_units)

        previous_total = self.total_units
        self.stock = StockLevels(
            total=total_units,
            remaining=total_units - self.sold_units,
            sold=self.sold_units,
        )
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductRestocked(
                product_id=str(self.id),
                previous_total=previous_total,
                new_total=total_units,
                new_remaining=self.remaining_units,
            )
        )

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def ensure_available(self, quantity):
        if quantity > self.remaining_units:
            raise InsufficientStock(
                f"Insufficient stock for product {self.product_name}. Available: {self.remaining_units}",
                available_stock=self.remaining_units,
                product_id=str(self.id),
            )

    def reserve(self, quantity):
        """Move ``quantity`` units from remaining to sold."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.ensure_available(quantity)

        previous = self.stock
        self.stock = StockLevels(
            total=previous.total,
            remaining=previous.remaining - quantity,
            sold=previous.sold + quantity,
        )
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                previous_remaining=previous.remaining,
                new_remaining=self.stock.remaining,
                new_sold=self.stock.sold,
            )
        )

    def release(self, quantity):
        """Move ``quantity`` units back from sold to remaining."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.sold_units:
            raise ValidationError(
                {"quantity": [f"Cannot release {quantity} units, only {self.sold_units} sold"]}
            )

        previous = self.stock
        self.stock = StockLevels(
            total=previous.total,
            remaining=previous.remaining + quantity,
            sold=previous.sold - quantity,
        )
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockReleased(
                product_id=str(self.id),
                quantity=quantity,
                previous_remaining=previous.remaining,
                new_remaining=self.stock.remaining,
                new_sold=self.stock.sold,
            )
        )
