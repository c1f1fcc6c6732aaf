"""Cart aggregate: one per customer, holding product lines with quantities.

The cart never touches stock. Adding a unit is checked against the product's
remaining units at that moment, but nothing is held back: stock is only
reserved when an order is placed.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import CartItemAdded, CartItemRemoved, CartPruned, CartQuantityUpdated
from storefront.domain import storefront
from storefront.errors import InsufficientStock, NotFound


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def _require_line(self, product_id):
        line = self.line_for(product_id)
        if line is None:
            raise NotFound("Cart item not found", product_id=str(product_id))
        return line

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_unit(self, product_id, remaining_units):
        """Add one unit of a product, refusing to go beyond ``remaining_units``.

        Returns the resulting quantity of the line.
        """
        existing = self.line_for(product_id)
        current_quantity = existing.quantity if existing else 0
        new_quantity = current_quantity + 1

        if new_quantity > remaining_units:
            raise InsufficientStock(
                f"Cannot add more items. Only {remaining_units} units available in stock.",
                available_stock=remaining_units,
                current_cart_quantity=current_quantity,
            )

        now = datetime.now(UTC)
        if existing:
            existing.quantity = new_quantity
        else:
            self.add_lines(CartLine(product_id=product_id, quantity=new_quantity, added_at=now))
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity=new_quantity,
            )
        )
        return new_quantity

    def set_quantity(self, product_id, quantity):
        """Set a line's quantity as given. Zero removes the line."""
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        line = self._require_line(product_id)
        if quantity == 0:
            self.remove(product_id)
            return None

        previous_quantity = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return line

    def remove(self, product_id):
        line = self._require_line(product_id)
        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def prune(self, product_ids, order_id):
        """Drop the lines consumed by an order. Unknown product ids are ignored."""
        wanted = {str(pid) for pid in product_ids}
        consumed = [line for line in self.lines if str(line.product_id) in wanted]
        if not consumed:
            return

        for line in consumed:
            self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartPruned(
                cart_id=str(self.id),
                order_id=str(order_id),
                product_ids=json.dumps(sorted(str(line.product_id) for line in consumed)),
            )
        )
