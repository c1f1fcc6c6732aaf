"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was created from selected cart lines and its stock reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {product_id, quantity, unit_price, line_total}
    total_amount = Float(required=True)
    payment_method = String(required=True)
    payment_status = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """A pending order was cancelled and its stock returned."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
