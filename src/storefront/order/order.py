"""Order aggregate — the immutable record of a placed purchase.

Order lines snapshot the unit price at placement time and are never
recomputed from later catalogue changes.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    PENDING → CANCELLED (terminal; stock is returned to the catalogue)

Outside of cancellation, how freely an administrator may move an order
between statuses is a policy (see ``StatusPolicy``): ``permissive`` lets any
non-cancelled order take any status, ``forward_only`` allows one step along
the chain above.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.config import StatusPolicy
from storefront.domain import storefront
from storefront.errors import InvalidInput, InvalidTransition
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    CASH = "Cash"
    QR = "QR"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"


# Transition map used by the forward_only policy
_FORWARD_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),  # Terminal
}


def parse_status(value):
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise InvalidInput(
            "Invalid status update",
            status=value,
            allowed=[s.value for s in OrderStatus],
        ) from exc


def parse_payment_method(value):
    try:
        return PaymentMethod(value)
    except ValueError as exc:
        raise InvalidInput("Invalid payment method. Must be 'Cash' or 'QR'", payment_method=value) from exc


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    lines = HasMany(OrderLine)
    total_amount = Float(default=0.0, min_value=0.0)
    address = String(required=True, max_length=500)
    phone_number = String(required=True, max_length=30)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    cancelled_by = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, lines_data, address, phone_number, payment_method):
        """Create a pending order from priced lines.

        Args:
            customer_id: The customer placing the order.
            lines_data: List of dicts with product_id, quantity, unit_price.
            address: Delivery address.
            phone_number: Contact number for delivery.
            payment_method: "Cash" or "QR". QR payments are marked Paid
                immediately; cash is collected on delivery.
        """
        if not lines_data:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        method = parse_payment_method(payment_method)
        now = datetime.now(UTC)

        lines = [
            OrderLine(
                product_id=line["product_id"],
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                line_total=round(line["quantity"] * line["unit_price"], 2),
            )
            for line in lines_data
        ]
        total_amount = round(sum(line.line_total for line in lines), 2)

        order = cls(
            customer_id=customer_id,
            total_amount=total_amount,
            address=address,
            phone_number=phone_number,
            payment_method=method.value,
            payment_status=(PaymentStatus.PAID if method == PaymentMethod.QR else PaymentStatus.PENDING).value,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.add_lines(lines)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                lines=json.dumps(
                    [
                        {
                            "product_id": str(line.product_id),
                            "quantity": line.quantity,
                            "unit_price": line.unit_price,
                            "line_total": line.line_total,
                        }
                        for line in lines
                    ]
                ),
                total_amount=total_amount,
                payment_method=order.payment_method,
                payment_status=order.payment_status,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def cancel(self, cancelled_by="Customer"):
        """Mark a pending order cancelled. Stock restoration is the caller's job."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise InvalidTransition(
                "Order can only be cancelled if it's pending",
                order_id=str(self.id),
                status=self.status,
            )

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_by = cancelled_by
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    def change_status(self, new_status, policy=StatusPolicy.PERMISSIVE):
        target = parse_status(new_status) if not isinstance(new_status, OrderStatus) else new_status
        current = OrderStatus(self.status)

        if current == OrderStatus.CANCELLED:
            raise InvalidTransition("Cannot update a cancelled order", order_id=str(self.id))
        if target == OrderStatus.CANCELLED:
            raise InvalidTransition("Cancelling an order must go through cancellation", order_id=str(self.id))
        if policy == StatusPolicy.FORWARD_ONLY and target not in _FORWARD_TRANSITIONS[current]:
            raise InvalidTransition(
                f"Cannot transition from {current.value} to {target.value}",
                order_id=str(self.id),
            )

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
