"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import NotFound
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def get_order(self, order_id) -> Order:
        try:
            return self.get(order_id)
        except ObjectNotFoundError as exc:
            raise NotFound("Order not found", order_id=str(order_id)) from exc

    def for_customer(self, customer_id, limit=100, offset=0) -> list[Order]:
        """Orders of one customer, newest first."""
        found = (
            self._dao.query.filter(customer_id=str(customer_id))
            .order_by("-created_at")
            .offset(offset)
            .limit(limit)
            .all()
            .items
        )
        return [self.get(order.id) for order in found]

    def newest_first(self, limit=100, offset=0) -> list[Order]:
        found = self._dao.query.order_by("-created_at").offset(offset).limit(limit).all().items
        return [self.get(order.id) for order in found]
