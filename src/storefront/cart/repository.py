"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.errors import NotFound


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart | None:
        """Return the customer's cart with its lines loaded, or None."""
        found = self._dao.query.filter(customer_id=str(customer_id)).all().items
        if not found:
            return None
        return self.get(found[0].id)

    def require_for_customer(self, customer_id) -> Cart:
        cart = self.for_customer(customer_id)
        if cart is None:
            raise NotFound("Cart not found", customer_id=str(customer_id))
        return cart
