"""Repository for the Product aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import NotFound, StockConflict
from storefront.product.product import Product


@storefront.repository(part_of=Product)
class ProductRepository:
    """Product persistence with a checked write for stock movements.

    ``save_checked`` is the per-entity check-and-set on ``remaining``: the
    write only goes through if the persisted remaining count still equals the
    value the caller observed when it loaded the product. Providers that
    track aggregate versions add their own version check underneath.
    """

    def get_product(self, product_id) -> Product:
        try:
            return self.get(product_id)
        except ObjectNotFoundError as exc:
            raise NotFound(f"Product with ID {product_id} not found", product_id=str(product_id)) from exc

    def find_product(self, product_id) -> Product | None:
        try:
            return self.get(product_id)
        except ObjectNotFoundError:
            return None

    def save_checked(self, product: Product, observed_remaining: int) -> Product:
        persisted = self._dao.get(product.id)
        if persisted.stock.remaining != observed_remaining:
            raise StockConflict(
                f"Stock for product {product.product_name} changed while the request was in flight",
                product_id=str(product.id),
                observed_remaining=observed_remaining,
                current_remaining=persisted.stock.remaining,
            )
        return self.add(product)

    def catalogue(self, limit=100, offset=0) -> list[Product]:
        return self._dao.query.order_by("product_name").offset(offset).limit(limit).all().items
