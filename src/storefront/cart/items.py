"""Commands and handler for managing cart items."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get_product(command.product_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id) or Cart.create(customer_id=command.customer_id)
        quantity = cart.add_unit(command.product_id, product.remaining_units)
        repo.add(cart)

        logger.info(
            "Product added to cart",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            quantity=quantity,
        )
        return {
            "cart_id": str(cart.id),
            "lines": [{"product_id": str(line.product_id), "quantity": line.quantity} for line in cart.lines],
            "available_stock": product.remaining_units,
            "current_cart_quantity": quantity,
        }

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require_for_customer(command.customer_id)
        line = cart.set_quantity(command.product_id, command.quantity)
        repo.add(cart)

        logger.info(
            "Cart quantity updated",
            cart_id=str(cart.id),
            product_id=str(command.product_id),
            quantity=line.quantity if line else 0,
        )
        return {
            "product_id": str(command.product_id),
            "quantity": line.quantity if line else 0,
        }

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.require_for_customer(command.customer_id)
        cart.remove(command.product_id)
        repo.add(cart)

        logger.info("Product removed from cart", cart_id=str(cart.id), product_id=str(command.product_id))
