"""Shows a customer their cart with product details expanded for display."""

from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.product.product import Product
from storefront.product.view import product_details


def cart_view(customer_id):
    """Return ``{"cart_id": ..., "lines": [...]}``; an empty cart if none exists."""
    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    if cart is None or not cart.lines:
        return {"cart_id": str(cart.id) if cart else None, "lines": []}

    products = current_domain.repository_for(Product)
    return {
        "cart_id": str(cart.id),
        "lines": [
            {
                "product_id": str(line.product_id),
                "quantity": line.quantity,
                "product": product_details(products.find_product(line.product_id)),
            }
            for line in cart.lines
        ],
    }
