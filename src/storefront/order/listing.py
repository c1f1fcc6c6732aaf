"""Order views with their lines expanded from the live catalogue."""

from protean.utils.globals import current_domain

from storefront.order.order import Order
from storefront.product.product import Product


def order_view(order, products=None):
    products = products or current_domain.repository_for(Product)
    lines = []
    for line in order.lines:
        product = products.find_product(line.product_id)
        lines.append(
            {
                "product_id": str(line.product_id),
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "line_total": line.line_total,
                # Product details may be gone if it was removed from the catalogue
                "product_name": product.product_name if product else None,
                "price": product.price if product else None,
                "images": product.image_urls() if product else [],
            }
        )

    return {
        "order_id": str(order.id),
        "customer_id": str(order.customer_id),
        "lines": lines,
        "total_amount": order.total_amount,
        "address": order.address,
        "phone_number": order.phone_number,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "status": order.status,
        "cancelled_by": order.cancelled_by,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }


def get_order(order_id):
    return order_view(current_domain.repository_for(Order).get_order(order_id))


def list_orders(customer_id, limit=100, offset=0):
    """A customer's orders, newest first."""
    products = current_domain.repository_for(Product)
    orders = current_domain.repository_for(Order).for_customer(customer_id, limit=limit, offset=offset)
    return [order_view(order, products) for order in orders]


def list_all_orders(limit=100, offset=0):
    products = current_domain.repository_for(Product)
    return [order_view(order, products) for order in current_domain.repository_for(Order).newest_first(limit, offset)]
