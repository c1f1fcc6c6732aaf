"""Read-side product fields, shared by the catalogue endpoints and the cart and order views."""

from protean.utils.globals import current_domain

from storefront.product.product import Product


def product_details(product):
    if product is None:
        return None
    return {
        "product_id": str(product.id),
        "product_name": product.product_name,
        "description": product.description,
        "price": product.price,
        "old_price": product.old_price,
        "discount": product.discount,
        "unit": product.unit,
        "images": product.image_urls(),
        "total_units": product.total_units,
        "remaining_units": product.remaining_units,
        "sold_units": product.sold_units,
    }


def get_product(product_id):
    return product_details(current_domain.repository_for(Product).get_product(product_id))


def list_products(limit=100, offset=0):
    return [product_details(p) for p in current_domain.repository_for(Product).catalogue(limit=limit, offset=offset)]
