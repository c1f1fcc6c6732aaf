"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, Text

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """One unit of a product was added to the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartQuantityUpdated:
    """The quantity of a cart line was set directly."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    """A product line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartPruned:
    """Lines consumed by a placed order were removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
    product_ids = Text(required=True)  # JSON array of product ids
