"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue with its initial stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    product_name = String(required=True)
    unit = String(required=True)
    price = Float(required=True)
    discount = Float()
    total_units = Integer(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRepriced:
    """The selling price or discount of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    old_price = Float()
    discount = Float()


@storefront.event(part_of="Product")
class ProductRestocked:
    """The total units of a product were adjusted."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_total = Integer(required=True)
    new_total = Integer(required=True)
    new_remaining = Integer(required=True)


@storefront.event(part_of="Product")
class StockReserved:
    """Units moved from remaining to sold for a placed order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_remaining = Integer(required=True)
    new_remaining = Integer(required=True)
    new_sold = Integer(required=True)


@storefront.event(part_of="Product")
class StockReleased:
    """Units moved back from sold to remaining (cancellation or rollback)."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_remaining = Integer(required=True)
    new_remaining = Integer(required=True)
    new_sold = Integer(required=True)
