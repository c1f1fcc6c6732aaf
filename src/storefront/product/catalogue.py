"""Catalogue maintenance: adding, repricing, restocking and removing products."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import Product

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    product_name = String(required=True, max_length=255)
    unit = String(required=True, max_length=50)
    price = Float(required=True, min_value=0.0)
    total_units = Integer(required=True, min_value=0)
    discount = Float(default=0.0, min_value=0.0, max_value=100.0)
    images = Text()  # JSON array of image URLs
    description = Text()


@storefront.command(part_of="Product")
class UpdateProductPricing:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0, max_value=100.0)


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    total_units = Integer(required=True, min_value=0)


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class CatalogueHandler:
    @handle(AddProduct)
    def add_product(self, command):
        images = json.loads(command.images) if isinstance(command.images, str) else command.images
        product = Product.create(
            product_name=command.product_name,
            unit=command.unit,
            price=command.price,
            total_units=command.total_units,
            discount=command.discount or 0.0,
            images=images,
            description=command.description,
        )
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product added",
            product_id=str(product.id),
            product_name=product.product_name,
            total_units=product.total_units,
        )
        return str(product.id)

    @handle(UpdateProductPricing)
    def update_pricing(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_product(command.product_id)
        product.reprice(price=command.price, discount=command.discount or 0.0)
        repo.add(product)

        logger.info(
            "Product repriced",
            product_id=str(product.id),
            price=product.price,
            discount=product.discount,
        )

    @handle(RestockProduct)
    def restock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_product(command.product_id)
        observed_remaining = product.remaining_units
        product.restock(command.total_units)
        repo.save_checked(product, observed_remaining)

        logger.info(
            "Product restocked",
            product_id=str(product.id),
            total_units=product.total_units,
            remaining_units=product.remaining_units,
        )

    @handle(RemoveProduct)
    def remove(self, command):
        # Placed orders keep their lines; cancelling them later skips this product
        repo = current_domain.repository_for(Product)
        product = repo.get_product(command.product_id)
        repo._dao.delete(product)

        logger.info("Product removed", product_id=str(product.id), product_name=product.product_name)
