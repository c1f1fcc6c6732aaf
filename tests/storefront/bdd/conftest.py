"""Shared BDD fixtures and step definitions for the Storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from storefront.cart.items import AddToCart
from storefront.product.catalogue import AddProduct
from storefront.product.product import Product

CUSTOMER_ID = "cust-bdd"


@pytest.fixture()
def customer_id():
    return CUSTOMER_ID


@pytest.fixture()
def products():
    """Product ids by name."""
    return {}


@pytest.fixture()
def error():
    """Container for captured storefront errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" with {units:d} units in stock'))
def product_in_stock(products, name, units):
    products[name] = current_domain.process(
        AddProduct(product_name=name, unit="pack", price=100.0, total_units=units),
        asynchronous=False,
    )


@given(parsers.cfparse('the customer has "{name}" in their cart'))
def product_in_cart(products, customer_id, name):
    current_domain.process(AddToCart(customer_id=customer_id, product_id=products[name]), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {remaining:d} units remaining and {sold:d} sold'))
def product_stock_is(products, name, remaining, sold):
    product = current_domain.repository_for(Product).get(products[name])
    assert product.remaining_units == remaining
    assert product.sold_units == sold
    assert product.remaining_units + product.sold_units == product.total_units
