"""Application tests for catalogue maintenance and stock write checks."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from structlog.testing import capture_logs

from storefront.errors import NotFound, StockConflict
from storefront.product.catalogue import AddProduct, RemoveProduct, RestockProduct, UpdateProductPricing
from storefront.product.ledger import StockLedger
from storefront.product.product import Product
from storefront.product.view import get_product, list_products


def _add_product(**overrides):
    defaults = {"product_name": "Basmati Rice 5kg", "unit": "bag", "price": 1200.0, "total_units": 10}
    defaults.update(overrides)
    return current_domain.process(AddProduct(**defaults), asynchronous=False)


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestAddProductCommand:
    def test_add_product_persists(self):
        product_id = _add_product(discount=10)

        details = get_product(product_id)
        assert details["price"] == 1080.0
        assert details["old_price"] == 1200.0
        assert details["remaining_units"] == 10

    def test_missing_name_is_refused(self):
        with pytest.raises(ValidationError):
            AddProduct(unit="bag", price=10.0, total_units=1)


class TestUpdatePricingCommand:
    def test_reprice_persists(self):
        product_id = _add_product()
        current_domain.process(UpdateProductPricing(product_id=product_id, price=900.0, discount=0), asynchronous=False)
        assert _product(product_id).price == 900.0

    def test_reprice_is_logged(self):
        product_id = _add_product()

        with capture_logs() as logs:
            current_domain.process(UpdateProductPricing(product_id=product_id, price=900.0, discount=10), asynchronous=False)

        entry = next(e for e in logs if e["event"] == "Product repriced")
        assert entry["product_id"] == product_id
        assert entry["price"] == 810.0

    def test_unknown_product_is_not_found(self):
        with pytest.raises(NotFound):
            current_domain.process(UpdateProductPricing(product_id="prod-missing", price=1.0), asynchronous=False)


class TestRestockCommand:
    def test_restock_keeps_sold_units(self):
        product_id = _add_product(total_units=10)
        with StockLedger() as ledger:
            ledger.reserve(_product(product_id), 4)

        current_domain.process(RestockProduct(product_id=product_id, total_units=25), asynchronous=False)

        product = _product(product_id)
        assert (product.total_units, product.remaining_units, product.sold_units) == (25, 21, 4)


class TestRemoveProductCommand:
    def test_removed_product_leaves_the_catalogue(self):
        product_id = _add_product()

        current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)

        assert current_domain.repository_for(Product).find_product(product_id) is None
        with pytest.raises(NotFound):
            get_product(product_id)

    def test_unknown_product_is_not_found(self):
        with pytest.raises(NotFound):
            current_domain.process(RemoveProduct(product_id="prod-missing"), asynchronous=False)


class TestListProducts:
    def test_listing_is_ordered_by_name_and_paged(self):
        _add_product(product_name="Rice")
        _add_product(product_name="Ghee")
        _add_product(product_name="Lentils")

        assert [p["product_name"] for p in list_products()] == ["Ghee", "Lentils", "Rice"]
        assert [p["product_name"] for p in list_products(limit=1, offset=1)] == ["Lentils"]


class TestCheckedStockWrites:
    def test_stale_write_raises_stock_conflict(self):
        product_id = _add_product(total_units=10)
        stale = _product(product_id)

        current_domain.process(RestockProduct(product_id=product_id, total_units=15), asynchronous=False)

        observed = stale.remaining_units
        stale.reserve(2)
        with pytest.raises(StockConflict) as exc:
            current_domain.repository_for(Product).save_checked(stale, observed)

        assert exc.value.retryable is True
        assert _product(product_id).remaining_units == 15

    def test_ledger_undoes_movements_when_block_fails(self):
        first = _add_product(product_name="Rice", total_units=5)
        second = _add_product(product_name="Lentils", total_units=5)

        with pytest.raises(RuntimeError):
            with StockLedger() as ledger:
                ledger.reserve(_product(first), 2)
                ledger.reserve(_product(second), 3)
                raise RuntimeError("order write failed")

        assert _product(first).remaining_units == 5
        assert _product(second).remaining_units == 5
