"""Application tests for order cancellation, status changes and listings."""

import json

import pytest
from protean import current_domain

from storefront.cart.items import AddToCart
from storefront.checkout.placement import PlaceOrder
from storefront.config import get_settings
from storefront.errors import InvalidInput, InvalidTransition, NotFound, StockConflict
from storefront.order.lifecycle import CancelOrder, ChangeOrderStatus
from storefront.order.listing import list_all_orders, list_orders
from storefront.order.order import Order, OrderStatus
from storefront.product.catalogue import AddProduct, RemoveProduct
from storefront.product.product import Product
from storefront.product.repository import ProductRepository


def _add_product(**overrides):
    defaults = {"product_name": "Basmati Rice 5kg", "unit": "bag", "price": 100.0, "total_units": 10}
    defaults.update(overrides)
    return current_domain.process(AddProduct(**defaults), asynchronous=False)


def _placed_order(product_id, quantity=3, customer_id="cust-001"):
    current_domain.process(AddToCart(customer_id=customer_id, product_id=product_id), asynchronous=False)
    result = current_domain.process(
        PlaceOrder(
            customer_id=customer_id,
            selections=json.dumps([{"product_id": product_id, "quantity": quantity}]),
            address="Ward 4, Lalitpur",
            phone_number="9800000000",
            payment_method="Cash",
        ),
        asynchronous=False,
    )
    return result["order_id"]


def _cancel(order_id, **kwargs):
    return current_domain.process(CancelOrder(order_id=order_id, **kwargs), asynchronous=False)


def _change_status(order_id, status):
    return current_domain.process(ChangeOrderStatus(order_id=order_id, status=status), asynchronous=False)


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


@pytest.fixture
def forward_only(monkeypatch):
    monkeypatch.setenv("STOREFRONT_STATUS_POLICY", "forward_only")
    get_settings.cache_clear()
    yield
    monkeypatch.delenv("STOREFRONT_STATUS_POLICY")
    get_settings.cache_clear()


class TestCancelOrder:
    def test_cancel_restores_stock(self):
        product_id = _add_product(total_units=10)
        order_id = _placed_order(product_id, quantity=3)
        assert _product(product_id).remaining_units == 7

        _cancel(order_id, customer_id="cust-001")

        order = _order(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_by == "Customer"
        product = _product(product_id)
        assert product.remaining_units == 10
        assert product.sold_units == 0

    def test_cancelled_order_cannot_be_cancelled_again(self):
        product_id = _add_product()
        order_id = _placed_order(product_id)
        _cancel(order_id)

        with pytest.raises(InvalidTransition):
            _cancel(order_id)
        assert _product(product_id).remaining_units == 10

    def test_non_pending_order_cannot_be_cancelled(self):
        product_id = _add_product()
        order_id = _placed_order(product_id)
        _change_status(order_id, "Processing")

        with pytest.raises(InvalidTransition):
            _cancel(order_id)
        assert _product(product_id).sold_units == 3

    def test_other_customers_order_is_not_found(self):
        product_id = _add_product()
        order_id = _placed_order(product_id, customer_id="cust-001")

        with pytest.raises(NotFound):
            _cancel(order_id, customer_id="cust-002")
        assert _order(order_id).status == OrderStatus.PENDING.value

    def test_unknown_order_is_not_found(self):
        with pytest.raises(NotFound) as exc:
            _cancel("ord-missing")
        assert exc.value.message == "Order not found"

    def test_removed_product_is_skipped(self):
        kept = _add_product(product_name="Rice")
        removed = _add_product(product_name="Lentils")
        current_domain.process(AddToCart(customer_id="cust-001", product_id=kept), asynchronous=False)
        current_domain.process(AddToCart(customer_id="cust-001", product_id=removed), asynchronous=False)
        result = current_domain.process(
            PlaceOrder(
                customer_id="cust-001",
                selections=json.dumps(
                    [{"product_id": kept, "quantity": 2}, {"product_id": removed, "quantity": 1}]
                ),
                address="Ward 4, Lalitpur",
                phone_number="9800000000",
                payment_method="QR",
            ),
            asynchronous=False,
        )
        current_domain.process(RemoveProduct(product_id=removed), asynchronous=False)

        _cancel(result["order_id"])

        assert _order(result["order_id"]).status == OrderStatus.CANCELLED.value
        assert _product(kept).remaining_units == 10

    def test_failed_stock_restore_leaves_order_pending(self, monkeypatch):
        rice = _add_product(product_name="Rice", total_units=5)
        lentils = _add_product(product_name="Lentils", total_units=5)
        current_domain.process(AddToCart(customer_id="cust-001", product_id=rice), asynchronous=False)
        current_domain.process(AddToCart(customer_id="cust-001", product_id=lentils), asynchronous=False)
        result = current_domain.process(
            PlaceOrder(
                customer_id="cust-001",
                selections=json.dumps([{"product_id": rice, "quantity": 2}, {"product_id": lentils, "quantity": 2}]),
                address="Ward 4, Lalitpur",
                phone_number="9800000000",
                payment_method="Cash",
            ),
            asynchronous=False,
        )

        original = ProductRepository.save_checked
        calls = {"count": 0}

        def flaky_save(self, product, observed_remaining):
            calls["count"] += 1
            if calls["count"] == 2:
                raise StockConflict("Stock changed", product_id=str(product.id))
            return original(self, product, observed_remaining)

        monkeypatch.setattr(ProductRepository, "save_checked", flaky_save)

        with pytest.raises(StockConflict):
            _cancel(result["order_id"])

        monkeypatch.undo()
        assert _order(result["order_id"]).status == OrderStatus.PENDING.value
        for product_id in (rice, lentils):
            product = _product(product_id)
            assert (product.remaining_units, product.sold_units) == (3, 2)

    def test_place_then_cancel_round_trip(self):
        product_id = _add_product(total_units=8)
        before = _product(product_id)

        order_id = _placed_order(product_id, quantity=5)
        _cancel(order_id)

        after = _product(product_id)
        assert (after.total_units, after.remaining_units, after.sold_units) == (
            before.total_units,
            before.remaining_units,
            before.sold_units,
        )


class TestChangeOrderStatus:
    def test_change_status(self):
        product_id = _add_product()
        order_id = _placed_order(product_id)

        _change_status(order_id, "Shipped")

        assert _order(order_id).status == OrderStatus.SHIPPED.value

    def test_cancelled_order_status_cannot_change(self):
        product_id = _add_product()
        order_id = _placed_order(product_id)
        _cancel(order_id)

        with pytest.raises(InvalidTransition):
            _change_status(order_id, "Processing")
        assert _order(order_id).status == OrderStatus.CANCELLED.value

    def test_change_to_cancelled_restores_stock(self):
        product_id = _add_product()
        order_id = _placed_order(product_id, quantity=4)

        _change_status(order_id, "Cancelled")

        order = _order(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancelled_by == "Admin"
        assert _product(product_id).remaining_units == 10

    def test_invalid_status_is_refused(self):
        product_id = _add_product()
        order_id = _placed_order(product_id)

        with pytest.raises(InvalidInput):
            _change_status(order_id, "Lost")

    def test_permissive_policy_allows_going_back(self):
        product_id = _add_product()
        order_id = _placed_order(product_id)
        _change_status(order_id, "Delivered")
        _change_status(order_id, "Pending")
        assert _order(order_id).status == OrderStatus.PENDING.value

    def test_forward_only_policy_refuses_skips(self, forward_only):
        product_id = _add_product()
        order_id = _placed_order(product_id)

        with pytest.raises(InvalidTransition):
            _change_status(order_id, "Delivered")
        _change_status(order_id, "Processing")
        assert _order(order_id).status == OrderStatus.PROCESSING.value


class TestOrderListings:
    def test_customer_sees_own_orders_newest_first(self):
        product_id = _add_product(product_name="Rice", images=json.dumps(["https://cdn.example.com/rice.jpg"]))
        first = _placed_order(product_id, quantity=1)
        second = _placed_order(product_id, quantity=2)
        _placed_order(product_id, quantity=1, customer_id="cust-002")

        orders = list_orders("cust-001")

        assert [o["order_id"] for o in orders] == [second, first]
        line = orders[0]["lines"][0]
        assert line["product_name"] == "Rice"
        assert line["images"] == ["https://cdn.example.com/rice.jpg"]

    def test_admin_listing_includes_everyone(self):
        product_id = _add_product()
        _placed_order(product_id, quantity=1, customer_id="cust-001")
        _placed_order(product_id, quantity=1, customer_id="cust-002")

        assert len(list_all_orders()) == 2
        assert len(list_all_orders(limit=1)) == 1
