"""FastAPI endpoints for the Storefront: catalogue, cart, checkout and orders."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.auth import AuthContext, admin_user, current_user
from storefront.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    AddToCartResponse,
    CartQuantityResponse,
    ChangeStatusRequest,
    PlaceOrderRequest,
    PlaceOrderResponse,
    ProductIdResponse,
    RestockRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdatePricingRequest,
)
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.view import cart_view
from storefront.checkout.placement import PlaceOrder
from storefront.order.lifecycle import CancelOrder, ChangeOrderStatus
from storefront.order.listing import get_order, list_all_orders, list_orders
from storefront.product.catalogue import AddProduct, RemoveProduct, RestockProduct, UpdateProductPricing
from storefront.product.view import get_product, list_products

product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(admin_user)])


# ---------------------------------------------------------------------------
# Catalogue (public)
# ---------------------------------------------------------------------------
@product_router.get("")
async def browse_products(limit: int = Query(100, ge=1, le=500), offset: int = Query(0, ge=0)) -> list[dict]:
    return list_products(limit=limit, offset=offset)


@product_router.get("/{product_id}")
async def product_detail(product_id: str) -> dict:
    return get_product(product_id)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@cart_router.post("/items", status_code=201, response_model=AddToCartResponse)
async def add_to_cart(body: AddToCartRequest, user: AuthContext = Depends(current_user)) -> AddToCartResponse:
    command = AddToCart(customer_id=user.user_id, product_id=body.product_id)
    result = current_domain.process(command, asynchronous=False)
    return AddToCartResponse(**result)


@cart_router.put("/items/{product_id}", response_model=CartQuantityResponse)
async def update_cart_quantity(
    product_id: str,
    body: UpdateCartQuantityRequest,
    user: AuthContext = Depends(current_user),
) -> CartQuantityResponse:
    command = UpdateCartQuantity(customer_id=user.user_id, product_id=product_id, quantity=body.quantity)
    result = current_domain.process(command, asynchronous=False)
    return CartQuantityResponse(**result)


@cart_router.delete("/items/{product_id}", response_model=StatusResponse)
async def remove_from_cart(product_id: str, user: AuthContext = Depends(current_user)) -> StatusResponse:
    command = RemoveFromCart(customer_id=user.user_id, product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="removed")


@cart_router.get("")
async def view_cart(user: AuthContext = Depends(current_user)) -> dict:
    return cart_view(user.user_id)


@cart_router.post("/checkout", status_code=201, response_model=PlaceOrderResponse, response_model_exclude_none=True)
async def checkout(body: PlaceOrderRequest, user: AuthContext = Depends(current_user)) -> PlaceOrderResponse:
    command = PlaceOrder(
        customer_id=user.user_id,
        selections=json.dumps([s.model_dump() for s in body.selections]),
        address=body.address,
        phone_number=body.phone_number,
        payment_method=body.payment_method,
    )
    result = current_domain.process(command, asynchronous=False)
    return PlaceOrderResponse(**result)


# ---------------------------------------------------------------------------
# Orders (customer)
# ---------------------------------------------------------------------------
@order_router.get("")
async def my_orders(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    user: AuthContext = Depends(current_user),
) -> list[dict]:
    return list_orders(user.user_id, limit=limit, offset=offset)


@order_router.put("/{order_id}/cancel")
async def cancel_my_order(order_id: str, user: AuthContext = Depends(current_user)) -> dict:
    command = CancelOrder(order_id=order_id, customer_id=user.user_id, cancelled_by="Customer")
    current_domain.process(command, asynchronous=False)
    return get_order(order_id)


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------
@admin_router.get("/orders")
async def all_orders(limit: int = Query(100, ge=1, le=500), offset: int = Query(0, ge=0)) -> list[dict]:
    return list_all_orders(limit=limit, offset=offset)


@admin_router.put("/orders/{order_id}/status")
async def change_order_status(order_id: str, body: ChangeStatusRequest) -> dict:
    command = ChangeOrderStatus(order_id=order_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    return get_order(order_id)


@admin_router.put("/orders/{order_id}/cancel")
async def cancel_order(order_id: str) -> dict:
    command = CancelOrder(order_id=order_id, cancelled_by="Admin")
    current_domain.process(command, asynchronous=False)
    return get_order(order_id)


@admin_router.post("/products", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest) -> ProductIdResponse:
    command = AddProduct(
        product_name=body.product_name,
        unit=body.unit,
        price=body.price,
        discount=body.discount,
        total_units=body.total_units,
        images=json.dumps(body.images),
        description=body.description,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@admin_router.put("/products/{product_id}/pricing")
async def update_product_pricing(product_id: str, body: UpdatePricingRequest) -> dict:
    command = UpdateProductPricing(product_id=product_id, price=body.price, discount=body.discount)
    current_domain.process(command, asynchronous=False)
    return get_product(product_id)


@admin_router.put("/products/{product_id}/stock")
async def restock_product(product_id: str, body: RestockRequest) -> dict:
    command = RestockProduct(product_id=product_id, total_units=body.total_units)
    current_domain.process(command, asynchronous=False)
    return get_product(product_id)


@admin_router.delete("/products/{product_id}", response_model=StatusResponse)
async def remove_product(product_id: str) -> StatusResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse(status="removed")
