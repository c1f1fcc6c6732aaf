"""Pydantic request/response schemas for the Storefront API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Cart Request Schemas ---


class AddToCartRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod-rice-5kg"}]}}

    product_id: str = Field(..., min_length=1)


class UpdateCartQuantityRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"quantity": 3}]}}

    quantity: int = Field(..., ge=0)


class Selection(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "selections": [
                        {"product_id": "prod-rice-5kg", "quantity": 2},
                        {"product_id": "prod-lentils-1kg", "quantity": 1},
                    ],
                    "address": "Ward 4, Lalitpur",
                    "phone_number": "9800000000",
                    "payment_method": "Cash",
                }
            ]
        }
    }

    selections: list[Selection] = Field(..., min_length=1)
    address: str = Field(..., min_length=1, max_length=500)
    phone_number: str = Field(..., min_length=1, max_length=30)
    payment_method: str = Field(..., max_length=10)


# --- Order Request Schemas ---


class ChangeStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "Processing"}]}}

    status: str = Field(..., max_length=20)


# --- Product Request Schemas ---


class AddProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_name": "Basmati Rice 5kg",
                    "unit": "bag",
                    "price": 1200.0,
                    "discount": 10,
                    "total_units": 40,
                    "images": ["https://cdn.example.com/rice-front.jpg"],
                    "description": "Long grain aged basmati.",
                }
            ]
        }
    }

    product_name: str = Field(..., min_length=1, max_length=255)
    unit: str = Field(..., min_length=1, max_length=50)
    price: float = Field(..., ge=0)
    discount: float = Field(0.0, ge=0, le=100)
    total_units: int = Field(..., ge=0)
    images: list[str] = Field(default_factory=list)
    description: str | None = None


class UpdatePricingRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"price": 1100.0, "discount": 0}]}}

    price: float = Field(..., ge=0)
    discount: float = Field(0.0, ge=0, le=100)


class RestockRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"total_units": 60}]}}

    total_units: int = Field(..., ge=0)


# --- Response Schemas ---


class CartLineResponse(BaseModel):
    product_id: str
    quantity: int


class AddToCartResponse(BaseModel):
    cart_id: str
    lines: list[CartLineResponse]
    available_stock: int
    current_cart_quantity: int


class CartQuantityResponse(BaseModel):
    product_id: str
    quantity: int


class PlaceOrderResponse(BaseModel):
    order_id: str
    total_amount: float
    payment_status: str
    message: str
    instructions: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
