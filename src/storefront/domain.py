"""Storefront bounded context — Catalogue stock, Shopping Cart and Orders.

Handles the product stock counters, per-customer carts, the checkout flow
that turns selected cart lines into an order while reserving inventory, and
the order lifecycle (status changes and cancellation with stock restoration).
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
