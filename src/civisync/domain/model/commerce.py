"""Read-only view of commerce orders as the sync core consumes them."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from civisync.domain.model.enums import PAID_ORDER_STATUSES, OrderStatus

if TYPE_CHECKING:
    from datetime import datetime

CHECKOUT = "checkout"
ZERO = Decimal(0)


@dataclass(frozen=True, kw_only=True)
class Billing:
    first_name: str = ""
    last_name: str = ""
    email: str = ""


@dataclass(frozen=True, kw_only=True)
class OrderItem:
    item_id: int
    product_id: int
    variation_id: int | None = None
    name: str
    quantity: int
    line_total: Decimal
    line_tax: Decimal = ZERO


@dataclass(frozen=True, kw_only=True)
class Order:
    id: int
    number: str | None = None
    order_key: str | None = None
    billing: Billing = field(default_factory=Billing)
    items: tuple[OrderItem, ...] = ()
    shipping_total: Decimal = ZERO
    total: Decimal = ZERO
    payment_method: str | None = None
    status: str = OrderStatus.PENDING
    date_paid: datetime | None = None
    date_created: datetime | None = None
    # zero for guest checkouts
    customer_id: int = 0
    created_via: str = CHECKOUT

    def is_paid(self) -> bool:
        return OrderStatus.parse(self.status) in PAID_ORDER_STATUSES

    @property
    def from_authenticated_checkout(self) -> bool:
        return self.created_via == CHECKOUT and self.customer_id > 0
