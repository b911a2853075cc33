"""Pydantic models describing the WooCommerce REST v3 payloads we read."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class WooCommerceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class MetaDataEntry(WooCommerceBaseModel):
    key: str
    value: object = None


class WithMetaData(WooCommerceBaseModel):
    meta_data: list[MetaDataEntry] = Field(default_factory=list)

    def meta(self, key: str) -> object | None:
        """Return the value stored under ``key``; blank strings count as unset."""

        for entry in self.meta_data:
            if entry.key == key:
                return _blank_to_none(entry.value)
        return None


class BillingPayload(WooCommerceBaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""


class LineItemPayload(WooCommerceBaseModel):
    id: int
    name: str = ""
    product_id: int
    variation_id: int = 0
    quantity: int = 1
    total: Decimal = Decimal(0)
    total_tax: Decimal = Decimal(0)


class OrderPayload(WithMetaData):
    id: int
    number: str | None = None
    order_key: str | None = None
    status: str
    total: Decimal = Decimal(0)
    shipping_total: Decimal = Decimal(0)
    payment_method: str | None = None
    date_paid_gmt: datetime | None = None
    date_created_gmt: datetime | None = None
    customer_id: int = 0
    created_via: str = ""
    billing: BillingPayload = Field(default_factory=BillingPayload)
    line_items: list[LineItemPayload] = Field(default_factory=list)

    _normalize_blanks = field_validator(
        "number", "order_key", "payment_method", "date_paid_gmt", "date_created_gmt", mode="before"
    )(_blank_to_none)


class ProductPayload(WithMetaData):
    id: int
    name: str = ""
    type: str = "simple"
    parent_id: int = 0
    price: Decimal | None = None
    tax_status: str = "taxable"

    _normalize_price = field_validator("price", mode="before")(_blank_to_none)


class NotePayload(WooCommerceBaseModel):
    id: int
    note: str = ""


class ErrorPayload(WooCommerceBaseModel):
    code: str
    message: str = ""
