"""Ports for reading from and annotating the commerce side."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from civisync.domain.model import Order, ProductMapping


@runtime_checkable
class OrderReader(Protocol):
    def get_order(self, order_id: int) -> Order: ...


@runtime_checkable
class ProductCatalog(Protocol):
    """Lookup of the CRM mapping stored on products and variations."""

    def get_product(
        self, product_id: int, *, variation_id: int | None = None
    ) -> ProductMapping | None: ...


@runtime_checkable
class OrderNotes(Protocol):
    """Human-visible notes attached to an order."""

    def add_note(self, order_id: int, note: str) -> None: ...


@runtime_checkable
class OrderAttributes(Protocol):
    """Campaign id and source recorded on the order by shop staff."""

    def get_order_attributes(self, order_id: int) -> tuple[int | None, str | None]: ...


@runtime_checkable
class Shop(OrderReader, ProductCatalog, OrderNotes, OrderAttributes, Protocol):
    """Everything the sync entry points need from the commerce side."""
