"""Blocking commerce ports over the async WooCommerce client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Self

from .translator import order_attributes, order_from_payload, product_mapping_from_payload

if TYPE_CHECKING:
    from types import TracebackType

    from civisync.domain.model import Order, ProductMapping
    from civisync.domain.ports.commerce import Shop

    from .client import WooCommerceClient

log = getLogger(__name__)


class WooCommerceStore:
    """Order reader, product catalog and note writer backed by one client session."""

    def __init__(self, client: WooCommerceClient) -> None:
        self._client = client
        self._runner = asyncio.Runner()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        try:
            self._runner.run(self._client.aclose())
        finally:
            self._runner.close()

    def get_order(self, order_id: int) -> Order:
        return order_from_payload(self._runner.run(self._client.fetch_order(order_id)))

    def get_order_attributes(self, order_id: int) -> tuple[int | None, str | None]:
        return order_attributes(self._runner.run(self._client.fetch_order(order_id)))

    def get_product(
        self, product_id: int, *, variation_id: int | None = None
    ) -> ProductMapping | None:
        parent = self._runner.run(self._client.fetch_product(product_id))
        if parent is None:
            log.warning("Product %s no longer exists", product_id)
            return None
        if not variation_id:
            return product_mapping_from_payload(parent)

        variation = self._runner.run(self._client.fetch_variation(product_id, variation_id))
        if variation is None:
            log.warning("Variation %s of product %s no longer exists", variation_id, product_id)
            return None
        return product_mapping_from_payload(variation, parent=parent)

    def add_note(self, order_id: int, note: str) -> None:
        self._runner.run(self._client.create_order_note(order_id, note))


if TYPE_CHECKING:

    def _shop_check(client: WooCommerceClient) -> Shop:
        return WooCommerceStore(client)
