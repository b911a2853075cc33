"""WooCommerce REST adapter."""

from __future__ import annotations

from civisync.config.woocommerce import WooCommerceConfig, get_woocommerce_config

from .client import WooCommerceAPIError, WooCommerceClient
from .schema import OrderPayload, ProductPayload
from .store import WooCommerceStore
from .translator import order_attributes, order_from_payload, product_mapping_from_payload


def build_woocommerce_store(config: WooCommerceConfig | None = None) -> WooCommerceStore:
    """Return a store wired to the configured shop."""

    return WooCommerceStore(WooCommerceClient(config or get_woocommerce_config()))


__all__ = [
    "OrderPayload",
    "ProductPayload",
    "WooCommerceAPIError",
    "WooCommerceClient",
    "WooCommerceStore",
    "build_woocommerce_store",
    "order_attributes",
    "order_from_payload",
    "product_mapping_from_payload",
]
