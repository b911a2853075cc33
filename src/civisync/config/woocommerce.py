"""WooCommerce REST configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ReadCache, ResilienceConfig, RetryPolicy

WOOCOMMERCE_API_PATH = "/wp-json/wc/v3/"
WOOCOMMERCE_TIMEOUT_SECONDS = 15.0
PRODUCT_CACHE_TTL_SECONDS = 300.0


def _is_product_payload(payload: object) -> bool:
    # orders and notes change underneath us, only product reads are cached
    return isinstance(payload, dict) and "tax_status" in payload and "order_key" not in payload


@dataclass(frozen=True, slots=True)
class WooCommerceConfig:
    resilience: ResilienceConfig


def get_woocommerce_config() -> WooCommerceConfig:
    values = require_env_vars(
        ("WOOCOMMERCE_URL", "WOOCOMMERCE_CONSUMER_KEY", "WOOCOMMERCE_CONSUMER_SECRET")
    )
    base_url = values["WOOCOMMERCE_URL"].rstrip("/") + WOOCOMMERCE_API_PATH

    resilience = ResilienceConfig(
        name="woocommerce",
        base_url=base_url,
        timeout_seconds=WOOCOMMERCE_TIMEOUT_SECONDS,
        retry=RetryPolicy(attempts=3),
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=ReadCache(ttl_seconds=PRODUCT_CACHE_TTL_SECONDS, cacheable=_is_product_payload),
        auth=(values["WOOCOMMERCE_CONSUMER_KEY"], values["WOOCOMMERCE_CONSUMER_SECRET"]),
    )
    return WooCommerceConfig(resilience=resilience)
