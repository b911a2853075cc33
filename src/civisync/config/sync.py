"""Synchronization settings for order processing."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, env_list, env_str, optional_env_int

DEFAULT_CONTACT_TYPE = "Individual"
DEFAULT_CONTACT_SOURCE = "WooCommerce Purchase"
DEFAULT_GLOBAL_SOURCE = "Shop"


@dataclass(frozen=True, slots=True)
class SyncSettings:
    """Shop-level settings that shape the CRM records created for an order.

    ``default_financial_type_id`` is the fallback applied when the line items of an
    order carry more than one financial type. ``shipping_financial_type_id`` is
    required for shipping to be recorded at all.
    """

    default_financial_type_id: int | None = None
    shipping_financial_type_id: int | None = None
    campaign_id: int | None = None
    contact_type: str = DEFAULT_CONTACT_TYPE
    contact_sub_type: str | None = None
    dedupe_rule_id: int | None = None
    pay_later_gateways: frozenset[str] = frozenset()
    ignore_zero_amount_orders: bool = False
    global_source: str = DEFAULT_GLOBAL_SOURCE
    contact_source: str = DEFAULT_CONTACT_SOURCE

    def is_pay_later(self, payment_method: str | None) -> bool:
        return payment_method is not None and payment_method in self.pay_later_gateways


def get_sync_settings() -> SyncSettings:
    sub_type = env_str("CIVISYNC_CONTACT_SUB_TYPE", "")
    return SyncSettings(
        default_financial_type_id=optional_env_int("CIVISYNC_DEFAULT_FINANCIAL_TYPE_ID"),
        shipping_financial_type_id=optional_env_int("CIVISYNC_SHIPPING_FINANCIAL_TYPE_ID"),
        campaign_id=optional_env_int("CIVISYNC_CAMPAIGN_ID"),
        contact_type=env_str("CIVISYNC_CONTACT_TYPE", DEFAULT_CONTACT_TYPE),
        contact_sub_type=sub_type or None,
        dedupe_rule_id=optional_env_int("CIVISYNC_DEDUPE_RULE_ID"),
        pay_later_gateways=frozenset(env_list("CIVISYNC_PAY_LATER_GATEWAYS")),
        ignore_zero_amount_orders=env_flag("CIVISYNC_IGNORE_ZERO_AMOUNT_ORDERS"),
        global_source=env_str("CIVISYNC_GLOBAL_SOURCE", DEFAULT_GLOBAL_SOURCE),
        contact_source=env_str("CIVISYNC_CONTACT_SOURCE", DEFAULT_CONTACT_SOURCE),
    )
