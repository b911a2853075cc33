from __future__ import annotations

import pytest

from civisync.config import (
    MissingConfigurationError,
    get_civicrm_config,
    get_sync_settings,
    get_woocommerce_config,
)
from civisync.config.sync import DEFAULT_CONTACT_SOURCE, DEFAULT_GLOBAL_SOURCE

SYNC_VARIABLES = (
    "CIVISYNC_DEFAULT_FINANCIAL_TYPE_ID",
    "CIVISYNC_SHIPPING_FINANCIAL_TYPE_ID",
    "CIVISYNC_CAMPAIGN_ID",
    "CIVISYNC_CONTACT_TYPE",
    "CIVISYNC_CONTACT_SUB_TYPE",
    "CIVISYNC_DEDUPE_RULE_ID",
    "CIVISYNC_PAY_LATER_GATEWAYS",
    "CIVISYNC_IGNORE_ZERO_AMOUNT_ORDERS",
    "CIVISYNC_GLOBAL_SOURCE",
    "CIVISYNC_CONTACT_SOURCE",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in SYNC_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_sync_settings_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = get_sync_settings()

    assert settings.default_financial_type_id is None
    assert settings.contact_type == "Individual"
    assert settings.contact_sub_type is None
    assert settings.pay_later_gateways == frozenset()
    assert settings.ignore_zero_amount_orders is False
    assert settings.global_source == DEFAULT_GLOBAL_SOURCE
    assert settings.contact_source == DEFAULT_CONTACT_SOURCE


def test_sync_settings_from_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CIVISYNC_DEFAULT_FINANCIAL_TYPE_ID", "1")
    clean_env.setenv("CIVISYNC_SHIPPING_FINANCIAL_TYPE_ID", "9")
    clean_env.setenv("CIVISYNC_CONTACT_SUB_TYPE", "Customer")
    clean_env.setenv("CIVISYNC_PAY_LATER_GATEWAYS", "cheque,bacs")
    clean_env.setenv("CIVISYNC_IGNORE_ZERO_AMOUNT_ORDERS", "yes")

    settings = get_sync_settings()

    assert settings.default_financial_type_id == 1
    assert settings.shipping_financial_type_id == 9
    assert settings.contact_sub_type == "Customer"
    assert settings.is_pay_later("cheque")
    assert not settings.is_pay_later("stripe")
    assert not settings.is_pay_later(None)
    assert settings.ignore_zero_amount_orders is True


def test_civicrm_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CIVICRM_REST_URL", "https://crm.example.org/civicrm/ajax/rest")
    monkeypatch.delenv("CIVICRM_API_KEY", raising=False)
    monkeypatch.delenv("CIVICRM_SITE_KEY", raising=False)

    with pytest.raises(MissingConfigurationError, match="CIVICRM_API_KEY, CIVICRM_SITE_KEY"):
        get_civicrm_config()


def test_civicrm_writes_are_not_retried(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CIVICRM_REST_URL", "https://crm.example.org/civicrm/ajax/rest")
    monkeypatch.setenv("CIVICRM_API_KEY", "user-key")
    monkeypatch.setenv("CIVICRM_SITE_KEY", "site-key")

    config = get_civicrm_config()

    assert config.resilience.retry.attempts == 0
    assert config.resilience.cache is None


def test_woocommerce_config_builds_api_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WOOCOMMERCE_URL", "https://shop.example.org/")
    monkeypatch.setenv("WOOCOMMERCE_CONSUMER_KEY", "ck_1")
    monkeypatch.setenv("WOOCOMMERCE_CONSUMER_SECRET", "cs_1")

    config = get_woocommerce_config()
    cache = config.resilience.cache

    assert config.resilience.base_url == "https://shop.example.org/wp-json/wc/v3/"
    assert config.resilience.auth == ("ck_1", "cs_1")
    assert cache is not None
    assert cache.cacheable({"id": 12, "tax_status": "taxable"})
    assert not cache.cacheable({"id": 31, "order_key": "wc_order", "tax_status": "taxable"})
    assert not cache.cacheable([{"id": 1}])
