from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from civisync.adapters.woocommerce.schema import OrderPayload, ProductPayload
from civisync.adapters.woocommerce.translator import (
    CONTRIBUTION_PFV_KEY,
    ENTITY_TYPE_KEY,
    FINANCIAL_TYPE_KEY,
    MEMBERSHIP_TYPE_KEY,
    ORDER_CAMPAIGN_KEY,
    ORDER_SOURCE_KEY,
    PARTICIPANT_PFV_KEY,
    VARIABLE_ENTITY_TYPE_KEY,
    custom_meta_key,
    order_attributes,
    order_from_payload,
    product_mapping_from_payload,
    variation_meta_key,
)
from civisync.domain.model import EntityType


def _meta(**values: object) -> list[dict[str, object]]:
    return [
        {"id": index, "key": key, "value": value}
        for index, (key, value) in enumerate(values.items())
    ]


@pytest.fixture
def order_payload() -> dict[str, object]:
    return {
        "id": 31,
        "number": "1031",
        "order_key": "wc_order_abc",
        "status": "processing",
        "total": "54.95",
        "shipping_total": "4.95",
        "payment_method": "bacs",
        "date_paid_gmt": "2024-03-01T09:30:00",
        "date_created_gmt": "2024-03-01T09:29:00",
        "customer_id": 4,
        "created_via": "checkout",
        "billing": {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.org"},
        "line_items": [
            {
                "id": 7,
                "name": "Poster - Large",
                "product_id": 12,
                "variation_id": 13,
                "quantity": 2,
                "total": "50.00",
                "total_tax": "0.00",
            },
            {"id": 8, "name": "Sticker", "product_id": 14, "variation_id": 0, "total": "0"},
        ],
        "meta_data": _meta(**{ORDER_CAMPAIGN_KEY: "4", ORDER_SOURCE_KEY: " "}),
        "_links": {},
    }


def test_order_from_payload(order_payload: dict[str, object]) -> None:
    order = order_from_payload(OrderPayload.model_validate(order_payload))

    assert order.id == 31
    assert order.number == "1031"
    assert order.total == Decimal("54.95")
    assert order.shipping_total == Decimal("4.95")
    assert order.billing.email == "ada@example.org"
    assert order.date_paid == datetime(2024, 3, 1, 9, 30, tzinfo=UTC)
    assert order.is_paid()
    assert order.from_authenticated_checkout
    first, second = order.items
    assert first.variation_id == 13
    assert first.quantity == 2
    assert second.variation_id is None


def test_blank_dates_are_unset(order_payload: dict[str, object]) -> None:
    order_payload["date_paid_gmt"] = ""

    assert order_from_payload(OrderPayload.model_validate(order_payload)).date_paid is None


def test_order_attributes_ignore_blank_source(order_payload: dict[str, object]) -> None:
    assert order_attributes(OrderPayload.model_validate(order_payload)) == (4, None)


def test_simple_product_mapping() -> None:
    product = ProductPayload.model_validate(
        {
            "id": 12,
            "name": "Annual membership",
            "price": "50",
            "tax_status": "none",
            "meta_data": _meta(
                **{
                    ENTITY_TYPE_KEY: "civicrm_membership",
                    FINANCIAL_TYPE_KEY: "2",
                    CONTRIBUTION_PFV_KEY: "11",
                    MEMBERSHIP_TYPE_KEY: "7",
                }
            ),
        }
    )

    mapping = product_mapping_from_payload(product)

    assert mapping.entity_type is EntityType.MEMBERSHIP
    assert mapping.financial_type_id == 2
    assert mapping.price_field_value_id == 11
    assert mapping.membership_type_id == 7
    assert mapping.price == Decimal(50)
    assert mapping.taxable is False
    assert not mapping.is_excluded()


def test_participant_product_reads_participant_price_field_value() -> None:
    product = ProductPayload.model_validate(
        {
            "id": 15,
            "meta_data": _meta(
                **{
                    ENTITY_TYPE_KEY: "civicrm_participant",
                    CONTRIBUTION_PFV_KEY: "3",
                    PARTICIPANT_PFV_KEY: "9",
                }
            ),
        }
    )

    assert product_mapping_from_payload(product).price_field_value_id == 9


def test_legacy_exclude_marker() -> None:
    product = ProductPayload.model_validate(
        {
            "id": 16,
            "meta_data": _meta(
                **{ENTITY_TYPE_KEY: "civicrm_contribution", FINANCIAL_TYPE_KEY: "exclude"}
            ),
        }
    )

    mapping = product_mapping_from_payload(product)

    assert mapping.legacy_excluded
    assert mapping.financial_type_id is None
    assert mapping.is_excluded()


def test_unknown_entity_type_is_unset(caplog: pytest.LogCaptureFixture) -> None:
    product = ProductPayload.model_validate(
        {"id": 17, "meta_data": _meta(**{ENTITY_TYPE_KEY: "civicrm_grant"})}
    )

    mapping = product_mapping_from_payload(product)

    assert mapping.entity_type is EntityType.UNSET
    assert mapping.is_excluded()
    assert "civicrm_grant" in caplog.text


def test_variation_takes_entity_type_from_parent() -> None:
    parent = ProductPayload.model_validate(
        {
            "id": 12,
            "type": "variable",
            "meta_data": _meta(**{VARIABLE_ENTITY_TYPE_KEY: "civicrm_membership"}),
        }
    )
    variation = ProductPayload.model_validate(
        {
            "id": 13,
            "type": "variation",
            "parent_id": 12,
            "name": "Poster - Large",
            "price": "25",
            "meta_data": _meta(
                **{
                    variation_meta_key(EntityType.MEMBERSHIP, "membership_type_id"): "7",
                    variation_meta_key(EntityType.MEMBERSHIP, "price_field_value_id"): "11",
                }
            ),
        }
    )

    mapping = product_mapping_from_payload(variation, parent=parent)

    assert mapping.entity_type is EntityType.MEMBERSHIP
    assert mapping.variant is not None
    assert mapping.variant.membership_type_id == 7
    assert mapping.variant.price_field_value_id == 11
    assert mapping.variant.event_id is None


def test_custom_product_kind_uses_its_own_namespace() -> None:
    product = ProductPayload.model_validate(
        {
            "id": 20,
            "type": "civicrm_contribution",
            "meta_data": _meta(
                **{
                    custom_meta_key(EntityType.CONTRIBUTION, "financial_type_id"): "5",
                    custom_meta_key(EntityType.CONTRIBUTION, "membership_type_id"): "7",
                }
            ),
        }
    )

    mapping = product_mapping_from_payload(product)

    assert mapping.custom_kind
    assert mapping.variant is not None
    assert mapping.variant.financial_type_id == 5
    assert mapping.variant.membership_type_id is None


def test_meta_key_namespaces() -> None:
    assert variation_meta_key(EntityType.PARTICIPANT, "participant_role_id") == (
        "_wpcv_wci_variable_participant_role_id"
    )
    assert custom_meta_key(EntityType.MEMBERSHIP, "price_field_value_id") == (
        "_wpcv_woo_civicrm_membership_pfv_id"
    )
