from __future__ import annotations

from decimal import Decimal

import pytest

from civisync.domain.model import (
    Contact,
    Contribution,
    EntityType,
    OrderStatus,
    order_trxn_id,
    payment_instrument_for,
)
from tests.helpers.commerce import make_order, make_product


@pytest.mark.parametrize(
    ("status", "paid"),
    [
        ("processing", True),
        ("completed", True),
        ("wc-completed", True),
        ("pending", False),
        ("on-hold", False),
        ("refunded", False),
        ("something-else", False),
    ],
)
def test_order_is_paid(status: str, paid: bool) -> None:
    assert make_order(status=status).is_paid() is paid


def test_order_status_parse_accepts_storage_prefix() -> None:
    assert OrderStatus.parse("wc-on-hold") is OrderStatus.ON_HOLD
    assert OrderStatus.parse(" Completed ") is OrderStatus.COMPLETED
    assert OrderStatus.parse("") is None
    assert OrderStatus.parse("draft") is None


def test_authenticated_checkout_requires_customer_and_checkout() -> None:
    assert make_order(customer_id=3).from_authenticated_checkout
    assert not make_order(customer_id=0).from_authenticated_checkout
    assert not make_order(customer_id=3, created_via="admin").from_authenticated_checkout


def test_product_exclusion_rules() -> None:
    assert make_product(1, entity_type=EntityType.EXCLUDE).is_excluded()
    assert make_product(1, entity_type=EntityType.UNSET).is_excluded()
    assert make_product(1, legacy_excluded=True).is_excluded()
    assert not make_product(1, entity_type=EntityType.PARTICIPANT).is_excluded()
    assert not make_product(1, entity_type=EntityType.UNSET, custom_kind=True).is_excluded()


def test_sub_types_are_merged() -> None:
    contact = Contact(sub_types=frozenset({"Student"}))

    contact.add_sub_type("Customer")
    contact.add_sub_type("Student")
    contact.add_sub_type(None)

    assert contact.sub_types == frozenset({"Student", "Customer"})


def test_without_amounts_keeps_everything_else() -> None:
    contribution = Contribution(
        id=5,
        contact_id=7,
        source="Shop",
        total_amount=Decimal(10),
        fee_amount=Decimal(1),
        net_amount=Decimal(9),
        non_deductible_amount=Decimal(0),
    )

    stripped = contribution.without_amounts()

    assert stripped.total_amount is None
    assert stripped.fee_amount is None
    assert stripped.net_amount is None
    assert stripped.non_deductible_amount is None
    assert stripped.source == "Shop"
    assert contribution.total_amount == Decimal(10)


def test_payment_instrument_defaults_to_credit_card() -> None:
    assert payment_instrument_for("cod") == 3
    assert payment_instrument_for("unknown") == 1
    assert payment_instrument_for(None) == 1
    assert order_trxn_id(42) == "Order - 42"
