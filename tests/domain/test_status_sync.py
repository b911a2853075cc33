from __future__ import annotations

from decimal import Decimal

import pytest

from civisync.config.sync import SyncSettings
from civisync.domain.events import (
    ContributionStatusUpdated,
    PaymentCreated,
    SyncEvent,
    SyncEvents,
)
from civisync.domain.model import (
    Contribution,
    ContributionStatus,
    CorrelationMeta,
    EntityType,
    OrderStatus,
    Payment,
)
from civisync.domain.status_sync import (
    StatusAction,
    StatusSynchronizer,
    map_order_status,
)
from tests.helpers.commerce import PAID_AT, FakeCatalog, make_item, make_order, make_product
from tests.helpers.crm import FakeCrmGateway

CONTRIBUTION_ID = 500


def _gateway() -> FakeCrmGateway:
    gateway = FakeCrmGateway()
    gateway.contributions[CONTRIBUTION_ID] = Contribution(
        id=CONTRIBUTION_ID,
        contact_id=77,
        financial_type_id=5,
        total_amount=Decimal(40),
        net_amount=Decimal(40),
        note="Poster x 1",
    )
    return gateway


def _synchronizer(
    gateway: FakeCrmGateway,
    catalog: FakeCatalog | None = None,
    settings: SyncSettings | None = None,
    events: SyncEvents | None = None,
) -> StatusSynchronizer:
    return StatusSynchronizer(
        gateway,
        catalog or FakeCatalog([make_product(1, financial_type_id=5)]),
        settings or SyncSettings(),
        events or SyncEvents(),
    )


def _synced() -> CorrelationMeta:
    return CorrelationMeta(order_id=1, contact_id=77, contribution_id=CONTRIBUTION_ID)


def test_completing_a_paid_order_records_the_payment() -> None:
    gateway = _gateway()
    events = SyncEvents()
    seen: list[SyncEvent] = []
    events.subscribe(PaymentCreated, seen.append)
    order = make_order(make_item(1, "40"), status="completed", payment_method="bacs")

    outcome = _synchronizer(gateway, events=events).handle(
        order, "processing", "completed", _synced()
    )

    assert outcome.action is StatusAction.PAYMENT_CREATED
    (payment,) = gateway.called("create_payment")
    assert isinstance(payment, Payment)
    assert payment.contribution_id == CONTRIBUTION_ID
    assert payment.total_amount == order.total
    assert payment.trxn_date == PAID_AT
    assert payment.trxn_id == "Order - 1"
    assert payment.payment_instrument_id == 5
    assert gateway.called("update_contribution") == []
    assert len(seen) == 1


def test_statuses_mapping_to_the_same_crm_status_make_no_calls() -> None:
    gateway = _gateway()
    order = make_order(make_item(1, "40"), status="on-hold")

    outcome = _synchronizer(gateway).handle(order, "pending", "on-hold", _synced())

    assert outcome.action is StatusAction.SAME_CRM_STATUS
    assert outcome.remote_write is False
    assert gateway.calls == []


def test_unchanged_status_is_a_no_op() -> None:
    gateway = _gateway()

    outcome = _synchronizer(gateway).handle(make_order(), "completed", "completed", _synced())

    assert outcome.action is StatusAction.UNCHANGED
    assert gateway.calls == []


def test_cancellation_updates_status_without_amounts() -> None:
    gateway = _gateway()
    events = SyncEvents()
    seen: list[SyncEvent] = []
    events.subscribe(ContributionStatusUpdated, seen.append)
    order = make_order(make_item(1, "40"), status="cancelled")

    outcome = _synchronizer(gateway, events=events).handle(
        order, "pending", "cancelled", _synced()
    )

    assert outcome.action is StatusAction.STATUS_UPDATED
    assert outcome.status is ContributionStatus.CANCELLED
    (updated,) = gateway.called("update_contribution")
    assert isinstance(updated, Contribution)
    assert updated.status is ContributionStatus.CANCELLED
    assert updated.total_amount is None
    assert updated.net_amount is None
    assert updated.note is None
    assert len(seen) == 1


def test_completed_but_unpaid_order_updates_status() -> None:
    gateway = _gateway()
    order = make_order(make_item(1, "40"), status="pending")

    outcome = _synchronizer(gateway).handle(order, "pending", "wc-unknown-status", _synced())

    assert outcome.action is StatusAction.STATUS_UPDATED
    assert outcome.status is ContributionStatus.COMPLETED
    assert gateway.called("create_payment") == []


def test_unsynced_order_is_reported() -> None:
    gateway = _gateway()

    outcome = _synchronizer(gateway).handle(
        make_order(), "pending", "cancelled", CorrelationMeta(order_id=1)
    )

    assert outcome.action is StatusAction.NOT_SYNCED
    assert gateway.calls == []


def test_zero_amount_order_skips_payment_when_configured() -> None:
    gateway = _gateway()
    settings = SyncSettings(ignore_zero_amount_orders=True)
    order = make_order(make_item(1, "0"), status="completed")

    outcome = _synchronizer(gateway, settings=settings).handle(
        order, "processing", "completed", _synced()
    )

    assert outcome.action is StatusAction.ZERO_AMOUNT
    assert gateway.called("create_payment") == []


def test_payment_excludes_items_that_never_synced() -> None:
    gateway = _gateway()
    catalog = FakeCatalog(
        [
            make_product(1, financial_type_id=5),
            make_product(2, entity_type=EntityType.EXCLUDE),
        ]
    )
    order = make_order(make_item(1, "40"), make_item(2, "15"), status="completed")

    _synchronizer(gateway, catalog).handle(order, "processing", "completed", _synced())

    (payment,) = gateway.called("create_payment")
    assert isinstance(payment, Payment)
    assert payment.total_amount == Decimal(40)


def test_remote_failure_is_reported_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    gateway = _gateway()
    gateway.failing.add("update_contribution")
    order = make_order(make_item(1, "40"), status="refunded")

    outcome = _synchronizer(gateway).handle(order, "completed", "refunded", _synced())

    assert outcome.action is StatusAction.FAILED
    assert outcome.ok is False
    assert outcome.error is not None
    assert "status sync to REFUNDED failed" in caplog.text


def test_missing_contribution_fails_the_payment() -> None:
    gateway = FakeCrmGateway()
    order = make_order(make_item(1, "40"), status="completed")

    outcome = _synchronizer(gateway).handle(order, "processing", "completed", _synced())

    assert outcome.action is StatusAction.FAILED
    assert gateway.called("create_payment") == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("completed", ContributionStatus.COMPLETED),
        ("wc-completed", ContributionStatus.COMPLETED),
        ("pending", ContributionStatus.PENDING),
        ("processing", ContributionStatus.PENDING),
        ("on-hold", ContributionStatus.PENDING),
        ("cancelled", ContributionStatus.CANCELLED),
        ("failed", ContributionStatus.FAILED),
        ("refunded", ContributionStatus.REFUNDED),
        ("checkout-draft", ContributionStatus.COMPLETED),
    ],
)
def test_map_order_status(raw: str, expected: ContributionStatus) -> None:
    assert map_order_status(raw) is expected


def test_status_mapping_is_deterministic() -> None:
    for status in OrderStatus:
        assert map_order_status(status) is map_order_status(f"wc-{status}")
