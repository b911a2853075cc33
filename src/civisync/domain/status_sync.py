"""Mirror commerce order status transitions onto the CRM contribution."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from civisync.domain.errors import ApiError, SyncError
from civisync.domain.events import ContributionStatusUpdated, PaymentCreated
from civisync.domain.line_items import excluded_amount
from civisync.domain.model import (
    CONTRIBUTION_STATUS_BY_ORDER_STATUS,
    ContributionStatus,
    OrderStatus,
    Payment,
    order_trxn_id,
    payment_instrument_for,
)

if TYPE_CHECKING:
    from civisync.config.sync import SyncSettings
    from civisync.domain.events import SyncEvents
    from civisync.domain.model import Contribution, CorrelationMeta, Order
    from civisync.domain.ports.commerce import ProductCatalog
    from civisync.domain.ports.crm import CrmGateway

log = getLogger(__name__)


class StatusAction(StrEnum):
    UNCHANGED = "unchanged"
    SAME_CRM_STATUS = "same_crm_status"
    NOT_SYNCED = "not_synced"
    ZERO_AMOUNT = "zero_amount"
    PAYMENT_CREATED = "payment_created"
    STATUS_UPDATED = "status_updated"
    DUPLICATE_SIGNAL = "duplicate_signal"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StatusSyncOutcome:
    action: StatusAction
    contribution_id: int | None = None
    status: ContributionStatus | None = None
    error: SyncError | None = None

    @property
    def ok(self) -> bool:
        return self.action is not StatusAction.FAILED

    @property
    def remote_write(self) -> bool:
        return self.action in {StatusAction.PAYMENT_CREATED, StatusAction.STATUS_UPDATED}


def map_order_status(raw: str) -> ContributionStatus:
    """Map a commerce status onto the CRM; unknown values map to Completed."""

    status = OrderStatus.parse(raw)
    if status is None:
        log.warning("Unknown order status %r, treating it as Completed", raw)
        return ContributionStatus.COMPLETED
    return CONTRIBUTION_STATUS_BY_ORDER_STATUS[status]


class StatusSynchronizer:
    """Decide between a status update and a payment for each status transition.

    Failures are logged and reported in the outcome; the contribution is left in
    its last good state.
    """

    def __init__(
        self,
        gateway: CrmGateway,
        catalog: ProductCatalog,
        settings: SyncSettings,
        events: SyncEvents,
    ) -> None:
        self._gateway = gateway
        self._catalog = catalog
        self._settings = settings
        self._events = events

    def handle(
        self,
        order: Order,
        old_status: str,
        new_status: str,
        correlation: CorrelationMeta,
    ) -> StatusSyncOutcome:
        if old_status == new_status:
            return StatusSyncOutcome(StatusAction.UNCHANGED)

        old_mapped = map_order_status(old_status)
        new_mapped = map_order_status(new_status)
        if old_mapped == new_mapped:
            log.debug(
                "Order %s: %s -> %s keeps CRM status %s",
                order.id,
                old_status,
                new_status,
                new_mapped,
            )
            return StatusSyncOutcome(StatusAction.SAME_CRM_STATUS, status=new_mapped)

        contribution_id = correlation.contribution_id
        if not contribution_id:
            log.info("Order %s has no contribution, status change not synced", order.id)
            return StatusSyncOutcome(StatusAction.NOT_SYNCED, status=new_mapped)

        try:
            if new_mapped is ContributionStatus.COMPLETED and order.is_paid():
                return self._create_payment(order, contribution_id)
            return self._update_status(order, contribution_id, new_mapped)
        except SyncError as exc:
            log.exception("Order %s: status sync to %s failed", order.id, new_mapped.name)
            return StatusSyncOutcome(
                StatusAction.FAILED,
                contribution_id=contribution_id,
                status=new_mapped,
                error=exc,
            )

    def _create_payment(self, order: Order, contribution_id: int) -> StatusSyncOutcome:
        if self._settings.ignore_zero_amount_orders and order.total == 0:
            log.info("Order %s: zero amount, payment skipped", order.id)
            return StatusSyncOutcome(StatusAction.ZERO_AMOUNT, contribution_id=contribution_id)

        amount = order.total - excluded_amount(order, self._catalog)
        if amount <= 0:
            log.info("Order %s: nothing synced is payable, payment skipped", order.id)
            return StatusSyncOutcome(StatusAction.ZERO_AMOUNT, contribution_id=contribution_id)

        contribution = self._fetch(contribution_id)
        payment = Payment(
            contribution_id=contribution_id,
            total_amount=amount,
            trxn_date=order.date_paid,
            trxn_id=order_trxn_id(order.id),
            payment_instrument_id=payment_instrument_for(order.payment_method),
        )
        created = self._gateway.create_payment(payment)
        log.info("Order %s: recorded payment of %s on %s", order.id, amount, contribution_id)

        contribution = replace(contribution, status=ContributionStatus.COMPLETED)
        self._events.emit(
            PaymentCreated(payment=created, contribution=contribution, order=order)
        )
        return StatusSyncOutcome(
            StatusAction.PAYMENT_CREATED,
            contribution_id=contribution_id,
            status=ContributionStatus.COMPLETED,
        )

    def _update_status(
        self, order: Order, contribution_id: int, status: ContributionStatus
    ) -> StatusSyncOutcome:
        contribution = self._fetch(contribution_id).without_amounts()
        contribution.status = status
        contribution.note = None
        if order.is_paid() and order.date_paid is not None:
            contribution.receive_date = order.date_paid

        updated = self._gateway.update_contribution(contribution)
        log.info("Order %s: contribution %s set to %s", order.id, contribution_id, status.name)
        self._events.emit(ContributionStatusUpdated(contribution=updated, order=order))
        return StatusSyncOutcome(
            StatusAction.STATUS_UPDATED,
            contribution_id=contribution_id,
            status=status,
        )

    def _fetch(self, contribution_id: int) -> Contribution:
        contribution = self._gateway.get_contribution(contribution_id)
        if contribution is None:
            raise ApiError(
                f"Contribution {contribution_id} could not be fetched",
                entity="Contribution",
                action="get",
                params={"id": contribution_id},
            )
        return contribution
