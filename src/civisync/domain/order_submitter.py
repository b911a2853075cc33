"""Submit a composed order to the CRM as a pending contribution."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from civisync.domain.errors import ApiError, ConsistencyError
from civisync.domain.events import ContributionCreated
from civisync.domain.model import (
    Contribution,
    ContributionStatus,
    order_trxn_id,
    payment_instrument_for,
)

if TYPE_CHECKING:
    from civisync.config.sync import SyncSettings
    from civisync.domain.events import SyncEvents
    from civisync.domain.line_items import Composition
    from civisync.domain.model import CorrelationMeta, Order
    from civisync.domain.ports.crm import CrmGateway

log = getLogger(__name__)


def invoice_id_for(order: Order) -> str:
    if order.number:
        return order.number
    return f"{order.id}_order"


class OrderSubmitter:
    def __init__(self, gateway: CrmGateway, settings: SyncSettings, events: SyncEvents) -> None:
        self._gateway = gateway
        self._settings = settings
        self._events = events

    def build_contribution(
        self,
        contact_id: int,
        composition: Composition,
        order: Order,
        correlation: CorrelationMeta,
    ) -> Contribution:
        """Build the pending contribution; campaign and source are recorded on the order."""

        if composition.financial_type_id is None:
            raise ConsistencyError(
                f"Order {order.id}: line items disagree on the financial type and no "
                "default financial type is configured"
            )

        correlation.record_campaign(self._settings.campaign_id)
        correlation.record_source(self._settings.global_source)

        return Contribution(
            contact_id=contact_id,
            financial_type_id=composition.financial_type_id,
            status=ContributionStatus.PENDING,
            receive_date=order.date_paid or order.date_created,
            trxn_id=order_trxn_id(order.id),
            invoice_id=invoice_id_for(order),
            is_pay_later=self._settings.is_pay_later(order.payment_method),
            source=correlation.source,
            campaign_id=correlation.campaign_id,
            payment_instrument_id=payment_instrument_for(order.payment_method),
            note=composition.note or None,
            line_items=composition.line_items,
        )

    def submit(
        self,
        contact_id: int,
        composition: Composition | None,
        order: Order,
        correlation: CorrelationMeta,
    ) -> int | None:
        """Create the contribution; ``None`` when there is nothing to submit."""

        if composition is None or not composition.line_items:
            log.info("Order %s: no line items, contribution not created", order.id)
            return None

        if correlation.contribution_id:
            log.info("Order %s already has contribution %s", order.id, correlation.contribution_id)
            return correlation.contribution_id

        contribution = self.build_contribution(contact_id, composition, order, correlation)
        try:
            created = self._gateway.create_order(contribution)
        except ApiError as exc:
            log.error("Order %s: contribution could not be created: %s", order.id, exc.context())
            raise

        if created.id is None:
            raise ApiError(
                "CRM returned a contribution without an id",
                entity="Order",
                action="create",
            )

        correlation.record_contribution(created.id)
        log.info("Order %s: created contribution %s", order.id, created.id)
        self._events.emit(ContributionCreated(contribution=created, order=order))
        return created.id
