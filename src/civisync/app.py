"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from civisync.adapters.civicrm import build_civicrm_gateway
from civisync.adapters.sqlalchemy import SqlAlchemyCorrelationUnitOfWork, is_started, startup
from civisync.adapters.woocommerce import build_woocommerce_store
from civisync.config import configure_logging, get_sync_settings
from civisync.domain.events import ContactSaved, ContributionCreated, SyncEvent, SyncEvents
from civisync.domain.order_sync import (
    OnceToken,
    OrderSyncResult,
    OrderSyncService,
    UnitOfWorkFactory,
)

if TYPE_CHECKING:
    from civisync.config.sync import SyncSettings
    from civisync.domain.ports.commerce import OrderNotes, Shop
    from civisync.domain.ports.crm import CrmGateway
    from civisync.domain.status_sync import StatusSyncOutcome

log = getLogger(__name__)


def register_order_notes(events: SyncEvents, notes: OrderNotes) -> None:
    """Leave an order note whenever a contact or contribution is written."""

    def on_contact_saved(event: SyncEvent) -> None:
        if not isinstance(event, ContactSaved):
            return
        if event.created:
            note = f"Created new CiviCRM Contact - {event.contact.id}"
        else:
            note = f"CiviCRM Contact Updated - {event.contact.id}"
        notes.add_note(event.order.id, note)

    def on_contribution_created(event: SyncEvent) -> None:
        if not isinstance(event, ContributionCreated):
            return
        notes.add_note(
            event.order.id, f"Contribution {event.contribution.id} has been created in CiviCRM"
        )

    events.subscribe(ContactSaved, on_contact_saved)
    events.subscribe(ContributionCreated, on_contribution_created)


def _prepare() -> None:
    load_dotenv()
    configure_logging()
    if not is_started():
        startup()


@contextmanager
def sync_session(
    *,
    gateway: CrmGateway | None = None,
    store: Shop | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: SyncSettings | None = None,
) -> Iterator[tuple[OrderSyncService, Shop]]:
    """Wire the service; adapters built here are closed when the block exits."""

    _prepare()
    with ExitStack() as stack:
        effective_gateway = gateway or stack.enter_context(build_civicrm_gateway())
        effective_store = store or stack.enter_context(build_woocommerce_store())
        events = SyncEvents()
        register_order_notes(events, effective_store)
        service = OrderSyncService.build(
            gateway=effective_gateway,
            catalog=effective_store,
            notes=effective_store,
            unit_of_work_factory=unit_of_work_factory or SqlAlchemyCorrelationUnitOfWork,
            settings=settings or get_sync_settings(),
            events=events,
        )
        yield service, effective_store


def sync_order(
    order_id: int,
    *,
    gateway: CrmGateway | None = None,
    store: Shop | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: SyncSettings | None = None,
) -> OrderSyncResult:
    """Push a newly placed order to the CRM."""

    with sync_session(
        gateway=gateway,
        store=store,
        unit_of_work_factory=unit_of_work_factory,
        settings=settings,
    ) as (service, shop):
        order = shop.get_order(order_id)
        log.info("Starting order sync: order=%s, status=%s", order.id, order.status)
        result = service.process_order(order)

    log.info(
        "Finished order sync: order=%s, outcome=%s, contact=%s, contribution=%s",
        result.order_id,
        result.outcome,
        result.contact_id,
        result.contribution_id,
    )
    return result


def sync_order_status(
    order_id: int,
    old_status: str,
    new_status: str,
    *,
    token: OnceToken | None = None,
    gateway: CrmGateway | None = None,
    store: Shop | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: SyncSettings | None = None,
) -> StatusSyncOutcome:
    """Mirror an order status transition onto its contribution."""

    with sync_session(
        gateway=gateway,
        store=store,
        unit_of_work_factory=unit_of_work_factory,
        settings=settings,
    ) as (service, shop):
        order = shop.get_order(order_id)
        outcome = service.handle_status_change(order, old_status, new_status, token=token)

    log.info("Order %s: %s -> %s: %s", order_id, old_status, new_status, outcome.action)
    return outcome


def sync_order_update(
    order_id: int,
    *,
    token: OnceToken,
    gateway: CrmGateway | None = None,
    store: Shop | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    settings: SyncSettings | None = None,
) -> OrderSyncResult:
    """Handle an order save: sync if still unsynced, then push campaign and source edits."""

    with sync_session(
        gateway=gateway,
        store=store,
        unit_of_work_factory=unit_of_work_factory,
        settings=settings,
    ) as (service, shop):
        order = shop.get_order(order_id)
        campaign_id, source = shop.get_order_attributes(order_id)
        result = service.handle_order_updated(
            order, token=token, campaign_id=campaign_id, source=source
        )

    log.info("Order %s updated: %s", order_id, result.outcome)
    return result
