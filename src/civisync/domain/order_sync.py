"""Pipeline facade: one unit of work per order event."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from civisync.domain.contact_resolver import ContactResolver
from civisync.domain.contribution_updates import ContributionAttributeSync
from civisync.domain.errors import ApiError, SyncError
from civisync.domain.events import SyncEvents
from civisync.domain.line_items import LineItemCompositor
from civisync.domain.lookups import CrmLookups
from civisync.domain.model import CorrelationMeta
from civisync.domain.order_submitter import OrderSubmitter
from civisync.domain.ports.unit_of_work import CorrelationUnitOfWork
from civisync.domain.status_sync import StatusAction, StatusSynchronizer, StatusSyncOutcome

if TYPE_CHECKING:
    from civisync.config.sync import SyncSettings
    from civisync.domain.model import Order
    from civisync.domain.ports.commerce import OrderNotes, ProductCatalog
    from civisync.domain.ports.crm import CrmGateway

log = getLogger(__name__)

UnitOfWorkFactory = Callable[[], CorrelationUnitOfWork]

CONTACT_FAILED_NOTE: Final[str] = "CiviCRM Contact could not be fetched, created or updated"
CONTRIBUTION_FAILED_NOTE: Final[str] = "CiviCRM Contribution could not be created"
ATTRIBUTES_FAILED_NOTE: Final[str] = "CiviCRM Contribution could not be updated"


class SyncOutcome(StrEnum):
    SYNCED = "synced"
    ALREADY_SYNCED = "already_synced"
    ZERO_AMOUNT = "zero_amount"
    NOTHING_TO_SYNC = "nothing_to_sync"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    DUPLICATE_SIGNAL = "duplicate_signal"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class OrderSyncResult:
    order_id: int
    outcome: SyncOutcome
    contact_id: int | None = None
    contribution_id: int | None = None
    error: SyncError | None = None


@dataclass(slots=True)
class OnceToken:
    """Request-scoped guard so a handler runs at most once per order.

    Hosts create one token per incoming request and pass it down the call chain.
    """

    _claimed: set[tuple[str, int]] = field(default_factory=set)

    def claim(self, action: str, order_id: int) -> bool:
        key = (action, order_id)
        if key in self._claimed:
            return False
        self._claimed.add(key)
        return True


class OrderSyncService:
    """Sequence contact resolution, line item composition and submission for an order."""

    def __init__(
        self,
        *,
        resolver: ContactResolver,
        compositor: LineItemCompositor,
        submitter: OrderSubmitter,
        status_sync: StatusSynchronizer,
        attributes: ContributionAttributeSync,
        notes: OrderNotes,
        unit_of_work_factory: UnitOfWorkFactory,
        settings: SyncSettings,
    ) -> None:
        self.resolver = resolver
        self.compositor = compositor
        self.submitter = submitter
        self.status_sync = status_sync
        self.attributes = attributes
        self._notes = notes
        self._unit_of_work_factory = unit_of_work_factory
        self._settings = settings

    @classmethod
    def build(
        cls,
        *,
        gateway: CrmGateway,
        catalog: ProductCatalog,
        notes: OrderNotes,
        unit_of_work_factory: UnitOfWorkFactory,
        settings: SyncSettings,
        events: SyncEvents | None = None,
        lookups: CrmLookups | None = None,
    ) -> OrderSyncService:
        events = events or SyncEvents()
        lookups = lookups or CrmLookups(gateway)
        return cls(
            resolver=ContactResolver(gateway, settings, events),
            compositor=LineItemCompositor(catalog, lookups, settings),
            submitter=OrderSubmitter(gateway, settings, events),
            status_sync=StatusSynchronizer(gateway, catalog, settings, events),
            attributes=ContributionAttributeSync(gateway),
            notes=notes,
            unit_of_work_factory=unit_of_work_factory,
            settings=settings,
        )

    def process_order(self, order: Order) -> OrderSyncResult:
        """Create the contact and contribution for a new order.

        Safe to call again for the same order: stored ids short-circuit the work.
        """

        if self._settings.ignore_zero_amount_orders and order.total == 0:
            log.info("Order %s: zero amount, not synced", order.id)
            return OrderSyncResult(order.id, SyncOutcome.ZERO_AMOUNT)

        with self._unit_of_work_factory() as uow:
            correlation = _correlation_for(uow, order.id)
            if correlation.contribution_id:
                return OrderSyncResult(
                    order.id,
                    SyncOutcome.ALREADY_SYNCED,
                    contact_id=correlation.contact_id,
                    contribution_id=correlation.contribution_id,
                )

            try:
                contact_id = self.resolver.resolve(order, correlation)
            except SyncError as exc:
                return self._fail(order, exc, CONTACT_FAILED_NOTE)
            uow.commit()

            try:
                composition = self.compositor.compose(order, contact_id)
                contribution_id = self.submitter.submit(
                    contact_id, composition, order, correlation
                )
            except SyncError as exc:
                return self._fail(order, exc, CONTRIBUTION_FAILED_NOTE, contact_id=contact_id)
            uow.commit()

        if contribution_id is None:
            return OrderSyncResult(order.id, SyncOutcome.NOTHING_TO_SYNC, contact_id=contact_id)

        return OrderSyncResult(
            order.id,
            SyncOutcome.SYNCED,
            contact_id=contact_id,
            contribution_id=contribution_id,
        )

    def handle_status_change(
        self,
        order: Order,
        old_status: str,
        new_status: str,
        *,
        token: OnceToken | None = None,
    ) -> StatusSyncOutcome:
        if token is not None and not token.claim("status_changed", order.id):
            log.debug("Order %s: status change already handled in this request", order.id)
            return StatusSyncOutcome(StatusAction.DUPLICATE_SIGNAL)

        with self._unit_of_work_factory() as uow:
            correlation = uow.repositories.correlations.get(order.id)
            if correlation is None:
                correlation = CorrelationMeta(order_id=order.id)
            return self.status_sync.handle(order, old_status, new_status, correlation)

    def handle_order_updated(
        self,
        order: Order,
        *,
        token: OnceToken,
        campaign_id: int | None = None,
        source: str | None = None,
    ) -> OrderSyncResult:
        """React to an order being saved: sync it if needed, then push attribute edits."""

        if not token.claim("order_updated", order.id):
            log.debug("Order %s: update already handled in this request", order.id)
            return OrderSyncResult(order.id, SyncOutcome.DUPLICATE_SIGNAL)

        with self._unit_of_work_factory() as uow:
            synced = bool(_correlation_for(uow, order.id).contribution_id)
        if not synced:
            result = self.process_order(order)
            if result.outcome is not SyncOutcome.SYNCED:
                return result

        with self._unit_of_work_factory() as uow:
            correlation = _correlation_for(uow, order.id)
            try:
                campaign_changed = self.attributes.update_campaign(
                    order, campaign_id, correlation
                )
                source_changed = self.attributes.update_source(order, source, correlation)
            except SyncError as exc:
                return self._fail(
                    order,
                    exc,
                    ATTRIBUTES_FAILED_NOTE,
                    contact_id=correlation.contact_id,
                    contribution_id=correlation.contribution_id,
                )
            uow.commit()

        outcome = (
            SyncOutcome.UPDATED if campaign_changed or source_changed else SyncOutcome.UNCHANGED
        )
        return OrderSyncResult(
            order.id,
            outcome,
            contact_id=correlation.contact_id,
            contribution_id=correlation.contribution_id,
        )

    def _fail(
        self,
        order: Order,
        exc: SyncError,
        note: str,
        *,
        contact_id: int | None = None,
        contribution_id: int | None = None,
    ) -> OrderSyncResult:
        detail = exc.context() if isinstance(exc, ApiError) else exc
        log.error("Order %s: %s: %s", order.id, note, detail)
        try:
            self._notes.add_note(order.id, f"{note}: {exc}")
        except SyncError:
            log.exception("Order %s: failure note could not be added", order.id)
        return OrderSyncResult(
            order.id,
            SyncOutcome.FAILED,
            contact_id=contact_id,
            contribution_id=contribution_id,
            error=exc,
        )


def _correlation_for(uow: CorrelationUnitOfWork, order_id: int) -> CorrelationMeta:
    repository = uow.repositories.correlations
    correlation = repository.get(order_id)
    if correlation is None:
        correlation = CorrelationMeta(order_id=order_id)
        repository.add(correlation)
    return correlation
