"""Notifications emitted while syncing orders, and a simple listener registry."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from civisync.domain.model import Contact, Contribution, Order, Payment

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ContactSaved:
    contact: Contact
    order: Order
    created: bool


@dataclass(frozen=True, slots=True)
class ContributionCreated:
    contribution: Contribution
    order: Order


@dataclass(frozen=True, slots=True)
class ContributionStatusUpdated:
    contribution: Contribution
    order: Order


@dataclass(frozen=True, slots=True)
class PaymentCreated:
    payment: Payment
    contribution: Contribution
    order: Order


type SyncEvent = ContactSaved | ContributionCreated | ContributionStatusUpdated | PaymentCreated
type Listener = Callable[[SyncEvent], None]


@dataclass(slots=True)
class SyncEvents:
    """Dispatches sync notifications to listeners registered per event type."""

    _listeners: defaultdict[type[SyncEvent], list[Listener]] = field(
        default_factory=lambda: defaultdict(list)
    )

    def subscribe(self, event_type: type[SyncEvent], listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def emit(self, event: SyncEvent) -> None:
        """Call every listener for the event; a failing listener is logged and skipped.

        Events follow the CRM write they describe and listener errors never propagate.
        """

        listeners = self._listeners.get(type(event), [])
        log.debug("Emitting %s to %d listener(s)", type(event).__name__, len(listeners))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                log.exception("Listener %r failed for %s", listener, type(event).__name__)
