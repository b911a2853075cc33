"""Resolve (or create) the CRM contact an order belongs to."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from civisync.domain.errors import ApiError, ValidationError
from civisync.domain.events import ContactSaved
from civisync.domain.model import UNKNOWN_DISPLAY_NAME, Contact, ContactFingerprint

if TYPE_CHECKING:
    from civisync.config.sync import SyncSettings
    from civisync.domain.events import SyncEvents
    from civisync.domain.model import CorrelationMeta, Order
    from civisync.domain.ports.crm import CrmGateway

log = getLogger(__name__)


def fingerprint_for(order: Order) -> ContactFingerprint:
    billing = order.billing
    return ContactFingerprint(
        first_name=billing.first_name.strip(),
        last_name=billing.last_name.strip(),
        email=billing.email.strip(),
    )


class ContactResolver:
    """Find the contact for an order, creating it when no match exists.

    Resolution order: the id already correlated with the order, the contact linked to
    the customer's user account, then the configured dedupe rule. Email addresses are
    never written here.
    """

    def __init__(self, gateway: CrmGateway, settings: SyncSettings, events: SyncEvents) -> None:
        self._gateway = gateway
        self._settings = settings
        self._events = events

    def resolve(self, order: Order, correlation: CorrelationMeta) -> int:
        if correlation.contact_id:
            log.debug("Order %s already linked to contact %s", order.id, correlation.contact_id)
            return correlation.contact_id

        if order.from_authenticated_checkout:
            linked_id = self._gateway.find_contact_by_user(order.customer_id)
            if linked_id:
                log.info(
                    "Order %s: using contact %s linked to user %s",
                    order.id,
                    linked_id,
                    order.customer_id,
                )
                correlation.record_contact(linked_id)
                return linked_id

        existing_id = self.find_existing(order)
        if existing_id:
            contact = self._update_existing(existing_id, order)
            created = False
        else:
            contact = self._create(order)
            created = True

        if contact.id is None:
            raise ApiError(
                "CRM returned a contact without an id",
                entity="Contact",
                action="create",
            )
        correlation.record_contact(contact.id)
        self._events.emit(ContactSaved(contact=contact, order=order, created=created))
        return contact.id

    def find_existing(self, order: Order) -> int:
        """Return the best dedupe match for the order's billing details, or 0."""

        contact_type = self._settings.contact_type
        rule_id = self._settings.dedupe_rule_id
        if rule_id is None and not contact_type:
            raise ValidationError("No dedupe rule configured and no contact type to fall back on")

        matches = self._gateway.find_duplicate_contacts(
            fingerprint_for(order),
            contact_type=contact_type,
            rule_id=rule_id,
        )
        if not matches:
            return 0
        if len(matches) > 1:
            log.info("Order %s: %s dedupe matches, using %s", order.id, len(matches), matches[0])
        return matches[0]

    def _create(self, order: Order) -> Contact:
        fingerprint = fingerprint_for(order)
        contact = Contact(
            contact_type=self._settings.contact_type,
            first_name=fingerprint.first_name,
            last_name=fingerprint.last_name,
            contact_source=self._settings.contact_source,
        )
        if not fingerprint.first_name and not fingerprint.last_name:
            contact.display_name = UNKNOWN_DISPLAY_NAME
        contact.add_sub_type(self._settings.contact_sub_type)

        created = self._gateway.create_contact(contact)
        log.info("Order %s: created contact %s", order.id, created.id)
        return created

    def _update_existing(self, contact_id: int, order: Order) -> Contact:
        contact = self._gateway.get_contact(contact_id)
        if contact is None:
            raise ApiError(
                f"Contact {contact_id} could not be fetched",
                entity="Contact",
                action="get",
                params={"id": contact_id},
            )

        fingerprint = fingerprint_for(order)
        if fingerprint.first_name:
            contact.first_name = fingerprint.first_name
        if fingerprint.last_name:
            contact.last_name = fingerprint.last_name
        contact.add_sub_type(self._settings.contact_sub_type)

        updated = self._gateway.update_contact(contact)
        log.info("Order %s: updated contact %s", order.id, updated.id)
        return updated
