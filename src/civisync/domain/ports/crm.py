"""Port for the remote CRM surface used by the sync core."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from civisync.domain.model import (
        Campaign,
        Contact,
        ContactFingerprint,
        Contribution,
        Payment,
        PriceField,
        PriceFieldValue,
    )


@runtime_checkable
class CrmGateway(Protocol):
    """Blocking CRM operations; every failure surfaces as ``ApiError``."""

    def get_contact(self, contact_id: int) -> Contact | None: ...

    def create_contact(self, contact: Contact) -> Contact: ...

    def update_contact(self, contact: Contact) -> Contact: ...

    def find_contact_by_user(self, user_id: int) -> int | None:
        """Return the contact linked to a CMS user account, if any."""
        ...

    def find_duplicate_contacts(
        self,
        fingerprint: ContactFingerprint,
        *,
        contact_type: str,
        rule_id: int | None = None,
    ) -> Sequence[int]:
        """Return matching contact ids, best match first."""
        ...

    def create_order(self, contribution: Contribution) -> Contribution:
        """Create a contribution and its line item entities in one call."""
        ...

    def create_payment(self, payment: Payment) -> Payment: ...

    def get_contribution(self, contribution_id: int) -> Contribution | None: ...

    def update_contribution(self, contribution: Contribution) -> Contribution: ...

    def get_default_price_field_id(self) -> int | None: ...

    def get_price_field(self, price_field_id: int) -> PriceField | None: ...

    def get_price_field_value(self, price_field_value_id: int) -> PriceFieldValue | None: ...

    def get_setting(self, name: str) -> object: ...

    def get_campaign(self, campaign_id: int) -> Campaign | None: ...
