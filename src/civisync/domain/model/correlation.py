"""Order-scoped identifiers linking a commerce order to its CRM records."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class CorrelationMeta:
    """Persisted per order; ids are read in preference to recomputing them.

    ``contact_id`` and ``contribution_id`` are write-once: the ``record_*`` helpers only
    fill an empty slot. Campaign and source are changed through the ``replace_*``
    helpers, which back the explicit update flow.
    """

    order_id: int
    contact_id: int | None = None
    contribution_id: int | None = None
    campaign_id: int | None = None
    source: str | None = None

    def record_contact(self, contact_id: int) -> bool:
        if self.contact_id:
            return False
        self.contact_id = contact_id
        return True

    def record_contribution(self, contribution_id: int) -> bool:
        if self.contribution_id:
            return False
        self.contribution_id = contribution_id
        return True

    def record_campaign(self, campaign_id: int | None) -> bool:
        if self.campaign_id or not campaign_id:
            return False
        self.campaign_id = campaign_id
        return True

    def record_source(self, source: str | None) -> bool:
        if self.source or not source:
            return False
        self.source = source
        return True

    def replace_campaign(self, campaign_id: int | None) -> None:
        self.campaign_id = campaign_id

    def replace_source(self, source: str | None) -> None:
        self.source = source
