"""Explicit update flow for the campaign and source of a synced contribution."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from civisync.domain.errors import ApiError, ValidationError

if TYPE_CHECKING:
    from civisync.domain.model import Contribution, CorrelationMeta, Order
    from civisync.domain.ports.crm import CrmGateway

log = getLogger(__name__)


class ContributionAttributeSync:
    """Push campaign/source edits made on an order to its contribution.

    Both operations return whether anything changed. The correlation record is only
    updated once the CRM accepted the change.
    """

    def __init__(self, gateway: CrmGateway) -> None:
        self._gateway = gateway

    def update_campaign(
        self, order: Order, new_campaign_id: int | None, correlation: CorrelationMeta
    ) -> bool:
        if not new_campaign_id or new_campaign_id == correlation.campaign_id:
            return False

        campaign = self._gateway.get_campaign(new_campaign_id)
        if campaign is None:
            raise ValidationError(f"Campaign {new_campaign_id} does not exist")

        contribution_id = correlation.contribution_id
        if contribution_id:
            contribution = self._load(contribution_id).without_amounts()
            contribution.campaign_id = new_campaign_id
            self._save(contribution)
            log.info(
                "Order %s: contribution %s moved to campaign %s",
                order.id,
                contribution_id,
                new_campaign_id,
            )

        correlation.replace_campaign(new_campaign_id)
        return True

    def update_source(
        self, order: Order, new_source: str | None, correlation: CorrelationMeta
    ) -> bool:
        new_source = (new_source or "").strip()
        if not new_source or new_source == correlation.source:
            return False

        contribution_id = correlation.contribution_id
        if contribution_id:
            contribution = self._load(contribution_id).without_amounts()
            contribution.source = new_source
            self._save(contribution)
            log.info("Order %s: contribution %s source set", order.id, contribution_id)

        correlation.replace_source(new_source)
        return True

    def _load(self, contribution_id: int) -> Contribution:
        contribution = self._gateway.get_contribution(contribution_id)
        if contribution is None:
            raise ApiError(
                f"Contribution {contribution_id} could not be fetched",
                entity="Contribution",
                action="get",
                params={"id": contribution_id},
            )
        contribution.note = None
        return contribution

    def _save(self, contribution: Contribution) -> None:
        try:
            self._gateway.update_contribution(contribution)
        except ApiError as exc:
            log.error("Contribution %s update failed: %s", contribution.id, exc.context())
            raise
