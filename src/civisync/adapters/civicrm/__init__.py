"""CiviCRM APIv3 REST adapter."""

from __future__ import annotations

from civisync.config.civicrm import CiviCrmConfig, get_civicrm_config

from .client import READ_ACTIONS, CiviCrmClient
from .gateway import CiviCrmGateway
from .schema import ApiEnvelope, ContactRecord, ContributionRecord
from .translator import contact_params, contribution_update_params, order_params, payment_params


def build_civicrm_gateway(config: CiviCrmConfig | None = None) -> CiviCrmGateway:
    """Return a gateway wired to the configured CiviCRM endpoint."""

    return CiviCrmGateway(CiviCrmClient(config or get_civicrm_config()))


__all__ = [
    "READ_ACTIONS",
    "ApiEnvelope",
    "CiviCrmClient",
    "CiviCrmGateway",
    "ContactRecord",
    "ContributionRecord",
    "build_civicrm_gateway",
    "contact_params",
    "contribution_update_params",
    "order_params",
    "payment_params",
]
