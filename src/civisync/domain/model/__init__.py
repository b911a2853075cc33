"""Domain model for the order to CRM sync core."""

from __future__ import annotations

from civisync.domain.model.commerce import Billing, Order, OrderItem
from civisync.domain.model.correlation import CorrelationMeta
from civisync.domain.model.crm import (
    UNKNOWN_DISPLAY_NAME,
    Campaign,
    Contact,
    ContactFingerprint,
    Contribution,
    LineItem,
    MembershipParams,
    ParticipantParams,
    Payment,
    PriceField,
    PriceFieldValue,
    order_trxn_id,
    payment_instrument_for,
)
from civisync.domain.model.enums import (
    CONTRIBUTION_STATUS_BY_ORDER_STATUS,
    ContributionStatus,
    EntityType,
    MembershipStatus,
    OrderStatus,
    ParticipantStatus,
)
from civisync.domain.model.mapping import EntitySettings, ProductMapping, VariantSettings

__all__ = [
    "CONTRIBUTION_STATUS_BY_ORDER_STATUS",
    "UNKNOWN_DISPLAY_NAME",
    "Billing",
    "Campaign",
    "Contact",
    "ContactFingerprint",
    "Contribution",
    "ContributionStatus",
    "CorrelationMeta",
    "EntitySettings",
    "EntityType",
    "LineItem",
    "MembershipParams",
    "MembershipStatus",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ParticipantParams",
    "ParticipantStatus",
    "Payment",
    "PriceField",
    "PriceFieldValue",
    "ProductMapping",
    "VariantSettings",
    "order_trxn_id",
    "payment_instrument_for",
]
