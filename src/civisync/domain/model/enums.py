"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import IntEnum, StrEnum

_STATUS_PREFIX = "wc-"


class EntityType(StrEnum):
    """CRM entity a product is mapped to; also the line item ``entity_table``."""

    CONTRIBUTION = "civicrm_contribution"
    MEMBERSHIP = "civicrm_membership"
    PARTICIPANT = "civicrm_participant"
    EXCLUDE = "civicrm_exclude"
    UNSET = ""

    @property
    def syncs(self) -> bool:
        return self not in {EntityType.EXCLUDE, EntityType.UNSET}


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"

    @classmethod
    def parse(cls, raw: str | None) -> OrderStatus | None:
        """Return the status for ``raw``, accepting the ``wc-`` storage prefix."""

        if not raw:
            return None
        value = raw.strip().lower().removeprefix(_STATUS_PREFIX)
        try:
            return cls(value)
        except ValueError:
            return None


class ContributionStatus(IntEnum):
    """CRM contribution statuses; only some of them are ever set by the sync."""

    COMPLETED = 1
    PENDING = 2
    CANCELLED = 3
    FAILED = 4
    IN_PROGRESS = 5
    OVERDUE = 6
    REFUNDED = 7
    PARTIALLY_PAID = 8
    PENDING_REFUND = 9
    CHARGEBACK = 10


class ParticipantStatus(StrEnum):
    PENDING_INCOMPLETE = "Pending from incomplete transaction"
    PENDING_PAY_LATER = "Pending from pay later"


class MembershipStatus(StrEnum):
    PENDING = "Pending"


PAID_ORDER_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.PROCESSING, OrderStatus.COMPLETED}
)

CONTRIBUTION_STATUS_BY_ORDER_STATUS: dict[OrderStatus, ContributionStatus] = {
    OrderStatus.COMPLETED: ContributionStatus.COMPLETED,
    OrderStatus.PENDING: ContributionStatus.PENDING,
    OrderStatus.PROCESSING: ContributionStatus.PENDING,
    OrderStatus.ON_HOLD: ContributionStatus.PENDING,
    OrderStatus.CANCELLED: ContributionStatus.CANCELLED,
    OrderStatus.FAILED: ContributionStatus.FAILED,
    OrderStatus.REFUNDED: ContributionStatus.REFUNDED,
}
