"""CRM-side records created and updated by the sync core."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import TYPE_CHECKING, Final

from civisync.domain.model.enums import ContributionStatus, EntityType

if TYPE_CHECKING:
    from datetime import datetime

UNKNOWN_DISPLAY_NAME: Final[str] = "Unknown Name"
DEFAULT_PAYMENT_INSTRUMENT_ID: Final[int] = 1

PAYMENT_INSTRUMENT_BY_METHOD: dict[str, int] = {
    "paypal": 1,
    "stripe": 1,
    "cod": 3,
    "cheque": 4,
    "bacs": 5,
}


def payment_instrument_for(payment_method: str | None) -> int:
    if payment_method is None:
        return DEFAULT_PAYMENT_INSTRUMENT_ID
    return PAYMENT_INSTRUMENT_BY_METHOD.get(payment_method, DEFAULT_PAYMENT_INSTRUMENT_ID)


def order_trxn_id(order_id: int) -> str:
    return f"Order - {order_id}"


@dataclass(kw_only=True)
class Contact:
    id: int | None = None
    contact_type: str = "Individual"
    sub_types: frozenset[str] = frozenset()
    first_name: str = ""
    last_name: str = ""
    display_name: str | None = None
    contact_source: str | None = None

    def add_sub_type(self, sub_type: str | None) -> None:
        """Merge ``sub_type`` into the existing set without dropping any member."""

        if sub_type:
            self.sub_types = self.sub_types | {sub_type}


@dataclass(frozen=True, kw_only=True)
class ContactFingerprint:
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    def as_match(self) -> dict[str, str]:
        values = {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
        }
        return {key: value for key, value in values.items() if value}


@dataclass(frozen=True, kw_only=True)
class PriceField:
    id: int
    price_set_id: int
    label: str = ""


@dataclass(frozen=True, kw_only=True)
class PriceFieldValue:
    id: int
    price_field_id: int
    label: str
    amount: Decimal | None = None
    financial_type_id: int | None = None


@dataclass(frozen=True, kw_only=True)
class Campaign:
    id: int
    title: str = ""
    is_active: bool = True


@dataclass(frozen=True, kw_only=True)
class MembershipParams:
    membership_type_id: int
    contact_id: int
    source: str
    status: str
    skip_status_calculation: bool = True


@dataclass(frozen=True, kw_only=True)
class ParticipantParams:
    event_id: int
    contact_id: int
    role_id: int
    price_set_id: int
    fee_level: str
    fee_amount: Decimal
    source: str
    status: str


@dataclass(frozen=True, kw_only=True)
class LineItem:
    price_field_id: int
    unit_price: Decimal
    qty: int
    line_total: Decimal
    label: str
    tax_amount: Decimal = Decimal(0)
    price_field_value_id: int | None = None
    # None means "inherit from the contribution"
    financial_type_id: int | None = None
    entity_table: EntityType = EntityType.CONTRIBUTION
    membership_type_id: int | None = None
    params: MembershipParams | ParticipantParams | None = None

    @property
    def charged(self) -> Decimal:
        return self.line_total + self.tax_amount


@dataclass(kw_only=True)
class Contribution:
    id: int | None = None
    contact_id: int
    financial_type_id: int | None = None
    # site-defined status ids the enum does not know are kept as plain ints
    status: ContributionStatus | int = ContributionStatus.PENDING
    receive_date: datetime | None = None
    trxn_id: str | None = None
    invoice_id: str | None = None
    is_pay_later: bool = False
    source: str | None = None
    campaign_id: int | None = None
    payment_instrument_id: int | None = None
    note: str | None = None
    line_items: tuple[LineItem, ...] = field(default_factory=tuple)

    total_amount: Decimal | None = None
    fee_amount: Decimal | None = None
    net_amount: Decimal | None = None
    non_deductible_amount: Decimal | None = None

    def without_amounts(self) -> Contribution:
        """Return a copy whose computed amounts will not be sent back to the CRM."""

        return replace(
            self,
            total_amount=None,
            fee_amount=None,
            net_amount=None,
            non_deductible_amount=None,
        )


@dataclass(kw_only=True)
class Payment:
    id: int | None = None
    contribution_id: int
    total_amount: Decimal
    trxn_date: datetime | None
    trxn_id: str
    payment_instrument_id: int
