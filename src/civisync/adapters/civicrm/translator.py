"""Translate between domain records and CiviCRM APIv3 params."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from civisync.domain.model import (
    Campaign,
    Contact,
    Contribution,
    ContributionStatus,
    LineItem,
    MembershipParams,
    ParticipantParams,
    Payment,
    PriceField,
    PriceFieldValue,
)

from .schema import (
    CampaignRecord,
    ContactRecord,
    ContributionRecord,
    PriceFieldRecord,
    PriceFieldValueRecord,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

CIVICRM_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

type Params = dict[str, object]


def format_money(value: Decimal) -> str:
    return f"{value:.2f}"


def format_datetime(value: datetime) -> str:
    return value.strftime(CIVICRM_DATETIME_FORMAT)


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, CIVICRM_DATETIME_FORMAT)  # noqa: DTZ007
    except ValueError:
        parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _without_none(params: Mapping[str, object]) -> Params:
    return {key: value for key, value in params.items() if value is not None}


# Contacts ---------------------------------------------------------------------


def contact_params(contact: Contact) -> Params:
    """Params for ``Contact.create``; email is never part of them."""

    params: Params = {
        "id": contact.id,
        "contact_type": contact.contact_type,
        "first_name": contact.first_name,
        "last_name": contact.last_name,
        "display_name": contact.display_name,
        "source": contact.contact_source,
    }
    if contact.sub_types:
        params["contact_sub_type"] = sorted(contact.sub_types)
    return _without_none(params)


def contact_from_record(record: ContactRecord) -> Contact:
    return Contact(
        id=record.id,
        contact_type=record.contact_type,
        sub_types=frozenset(record.contact_sub_type),
        first_name=record.first_name or "",
        last_name=record.last_name or "",
        display_name=record.display_name,
        contact_source=record.source,
    )


# Contributions ----------------------------------------------------------------


def _membership_params(params: MembershipParams) -> Params:
    return {
        "membership_type_id": params.membership_type_id,
        "contact_id": params.contact_id,
        "source": params.source,
        "skipStatusCal": 1 if params.skip_status_calculation else 0,
        "status_id": params.status,
    }


def _participant_params(params: ParticipantParams) -> Params:
    return {
        "event_id": params.event_id,
        "contact_id": params.contact_id,
        "role_id": params.role_id,
        "price_set_id": params.price_set_id,
        "fee_level": params.fee_level,
        "fee_amount": format_money(params.fee_amount),
        "source": params.source,
        "status_id": params.status,
    }


def line_item_params(line: LineItem) -> Params:
    """One ``line_items`` entry for ``Order.create``."""

    data = _without_none(
        {
            "entity_table": line.entity_table.value,
            "price_field_id": line.price_field_id,
            "price_field_value_id": line.price_field_value_id,
            "unit_price": format_money(line.unit_price),
            "qty": line.qty,
            "line_total": format_money(line.line_total),
            "tax_amount": format_money(line.tax_amount),
            "label": line.label,
            "financial_type_id": line.financial_type_id,
            "membership_type_id": line.membership_type_id,
        }
    )
    entity_params: Params = {}
    if isinstance(line.params, MembershipParams):
        entity_params = _membership_params(line.params)
    elif isinstance(line.params, ParticipantParams):
        entity_params = _participant_params(line.params)
    return {"params": entity_params, "line_item": [data]}


def order_params(contribution: Contribution) -> Params:
    """Params for ``Order.create``; the total is left for the CRM to derive."""

    return _without_none(
        {
            "contact_id": contribution.contact_id,
            "financial_type_id": contribution.financial_type_id,
            "receive_date": (
                format_datetime(contribution.receive_date) if contribution.receive_date else None
            ),
            "trxn_id": contribution.trxn_id,
            "invoice_id": contribution.invoice_id,
            "contribution_status_id": int(contribution.status),
            "is_pay_later": 1 if contribution.is_pay_later else 0,
            "source": contribution.source,
            "campaign_id": contribution.campaign_id,
            "payment_instrument_id": contribution.payment_instrument_id,
            "note": contribution.note,
            "line_items": [line_item_params(line) for line in contribution.line_items],
        }
    )


def contribution_update_params(contribution: Contribution) -> Params:
    """Params for ``Contribution.create`` on an existing record.

    Amounts that are ``None`` are omitted so the CRM does not recalculate from stale
    values; line items are never resent.
    """

    amounts = {
        "total_amount": contribution.total_amount,
        "fee_amount": contribution.fee_amount,
        "net_amount": contribution.net_amount,
        "non_deductible_amount": contribution.non_deductible_amount,
    }
    return _without_none(
        {
            "id": contribution.id,
            "contact_id": contribution.contact_id,
            "financial_type_id": contribution.financial_type_id,
            "contribution_status_id": int(contribution.status),
            "receive_date": (
                format_datetime(contribution.receive_date) if contribution.receive_date else None
            ),
            "trxn_id": contribution.trxn_id,
            "invoice_id": contribution.invoice_id,
            "source": contribution.source,
            "campaign_id": contribution.campaign_id,
            "payment_instrument_id": contribution.payment_instrument_id,
            "note": contribution.note,
        }
        | {key: format_money(value) for key, value in amounts.items() if value is not None}
    )


def contribution_status(status_id: int) -> ContributionStatus | int:
    """Map a CRM status id, passing ids the enum does not know through unchanged."""

    try:
        return ContributionStatus(status_id)
    except ValueError:
        return status_id


def contribution_from_record(record: ContributionRecord) -> Contribution:
    return Contribution(
        id=record.id,
        contact_id=record.contact_id,
        financial_type_id=record.financial_type_id,
        status=contribution_status(record.contribution_status_id),
        receive_date=parse_datetime(record.receive_date),
        trxn_id=record.trxn_id,
        invoice_id=record.invoice_id,
        is_pay_later=record.is_pay_later,
        source=record.source,
        campaign_id=record.campaign_id,
        payment_instrument_id=record.payment_instrument_id,
        total_amount=record.total_amount,
        fee_amount=record.fee_amount,
        net_amount=record.net_amount,
        non_deductible_amount=record.non_deductible_amount,
    )


def payment_params(payment: Payment) -> Params:
    return _without_none(
        {
            "contribution_id": payment.contribution_id,
            "total_amount": format_money(payment.total_amount),
            "trxn_date": format_datetime(payment.trxn_date) if payment.trxn_date else None,
            "trxn_id": payment.trxn_id,
            "payment_instrument_id": payment.payment_instrument_id,
        }
    )


# Price sets and campaigns ------------------------------------------------------


def price_field_from_record(record: PriceFieldRecord) -> PriceField:
    return PriceField(id=record.id, price_set_id=record.price_set_id, label=record.label)


def price_field_value_from_record(record: PriceFieldValueRecord) -> PriceFieldValue:
    return PriceFieldValue(
        id=record.id,
        price_field_id=record.price_field_id,
        label=record.label,
        amount=record.amount,
        financial_type_id=record.financial_type_id,
    )


def campaign_from_record(record: CampaignRecord) -> Campaign:
    return Campaign(id=record.id, title=record.title, is_active=record.is_active)
