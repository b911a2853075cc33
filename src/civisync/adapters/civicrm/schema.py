"""Pydantic models describing CiviCRM APIv3 REST payloads."""

from __future__ import annotations

from decimal import Decimal
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class CiviCrmBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ApiEnvelope(CiviCrmBaseModel):
    """The wrapper every APIv3 call returns."""

    is_error: bool = False
    error_message: str | None = None
    error_code: str | int | None = None
    id: int | None = None
    count: int = 0
    values: list[dict[str, object]] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def _normalize_values(cls, value: object) -> object:
        # non-sequential calls key the values by id
        if isinstance(value, dict):
            mapping = cast("dict[str, object]", value)
            return [item for item in mapping.values() if isinstance(item, dict)]
        if value is None:
            return []
        return value

    _normalize_id = field_validator("id", mode="before")(_blank_to_none)

    def first(self) -> dict[str, object] | None:
        return self.values[0] if self.values else None


class ContactRecord(CiviCrmBaseModel):
    id: int
    contact_type: str = "Individual"
    contact_sub_type: list[str] = Field(default_factory=list)
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    source: str | None = Field(default=None, alias="contact_source")

    @field_validator("contact_sub_type", mode="before")
    @classmethod
    def _normalize_sub_types(cls, value: object) -> object:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            # serialised as \x01Student\x01Member\x01 by older versions
            return [part for part in value.split("\x01") if part]
        return value

    _normalize_names = field_validator(
        "first_name", "last_name", "display_name", "source", mode="before"
    )(_blank_to_none)


class ContributionRecord(CiviCrmBaseModel):
    id: int
    contact_id: int
    financial_type_id: int | None = None
    contribution_status_id: int
    receive_date: str | None = None
    trxn_id: str | None = None
    invoice_id: str | None = None
    is_pay_later: bool = False
    source: str | None = Field(default=None, alias="contribution_source")
    campaign_id: int | None = Field(default=None, alias="contribution_campaign_id")
    payment_instrument_id: int | None = None
    total_amount: Decimal | None = None
    fee_amount: Decimal | None = None
    net_amount: Decimal | None = None
    non_deductible_amount: Decimal | None = None

    _normalize_blanks = field_validator(
        "financial_type_id",
        "receive_date",
        "trxn_id",
        "invoice_id",
        "source",
        "campaign_id",
        "payment_instrument_id",
        "total_amount",
        "fee_amount",
        "net_amount",
        "non_deductible_amount",
        mode="before",
    )(_blank_to_none)


class FinancialTrxnRecord(CiviCrmBaseModel):
    id: int
    total_amount: Decimal | None = None
    trxn_date: str | None = None
    trxn_id: str | None = None
    payment_instrument_id: int | None = None


class UFMatchRecord(CiviCrmBaseModel):
    uf_id: int
    contact_id: int


class EntityIdRecord(CiviCrmBaseModel):
    id: int


class PriceFieldRecord(CiviCrmBaseModel):
    id: int
    price_set_id: int
    label: str = ""


class PriceFieldValueRecord(CiviCrmBaseModel):
    id: int
    price_field_id: int
    label: str = ""
    amount: Decimal | None = None
    financial_type_id: int | None = None

    _normalize_blanks = field_validator("amount", "financial_type_id", mode="before")(
        _blank_to_none
    )


class CampaignRecord(CiviCrmBaseModel):
    id: int
    title: str = ""
    is_active: bool = True
