"""Blocking :class:`CrmGateway` implementation over the async CiviCRM client."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Final, Self

from civisync.domain.errors import ApiError

from .schema import (
    ApiEnvelope,
    CampaignRecord,
    ContactRecord,
    ContributionRecord,
    EntityIdRecord,
    FinancialTrxnRecord,
    PriceFieldRecord,
    PriceFieldValueRecord,
    UFMatchRecord,
)
from .translator import (
    campaign_from_record,
    contact_from_record,
    contact_params,
    contribution_from_record,
    contribution_update_params,
    order_params,
    payment_params,
    price_field_from_record,
    price_field_value_from_record,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import TracebackType

    from civisync.domain.model import (
        Campaign,
        Contact,
        ContactFingerprint,
        Contribution,
        Payment,
        PriceField,
        PriceFieldValue,
    )
    from civisync.domain.ports.crm import CrmGateway

    from .client import CiviCrmClient

log = getLogger(__name__)

DEFAULT_CONTRIBUTION_PRICE_SET: Final[str] = "default_contribution_amount"
UNSUPERVISED_RULE_TYPE: Final[str] = "Unsupervised"
CONTACT_FIELDS: Final[tuple[str, ...]] = (
    "id",
    "contact_type",
    "contact_sub_type",
    "first_name",
    "last_name",
    "display_name",
    "contact_source",
)


class CiviCrmGateway:
    """Drive :class:`CiviCrmClient` synchronously for the lifetime of a session.

    One event loop is kept open until :meth:`close` so the underlying HTTP connection
    pool survives between calls.
    """

    def __init__(self, client: CiviCrmClient) -> None:
        self._client = client
        self._runner = asyncio.Runner()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        try:
            self._runner.run(self._client.aclose())
        finally:
            self._runner.close()

    def _call(self, entity: str, action: str, params: Mapping[str, object]) -> ApiEnvelope:
        return self._runner.run(self._client.call(entity, action, params))

    def _get_one(self, entity: str, params: Mapping[str, object]) -> dict[str, object] | None:
        envelope = self._call(entity, "get", {"sequential": 1, **params})
        return envelope.first()

    # Contacts -----------------------------------------------------------------

    def get_contact(self, contact_id: int) -> Contact | None:
        record = self._get_one("Contact", {"id": contact_id, "return": list(CONTACT_FIELDS)})
        if record is None:
            return None
        return contact_from_record(ContactRecord.model_validate(record))

    def create_contact(self, contact: Contact) -> Contact:
        params = contact_params(contact)
        envelope = self._call("Contact", "create", {"sequential": 1, **params})
        return self._saved_contact(contact, envelope, params)

    def update_contact(self, contact: Contact) -> Contact:
        if contact.id is None:
            raise ValueError("Only stored contacts can be updated")
        params = contact_params(contact)
        envelope = self._call("Contact", "create", {"sequential": 1, **params})
        return self._saved_contact(contact, envelope, params)

    def _saved_contact(
        self, contact: Contact, envelope: ApiEnvelope, params: Mapping[str, object]
    ) -> Contact:
        record = envelope.first()
        if record is not None:
            saved = contact_from_record(ContactRecord.model_validate(record))
            # create only echoes the fields it was sent
            return replace(
                contact,
                id=saved.id,
                sub_types=saved.sub_types or contact.sub_types,
            )
        if envelope.id is None:
            raise ApiError(
                "Contact.create returned no id",
                entity="Contact",
                action="create",
                params=params,
            )
        return replace(contact, id=envelope.id)

    def find_contact_by_user(self, user_id: int) -> int | None:
        record = self._get_one("UFMatch", {"uf_id": user_id})
        if record is None:
            return None
        return UFMatchRecord.model_validate(record).contact_id

    def find_duplicate_contacts(
        self,
        fingerprint: ContactFingerprint,
        *,
        contact_type: str,
        rule_id: int | None = None,
    ) -> Sequence[int]:
        params: dict[str, object] = {
            "sequential": 1,
            "match": {**fingerprint.as_match(), "contact_type": contact_type},
            "check_permission": 0,
        }
        if rule_id is not None:
            params["dedupe_rule_id"] = rule_id
        else:
            params["rule_type"] = UNSUPERVISED_RULE_TYPE

        envelope = self._call("Contact", "duplicatecheck", params)
        return [EntityIdRecord.model_validate(value).id for value in envelope.values]

    # Contributions --------------------------------------------------------------

    def create_order(self, contribution: Contribution) -> Contribution:
        params = order_params(contribution)
        envelope = self._call("Order", "create", params)
        contribution_id = envelope.id
        if contribution_id is None and envelope.values:
            contribution_id = EntityIdRecord.model_validate(envelope.values[0]).id
        if contribution_id is None:
            raise ApiError(
                "Order.create returned no contribution id",
                entity="Order",
                action="create",
                params=params,
            )
        return replace(contribution, id=contribution_id)

    def create_payment(self, payment: Payment) -> Payment:
        params = payment_params(payment)
        envelope = self._call("Payment", "create", {"sequential": 1, **params})
        record = envelope.first()
        payment_id = envelope.id
        if record is not None:
            payment_id = FinancialTrxnRecord.model_validate(record).id
        return replace(payment, id=payment_id)

    def get_contribution(self, contribution_id: int) -> Contribution | None:
        record = self._get_one("Contribution", {"id": contribution_id})
        if record is None:
            return None
        return contribution_from_record(ContributionRecord.model_validate(record))

    def update_contribution(self, contribution: Contribution) -> Contribution:
        if contribution.id is None:
            raise ValueError("Only stored contributions can be updated")
        self._call("Contribution", "create", contribution_update_params(contribution))
        return contribution

    # Configuration --------------------------------------------------------------

    def get_default_price_field_id(self) -> int | None:
        envelope = self._call(
            "PriceField",
            "get",
            {
                "sequential": 1,
                "price_set_id": DEFAULT_CONTRIBUTION_PRICE_SET,
                "options": {"limit": 1},
            },
        )
        record = envelope.first()
        if record is None:
            log.warning("CRM has no default contribution price field")
            return None
        return PriceFieldRecord.model_validate(record).id

    def get_price_field(self, price_field_id: int) -> PriceField | None:
        record = self._get_one("PriceField", {"id": price_field_id})
        if record is None:
            return None
        return price_field_from_record(PriceFieldRecord.model_validate(record))

    def get_price_field_value(self, price_field_value_id: int) -> PriceFieldValue | None:
        record = self._get_one("PriceFieldValue", {"id": price_field_value_id})
        if record is None:
            return None
        return price_field_value_from_record(PriceFieldValueRecord.model_validate(record))

    def get_setting(self, name: str) -> object:
        envelope = self._call("Setting", "get", {"sequential": 1, "return": [name]})
        record = envelope.first()
        if record is None:
            return None
        return record.get(name)

    def get_campaign(self, campaign_id: int) -> Campaign | None:
        record = self._get_one("Campaign", {"id": campaign_id})
        if record is None:
            return None
        return campaign_from_record(CampaignRecord.model_validate(record))


if TYPE_CHECKING:

    def _gateway_check(client: CiviCrmClient) -> CrmGateway:
        return CiviCrmGateway(client)
