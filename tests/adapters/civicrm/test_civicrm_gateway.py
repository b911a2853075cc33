from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import httpx
import pytest

from civisync.adapters.civicrm import CiviCrmClient, CiviCrmGateway
from civisync.config.civicrm import CiviCrmConfig
from civisync.domain.contribution_updates import ContributionAttributeSync
from civisync.domain.errors import ApiError
from civisync.domain.model import (
    Contact,
    ContactFingerprint,
    Contribution,
    ContributionStatus,
    CorrelationMeta,
    LineItem,
)
from tests.helpers.commerce import make_order
from tests.helpers.http import (
    civicrm_params,
    make_client_factory,
    request_fields,
    resilience_config,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

type Routes = dict[tuple[str, str], dict[str, object]]


class RecordingCrm:
    """Answers APIv3 calls from canned payloads keyed by (entity, action)."""

    def __init__(self) -> None:
        self.routes: Routes = {}
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        fields = request_fields(request)
        payload = self.routes.get((fields["entity"], fields["action"]), {"values": []})
        return httpx.Response(200, json=payload)

    def sent(self, entity: str, action: str) -> list[dict[str, object]]:
        return [
            civicrm_params(request)
            for request in self.requests
            if request_fields(request)["entity"] == entity
            and request_fields(request)["action"] == action
        ]


@pytest.fixture
def crm() -> RecordingCrm:
    return RecordingCrm()


@pytest.fixture
def gateway(crm: RecordingCrm) -> Iterator[CiviCrmGateway]:
    config = CiviCrmConfig(
        rest_url="https://crm.example.org/civicrm/ajax/rest",
        api_key="user-key",
        site_key="site-key",
        resilience=resilience_config("civicrm"),
    )
    with CiviCrmGateway(
        CiviCrmClient(config, client_factory=make_client_factory(crm.handle))
    ) as gateway:
        yield gateway


def test_create_contact_keeps_sub_types(crm: RecordingCrm, gateway: CiviCrmGateway) -> None:
    crm.routes["Contact", "create"] = {
        "id": 12,
        "values": [{"id": 12, "contact_type": "Individual", "contact_sub_type": ["Student"]}],
    }
    contact = Contact(first_name="Ada", last_name="Lovelace", sub_types=frozenset({"Student"}))

    saved = gateway.create_contact(contact)

    assert saved.id == 12
    assert saved.sub_types == frozenset({"Student"})
    assert saved.first_name == "Ada"
    (params,) = crm.sent("Contact", "create")
    assert params["contact_sub_type"] == ["Student"]
    assert "email" not in params


def test_get_contact_parses_serialised_sub_types(
    crm: RecordingCrm, gateway: CiviCrmGateway
) -> None:
    crm.routes["Contact", "get"] = {
        "values": [
            {
                "id": 7,
                "contact_type": "Individual",
                "contact_sub_type": "\x01Student\x01Member\x01",
                "first_name": "Grace",
                "last_name": "",
            }
        ]
    }

    contact = gateway.get_contact(7)

    assert contact is not None
    assert contact.sub_types == frozenset({"Student", "Member"})
    assert contact.last_name == ""


def test_missing_contact_is_none(gateway: CiviCrmGateway) -> None:
    assert gateway.get_contact(404) is None


def test_duplicate_check_uses_unsupervised_rule(
    crm: RecordingCrm, gateway: CiviCrmGateway
) -> None:
    crm.routes["Contact", "duplicatecheck"] = {"values": [{"id": 3}, {"id": 9}]}
    fingerprint = ContactFingerprint(first_name="Ada", email="ada@example.org")

    matches = gateway.find_duplicate_contacts(fingerprint, contact_type="Individual")

    assert list(matches) == [3, 9]
    (params,) = crm.sent("Contact", "duplicatecheck")
    assert params["match"] == {
        "first_name": "Ada",
        "email": "ada@example.org",
        "contact_type": "Individual",
    }
    assert params["rule_type"] == "Unsupervised"
    assert "dedupe_rule_id" not in params
    assert crm.requests[0].method == "GET"


def test_duplicate_check_with_explicit_rule(crm: RecordingCrm, gateway: CiviCrmGateway) -> None:
    gateway.find_duplicate_contacts(
        ContactFingerprint(email="ada@example.org"), contact_type="Individual", rule_id=4
    )

    (params,) = crm.sent("Contact", "duplicatecheck")
    assert params["dedupe_rule_id"] == 4
    assert "rule_type" not in params


def test_user_match_resolves_contact(crm: RecordingCrm, gateway: CiviCrmGateway) -> None:
    crm.routes["UFMatch", "get"] = {"values": [{"uf_id": 4, "contact_id": 77}]}

    assert gateway.find_contact_by_user(4) == 77


def test_create_order_returns_contribution_id(crm: RecordingCrm, gateway: CiviCrmGateway) -> None:
    crm.routes["Order", "create"] = {"id": 500, "values": {"500": {"id": 500}}}
    line = LineItem(
        price_field_id=1,
        unit_price=Decimal(25),
        qty=1,
        line_total=Decimal(25),
        label="Donation",
    )
    contribution = Contribution(contact_id=77, financial_type_id=5, line_items=(line,))

    created = gateway.create_order(contribution)

    assert created.id == 500
    (params,) = crm.sent("Order", "create")
    assert params["contact_id"] == 77
    assert "total_amount" not in params
    assert crm.requests[0].method == "POST"


def test_create_order_without_id_is_an_error(crm: RecordingCrm, gateway: CiviCrmGateway) -> None:
    crm.routes["Order", "create"] = {"values": []}

    with pytest.raises(ApiError, match="no contribution id"):
        gateway.create_order(Contribution(contact_id=77))


def _contribution_route(status_id: int) -> dict[str, object]:
    return {
        "values": [
            {
                "id": 500,
                "contact_id": 77,
                "contribution_status_id": status_id,
                "total_amount": "25.00",
                "fee_amount": "",
            }
        ]
    }


def test_partially_paid_contribution_keeps_its_status(
    crm: RecordingCrm, gateway: CiviCrmGateway
) -> None:
    crm.routes["Contribution", "get"] = _contribution_route(8)

    contribution = gateway.get_contribution(500)

    assert contribution is not None
    assert contribution.status is ContributionStatus.PARTIALLY_PAID
    assert contribution.total_amount == Decimal("25.00")
    assert contribution.fee_amount is None


def test_site_defined_status_passes_through_unchanged(
    crm: RecordingCrm, gateway: CiviCrmGateway
) -> None:
    crm.routes["Contribution", "get"] = _contribution_route(15)

    contribution = gateway.get_contribution(500)

    assert contribution is not None
    assert contribution.status == 15


@pytest.mark.parametrize("status_id", [8, 15])
def test_campaign_update_sends_back_the_fetched_status(
    crm: RecordingCrm, gateway: CiviCrmGateway, status_id: int
) -> None:
    crm.routes["Contribution", "get"] = _contribution_route(status_id)
    crm.routes["Campaign", "get"] = {"values": [{"id": 4, "title": "Spring"}]}
    correlation = CorrelationMeta(order_id=1, contact_id=77, contribution_id=500)

    changed = ContributionAttributeSync(gateway).update_campaign(
        make_order(), 4, correlation
    )

    assert changed
    (params,) = crm.sent("Contribution", "create")
    assert params["contribution_status_id"] == status_id
    assert params["campaign_id"] == 4
    assert "total_amount" not in params


def test_update_contribution_requires_an_id(gateway: CiviCrmGateway) -> None:
    with pytest.raises(ValueError, match="stored contributions"):
        gateway.update_contribution(Contribution(contact_id=77))


def test_settings_and_default_price_field(crm: RecordingCrm, gateway: CiviCrmGateway) -> None:
    crm.routes["Setting", "get"] = {"values": [{"invoicing": 1}]}

    assert gateway.get_setting("invoicing") == 1
    assert gateway.get_default_price_field_id() is None

    (params,) = crm.sent("PriceField", "get")
    assert params["price_set_id"] == "default_contribution_amount"
