"""Translate WooCommerce payloads into domain objects."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from logging import getLogger
from typing import Final

from civisync.domain.model import (
    Billing,
    EntityType,
    Order,
    OrderItem,
    ProductMapping,
    VariantSettings,
)

from .schema import OrderPayload, ProductPayload, WithMetaData

log = getLogger(__name__)

ENTITY_TYPE_KEY: Final[str] = "_woocommerce_civicrm_entity_type"
FINANCIAL_TYPE_KEY: Final[str] = "_woocommerce_civicrm_financial_type_id"
CONTRIBUTION_PFV_KEY: Final[str] = "_woocommerce_civicrm_contribution_pfv_id"
MEMBERSHIP_TYPE_KEY: Final[str] = "_woocommerce_civicrm_membership_type_id"
EVENT_KEY: Final[str] = "_woocommerce_civicrm_event_id"
PARTICIPANT_ROLE_KEY: Final[str] = "_woocommerce_civicrm_participant_role_id"
PARTICIPANT_PFV_KEY: Final[str] = "_woocommerce_civicrm_participant_pfv_id"
VARIABLE_ENTITY_TYPE_KEY: Final[str] = "_wpcv_wci_variable_civicrm_entity_type"
ORDER_CAMPAIGN_KEY: Final[str] = "_woocommerce_civicrm_campaign_id"
ORDER_SOURCE_KEY: Final[str] = "_order_source"

LEGACY_EXCLUDE: Final[str] = "exclude"
VARIATION_TYPE: Final[str] = "variation"
CUSTOM_PRODUCT_TYPES: Final[frozenset[str]] = frozenset(
    {EntityType.CONTRIBUTION, EntityType.MEMBERSHIP, EntityType.PARTICIPANT}
)

# suffix used in the alternate namespaces, per mapped field
_VARIANT_FIELDS: Final[dict[str, str]] = {
    "financial_type_id": "financial_type_id",
    "price_field_value_id": "pfv_id",
    "membership_type_id": "type_id",
    "event_id": "event_id",
    "participant_role_id": "role_id",
}


def _kind(entity_type: EntityType) -> str:
    return entity_type.value.removeprefix("civicrm_")


def variation_meta_key(entity_type: EntityType, field: str) -> str:
    return f"_wpcv_wci_variable_{_kind(entity_type)}_{_VARIANT_FIELDS[field]}"


def custom_meta_key(entity_type: EntityType, field: str) -> str:
    return f"_wpcv_woo_civicrm_{_kind(entity_type)}_{_VARIANT_FIELDS[field]}"


def _as_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number or None


def _entity_type(value: object) -> EntityType:
    if not isinstance(value, str):
        return EntityType.UNSET
    try:
        return EntityType(value)
    except ValueError:
        log.warning("Unknown CRM entity type %r on product, treating it as unset", value)
        return EntityType.UNSET


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def order_from_payload(payload: OrderPayload) -> Order:
    billing = payload.billing
    return Order(
        id=payload.id,
        number=payload.number,
        order_key=payload.order_key,
        billing=Billing(
            first_name=billing.first_name,
            last_name=billing.last_name,
            email=billing.email,
        ),
        items=tuple(
            OrderItem(
                item_id=item.id,
                product_id=item.product_id,
                variation_id=item.variation_id or None,
                name=item.name,
                quantity=item.quantity,
                line_total=item.total,
                line_tax=item.total_tax,
            )
            for item in payload.line_items
        ),
        shipping_total=payload.shipping_total,
        total=payload.total,
        payment_method=payload.payment_method,
        status=payload.status,
        date_paid=_as_utc(payload.date_paid_gmt),
        date_created=_as_utc(payload.date_created_gmt),
        customer_id=payload.customer_id,
        created_via=payload.created_via,
    )


def order_attributes(payload: OrderPayload) -> tuple[int | None, str | None]:
    """Campaign id and source edited on the order, if any."""

    source = payload.meta(ORDER_SOURCE_KEY)
    return _as_int(payload.meta(ORDER_CAMPAIGN_KEY)), str(source) if source else None


def _variant_settings(
    holder: WithMetaData, entity_type: EntityType, *, custom: bool
) -> VariantSettings | None:
    if not entity_type.syncs:
        return None
    key_for = custom_meta_key if custom else variation_meta_key
    values = {
        field: _as_int(holder.meta(key_for(entity_type, field)))
        for field in _VARIANT_FIELDS
        # contributions carry no membership or event fields
        if entity_type is not EntityType.CONTRIBUTION
        or field in {"financial_type_id", "price_field_value_id"}
    }
    return VariantSettings(entity_type=entity_type, **values)


def product_mapping_from_payload(
    product: ProductPayload, *, parent: ProductPayload | None = None
) -> ProductMapping:
    """Build the mapping for a product, or for a variation when ``parent`` is given."""

    taxable = product.tax_status == "taxable"
    price = product.price if product.price is not None else Decimal(0)

    if product.type == VARIATION_TYPE:
        entity_type = (
            _entity_type(parent.meta(VARIABLE_ENTITY_TYPE_KEY)) if parent else EntityType.UNSET
        )
        return ProductMapping(
            product_id=product.id,
            name=product.name,
            price=price,
            entity_type=entity_type,
            taxable=taxable,
            variant=_variant_settings(product, entity_type, custom=False),
        )

    if product.type in CUSTOM_PRODUCT_TYPES:
        entity_type = EntityType(product.type)
        return ProductMapping(
            product_id=product.id,
            name=product.name,
            price=price,
            entity_type=entity_type,
            taxable=taxable,
            custom_kind=True,
            variant=_variant_settings(product, entity_type, custom=True),
        )

    entity_type = _entity_type(product.meta(ENTITY_TYPE_KEY))
    raw_financial_type = product.meta(FINANCIAL_TYPE_KEY)
    pfv_key = PARTICIPANT_PFV_KEY if entity_type is EntityType.PARTICIPANT else CONTRIBUTION_PFV_KEY
    return ProductMapping(
        product_id=product.id,
        name=product.name,
        price=price,
        entity_type=entity_type,
        taxable=taxable,
        legacy_excluded=raw_financial_type == LEGACY_EXCLUDE,
        financial_type_id=_as_int(raw_financial_type),
        price_field_value_id=_as_int(product.meta(pfv_key)),
        membership_type_id=_as_int(product.meta(MEMBERSHIP_TYPE_KEY)),
        event_id=_as_int(product.meta(EVENT_KEY)),
        participant_role_id=_as_int(product.meta(PARTICIPANT_ROLE_KEY)),
    )
