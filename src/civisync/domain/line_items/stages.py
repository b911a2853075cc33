"""The fixed, ordered stages that turn an order item into a CRM line item.

Each stage is a plain function ``(LineItem, StageContext) -> LineItem | SKIP``. Stages
fail closed: when a lookup they depend on is missing they hand the line item back
unchanged. Later stages rely on fields set by earlier ones, so the order of
:data:`STANDARD_STAGES` is part of the contract.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from civisync.domain.line_items.context import SKIP
from civisync.domain.model import (
    EntityType,
    MembershipParams,
    MembershipStatus,
    ParticipantParams,
    ParticipantStatus,
)

if TYPE_CHECKING:
    from civisync.domain.line_items.context import Stage, StageContext, StageResult
    from civisync.domain.model import EntitySettings, LineItem, VariantSettings

log = getLogger(__name__)

MEMBERSHIP_SOURCE: Final[str] = "Shop"


def base_mapping(line: LineItem, ctx: StageContext) -> StageResult:
    """Apply the product's stored mapping; excluded products stop here."""

    product = ctx.product
    if product.is_excluded():
        log.debug("Order %s: skipping excluded product %s", ctx.order.id, product.product_id)
        return SKIP

    return replace(
        line,
        price_field_id=ctx.default_price_field_id,
        unit_price=product.price or line.unit_price,
        qty=ctx.item.quantity,
        line_total=ctx.item.line_total,
        tax_amount=ctx.item.line_tax,
        label=product.name or line.label,
        price_field_value_id=product.price_field_value_id,
        financial_type_id=product.financial_type_id,
        entity_table=EntityType.CONTRIBUTION,
    )


def tax_augmentation(line: LineItem, ctx: StageContext) -> StageResult:
    """Set the item tax on taxable products.

    :func:`base_mapping` already copies the item tax, so in the standard tuple this
    stage leaves the line as it is. It only changes lines built by a custom stage
    tuple that does not start with :func:`base_mapping`.
    """

    if not ctx.product.taxable:
        return line
    return replace(line, tax_amount=ctx.item.line_tax)


def membership_augmentation(line: LineItem, ctx: StageContext) -> StageResult:
    return apply_membership(line, ctx, ctx.product)


def participant_augmentation(line: LineItem, ctx: StageContext) -> StageResult:
    return apply_participant(line, ctx, ctx.product)


def variant_redirection(line: LineItem, ctx: StageContext) -> StageResult:
    """Re-read the mapping from the alternate namespace and re-apply it."""

    variant = ctx.product.variant
    if variant is None or not variant.financial_type_id:
        return line

    match variant.entity_type:
        case EntityType.CONTRIBUTION:
            return _apply_contribution_variant(line, ctx, variant)
        case EntityType.MEMBERSHIP:
            return apply_membership(line, ctx, variant)
        case EntityType.PARTICIPANT:
            return apply_participant(line, ctx, variant)
        case _:
            return line


def apply_membership(line: LineItem, ctx: StageContext, source: EntitySettings) -> LineItem:
    """Turn ``line`` into a pending membership when ``source`` carries one."""

    membership_type_id = source.membership_type_id
    price_field_value_id = source.price_field_value_id or line.price_field_value_id
    if not membership_type_id or not price_field_value_id:
        return line

    price_field_value = ctx.lookups.price_field_value(price_field_value_id)
    if price_field_value is None:
        log.warning(
            "Order %s: price field value %s not found, membership not applied",
            ctx.order.id,
            price_field_value_id,
        )
        return line

    params = MembershipParams(
        membership_type_id=membership_type_id,
        contact_id=ctx.contact_id,
        source=MEMBERSHIP_SOURCE,
        status=MembershipStatus.PENDING,
    )
    return replace(
        line,
        price_field_id=price_field_value.price_field_id,
        price_field_value_id=price_field_value_id,
        financial_type_id=source.financial_type_id or line.financial_type_id,
        entity_table=EntityType.MEMBERSHIP,
        membership_type_id=membership_type_id,
        params=params,
    )


def apply_participant(line: LineItem, ctx: StageContext, source: EntitySettings) -> LineItem:
    """Turn ``line`` into an event registration when ``source`` carries one."""

    event_id = source.event_id
    role_id = source.participant_role_id
    price_field_value_id = source.price_field_value_id
    if not event_id or not role_id or not price_field_value_id:
        return line

    price_field_value = ctx.lookups.price_field_value(price_field_value_id)
    if price_field_value is None:
        return line
    price_field = ctx.lookups.price_field(price_field_value.price_field_id)
    if price_field is None:
        return line

    status = (
        ParticipantStatus.PENDING_PAY_LATER
        if ctx.pay_later
        else ParticipantStatus.PENDING_INCOMPLETE
    )
    params = ParticipantParams(
        event_id=event_id,
        contact_id=ctx.contact_id,
        role_id=role_id,
        price_set_id=price_field.price_set_id,
        fee_level=price_field_value.label,
        fee_amount=line.line_total + line.tax_amount,
        source=f"{ctx.settings.global_source}: {ctx.product.name}",
        status=status,
    )
    return replace(
        line,
        price_field_id=price_field_value.price_field_id,
        price_field_value_id=price_field_value_id,
        label=price_field_value.label,
        financial_type_id=source.financial_type_id or line.financial_type_id,
        entity_table=EntityType.PARTICIPANT,
        params=params,
    )


def _apply_contribution_variant(
    line: LineItem, ctx: StageContext, variant: VariantSettings
) -> LineItem:
    price_field_value_id = variant.price_field_value_id
    if not price_field_value_id:
        return line
    price_field_value = ctx.lookups.price_field_value(price_field_value_id)
    if price_field_value is None:
        return line
    if ctx.lookups.price_field(price_field_value.price_field_id) is None:
        return line

    return replace(
        line,
        financial_type_id=variant.financial_type_id,
        price_field_id=price_field_value.price_field_id,
        price_field_value_id=price_field_value_id,
        label=price_field_value.label,
        entity_table=EntityType.CONTRIBUTION,
    )


STANDARD_STAGES: Final[tuple[Stage, ...]] = (
    base_mapping,
    tax_augmentation,
    membership_augmentation,
    participant_augmentation,
    variant_redirection,
)


def standard_stages(*, tax_enabled: bool) -> tuple[Stage, ...]:
    """Return the stage tuple; tax is only applied when the CRM has invoicing on."""

    if tax_enabled:
        return STANDARD_STAGES
    return tuple(stage for stage in STANDARD_STAGES if stage is not tax_augmentation)
