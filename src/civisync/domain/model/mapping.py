"""Per-product CRM mapping settings."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from civisync.domain.model.enums import EntityType


@dataclass(frozen=True, kw_only=True)
class EntitySettings:
    """The CRM fields a product (or one of its namespaces) may carry."""

    financial_type_id: int | None = None
    price_field_value_id: int | None = None
    membership_type_id: int | None = None
    event_id: int | None = None
    participant_role_id: int | None = None


@dataclass(frozen=True, kw_only=True)
class VariantSettings(EntitySettings):
    """Settings stored in the alternate namespace of variations and custom product kinds."""

    entity_type: EntityType


@dataclass(frozen=True, kw_only=True)
class ProductMapping(EntitySettings):
    product_id: int
    name: str
    price: Decimal = Decimal(0)
    entity_type: EntityType = EntityType.UNSET
    taxable: bool = False
    # older installs stored "exclude" in the financial type slot
    legacy_excluded: bool = False
    custom_kind: bool = False
    variant: VariantSettings | None = None

    def is_excluded(self) -> bool:
        if self.legacy_excluded:
            return True
        if self.custom_kind:
            return False
        return not self.entity_type.syncs
