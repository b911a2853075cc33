"""Compose the CRM line items for an order."""

from __future__ import annotations

from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING, Final

from civisync.domain.errors import ConsistencyError
from civisync.domain.line_items.context import SKIP, Composition, StageContext
from civisync.domain.line_items.stages import standard_stages
from civisync.domain.model import EntityType, LineItem

if TYPE_CHECKING:
    from collections.abc import Sequence

    from civisync.config.sync import SyncSettings
    from civisync.domain.line_items.context import Stage
    from civisync.domain.lookups import CrmLookups
    from civisync.domain.model import Order, OrderItem
    from civisync.domain.ports.commerce import ProductCatalog

log = getLogger(__name__)

SHIPPING_LABEL: Final[str] = "Shipping"


class LineItemCompositor:
    """Run every order item through the fixed stage tuple and aggregate the result."""

    def __init__(
        self,
        catalog: ProductCatalog,
        lookups: CrmLookups,
        settings: SyncSettings,
        *,
        stages: Sequence[Stage] | None = None,
    ) -> None:
        self._catalog = catalog
        self._lookups = lookups
        self._settings = settings
        self._stages: tuple[Stage, ...] | None = tuple(stages) if stages is not None else None

    @property
    def stages(self) -> tuple[Stage, ...]:
        if self._stages is None:
            self._stages = standard_stages(tax_enabled=self._lookups.invoicing_enabled())
        return self._stages

    def compose(self, order: Order, contact_id: int) -> Composition | None:
        """Return the composed line items, or ``None`` when nothing in the order syncs."""

        if not order.items:
            return None

        default_price_field_id = self._lookups.default_price_field_id()
        if not default_price_field_id:
            raise ConsistencyError(
                "The CRM has no default contribution price field; line totals cannot be built"
            )

        line_items: list[LineItem] = []
        purchases: list[str] = []
        for item in order.items:
            line = self._compose_item(order, item, contact_id, default_price_field_id)
            if line is None:
                continue
            line_items.append(line)
            purchases.append(f"{line.label} x {item.quantity}")

        if not line_items:
            log.info("Order %s: no items map to CRM entities, nothing to submit", order.id)
            return None

        financial_type_id = self._aggregate_financial_type(line_items)
        shipping = self._shipping_line(order, default_price_field_id)
        if shipping is not None:
            line_items.append(shipping)

        return Composition(
            line_items=tuple(line_items),
            financial_type_id=financial_type_id,
            note=", ".join(purchases),
        )

    def _compose_item(
        self,
        order: Order,
        item: OrderItem,
        contact_id: int,
        default_price_field_id: int,
    ) -> LineItem | None:
        product = self._catalog.get_product(item.product_id, variation_id=item.variation_id)
        if product is None:
            log.warning("Order %s: product %s not found, item skipped", order.id, item.product_id)
            return None

        ctx = StageContext(
            order=order,
            item=item,
            product=product,
            contact_id=contact_id,
            default_price_field_id=default_price_field_id,
            settings=self._settings,
            lookups=self._lookups,
        )
        line = _seed_line_item(item, default_price_field_id)
        for stage in self.stages:
            result = stage(line, ctx)
            if result is SKIP:
                return None
            line = result
        return line

    def _aggregate_financial_type(self, line_items: Sequence[LineItem]) -> int | None:
        financial_types = {line.financial_type_id for line in line_items}
        if len(financial_types) == 1:
            (only,) = financial_types
            if only:
                return only
        # mixed (or unset) types fall back to the configured default
        return self._settings.default_financial_type_id

    def _shipping_line(self, order: Order, default_price_field_id: int) -> LineItem | None:
        if order.shipping_total <= 0:
            return None

        shipping_type_id = self._settings.shipping_financial_type_id
        if not shipping_type_id:
            log.warning(
                "Order %s: no shipping financial type configured, shipping of %s not recorded",
                order.id,
                order.shipping_total,
            )
            return None

        return LineItem(
            price_field_id=default_price_field_id,
            unit_price=order.shipping_total,
            qty=1,
            line_total=order.shipping_total,
            label=SHIPPING_LABEL,
            financial_type_id=shipping_type_id,
            entity_table=EntityType.CONTRIBUTION,
        )


def excluded_amount(order: Order, catalog: ProductCatalog) -> Decimal:
    """Total plus tax of the order items that never reach the CRM."""

    amount = Decimal(0)
    for item in order.items:
        product = catalog.get_product(item.product_id, variation_id=item.variation_id)
        if product is None or product.is_excluded():
            amount += item.line_total + item.line_tax
    return amount


def _seed_line_item(item: OrderItem, default_price_field_id: int) -> LineItem:
    quantity = item.quantity or 1
    return LineItem(
        price_field_id=default_price_field_id,
        unit_price=item.line_total / quantity,
        qty=item.quantity,
        line_total=item.line_total,
        label=item.name,
    )
