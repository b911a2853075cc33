"""Types shared by the line item stages and the compositor."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Literal

from civisync.domain.model import LineItem

if TYPE_CHECKING:
    from civisync.config.sync import SyncSettings
    from civisync.domain.lookups import CrmLookups
    from civisync.domain.model import Order, OrderItem, ProductMapping


class Skip(Enum):
    SKIP = "skip"


SKIP: Literal[Skip.SKIP] = Skip.SKIP

type StageResult = LineItem | Literal[Skip.SKIP]


@dataclass(frozen=True, slots=True, kw_only=True)
class StageContext:
    """Everything a stage may read while rewriting one order item."""

    order: Order
    item: OrderItem
    product: ProductMapping
    contact_id: int
    default_price_field_id: int
    settings: SyncSettings
    lookups: CrmLookups

    @property
    def pay_later(self) -> bool:
        return self.settings.is_pay_later(self.order.payment_method)


type Stage = Callable[[LineItem, StageContext], StageResult]


@dataclass(frozen=True, slots=True)
class Composition:
    """Line items ready for submission plus the contribution-level financial type."""

    line_items: tuple[LineItem, ...]
    financial_type_id: int | None
    note: str = ""

    @property
    def line_total(self) -> Decimal:
        return sum((line.line_total for line in self.line_items), Decimal(0))

    @property
    def total(self) -> Decimal:
        """Amount the contribution will be charged: line totals plus their tax."""

        return sum((line.charged for line in self.line_items), Decimal(0))
