"""Explicit, invalidatable cache for CRM configuration lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from civisync.domain.model import PriceField, PriceFieldValue
    from civisync.domain.ports.crm import CrmGateway

log = getLogger(__name__)

INVOICING_SETTING = "invoicing"


@dataclass(slots=True)
class LookupCache:
    """Memoises loader results per key until :meth:`invalidate` is called."""

    _values: dict[Hashable, object] = field(default_factory=dict)

    def get_or_load[T](self, key: Hashable, loader: Callable[[], T]) -> T:
        if key in self._values:
            return cast("T", self._values[key])
        value = loader()
        self._values[key] = value
        return value

    def invalidate(self, key: Hashable | None = None) -> None:
        """Drop one cached entry, or all of them when ``key`` is omitted."""

        if key is None:
            self._values.clear()
            return
        self._values.pop(key, None)


@dataclass(slots=True)
class CrmLookups:
    """CRM configuration reads shared by the line item stages."""

    gateway: CrmGateway
    cache: LookupCache = field(default_factory=LookupCache)

    def default_price_field_id(self) -> int | None:
        return self.cache.get_or_load(
            ("default_price_field_id",), self.gateway.get_default_price_field_id
        )

    def price_field_value(self, price_field_value_id: int) -> PriceFieldValue | None:
        return self.cache.get_or_load(
            ("price_field_value", price_field_value_id),
            lambda: self.gateway.get_price_field_value(price_field_value_id),
        )

    def price_field(self, price_field_id: int) -> PriceField | None:
        return self.cache.get_or_load(
            ("price_field", price_field_id),
            lambda: self.gateway.get_price_field(price_field_id),
        )

    def invoicing_enabled(self) -> bool:
        def load() -> bool:
            enabled = bool(self.gateway.get_setting(INVOICING_SETTING))
            log.info("CRM invoicing enabled: %s", enabled)
            return enabled

        return self.cache.get_or_load(("setting", INVOICING_SETTING), load)
