"""Ports for persisting correlation data."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from civisync.domain.model import CorrelationMeta


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CorrelationRepository(Repository[CorrelationMeta], Protocol):
    """Persistence contract for order correlation data."""

    def get(self, order_id: int) -> CorrelationMeta | None: ...
