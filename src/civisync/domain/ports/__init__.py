"""Domain port definitions for adapters."""

from __future__ import annotations

from .commerce import OrderAttributes, OrderNotes, OrderReader, ProductCatalog, Shop
from .crm import CrmGateway
from .persistence import CorrelationRepository, Repository
from .unit_of_work import (
    CorrelationRepositories,
    CorrelationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CorrelationRepositories",
    "CorrelationRepository",
    "CorrelationUnitOfWork",
    "CrmGateway",
    "OrderAttributes",
    "OrderNotes",
    "OrderReader",
    "ProductCatalog",
    "Repository",
    "RepositoryCollection",
    "Shop",
    "UnitOfWork",
]
