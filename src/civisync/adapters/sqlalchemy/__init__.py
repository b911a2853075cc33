"""SQLAlchemy adapter package for the correlation store."""

from __future__ import annotations

from .mappings import correlation_meta_table, mapper_registry, start_mappers
from .repositories import SqlAlchemyCorrelationRepository
from .unit_of_work import (
    SqlAlchemyCorrelationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCorrelationRepository",
    "SqlAlchemyCorrelationUnitOfWork",
    "StartupError",
    "configured_engine",
    "correlation_meta_table",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
