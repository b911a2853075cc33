"""SQLAlchemy mapping metadata for the correlation store."""

from __future__ import annotations

import logging
from functools import cache

from sqlalchemy import Column, Integer, String, Table, orm
from sqlalchemy.orm import configure_mappers

from civisync.domain.model import CorrelationMeta

log = logging.getLogger(__name__)

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

correlation_meta_table = Table(
    "correlation_meta",
    mapper_registry.metadata,
    Column("order_id", Integer, primary_key=True, autoincrement=False),
    Column("contact_id", Integer, nullable=True),
    Column("contribution_id", Integer, nullable=True, index=True),
    Column("campaign_id", Integer, nullable=True),
    Column("source", String, nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Map the correlation record onto its table."""

    log.info("Starting SQLAlchemy mappers")
    mapper_registry.map_imperatively(CorrelationMeta, correlation_meta_table)
    configure_mappers()
    return mapper_registry

