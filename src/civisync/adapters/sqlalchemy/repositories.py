"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from civisync.domain.model import CorrelationMeta

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from civisync.domain.ports.persistence import CorrelationRepository


class SqlAlchemyCorrelationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CorrelationMeta) -> None:
        self.session.add(entity)

    def get(self, order_id: int) -> CorrelationMeta | None:
        return self.session.get(CorrelationMeta, order_id)


if TYPE_CHECKING:

    def _repository_check(session: Session) -> CorrelationRepository:
        return SqlAlchemyCorrelationRepository(session)
