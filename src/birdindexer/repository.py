"""
Entity storage used by the projection handlers.

Handlers never reach for a global session. They receive an `EntityRepository` through their
context, load entities by their string identity and hand new entities back to it. Mutations to
loaded entities are tracked by the underlying unit of work and committed by the owner of the
repository.
"""

from typing import Protocol

from sqlalchemy.orm import Session, scoped_session

from birdindexer.database.models import Base


class EntityRepository(Protocol):
    def get[T: Base](self, table: type[T], entity_id: str) -> T | None: ...
    def add(self, entity: Base) -> None: ...


class SessionRepository:
    """
    An `EntityRepository` backed by a SQLAlchemy session.

    New entities are flushed immediately, so a later `get` for the same identity in the same unit
    of work returns the same object instead of creating a duplicate.
    """

    def __init__(self, session: Session | scoped_session[Session]) -> None:
        self.session = session

    def get[T: Base](self, table: type[T], entity_id: str) -> T | None:
        return self.session.get(table, entity_id)

    def add(self, entity: Base) -> None:
        self.session.add(entity)
        self.session.flush()
