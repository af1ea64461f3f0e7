from typing import Callable, List, Optional, Type, TypeVar
from datetime import datetime
import uuid
from sqlmodel import Session, SQLModel

from domain.errors import NotFound, DuplicateIdentifier

E = TypeVar("E", bound=SQLModel)

class EntityStore:
    """
    Identity-keyed access to catalog records.

    insert/delete/update only stage changes on the session; committing is
    the job of the persistence port. Subclasses describe ownership through
    owned_children() (cascade delete) and aggregate_root() (which record's
    updated_at a change to `entity` must bump).
    """
    def __init__(self, session: Session, clock: Optional[Callable[[], datetime]] = None):
        self.session = session
        self.clock = clock or datetime.now

    def get(self, model: Type[E], entity_id: str) -> Optional[E]:
        return self.session.get(model, entity_id)

    def require(self, model: Type[E], entity_id: str) -> E:
        entity = self.get(model, entity_id)
        if entity is None:
            raise NotFound(model.__name__, entity_id)
        return entity

    def insert(self, entity: E) -> E:
        if entity.id is None:
            entity.id = str(uuid.uuid4())
        if self.session.get(type(entity), entity.id) is not None:
            raise DuplicateIdentifier(type(entity).__name__, entity.id)
        self.session.add(entity)
        return entity

    def delete(self, entity: E) -> None:
        self._ensure_current(entity)
        for child in self.owned_children(entity):
            self.delete(child)
        self.session.delete(entity)

    def update(self, entity: E, mutator: Callable[[E], None]) -> E:
        self._ensure_current(entity)
        mutator(entity)
        self.touch(entity)
        return entity

    def touch(self, entity: SQLModel) -> None:
        """Stamp updated_at on the entity and on its aggregate root."""
        now = self.clock()
        if hasattr(entity, "updated_at"):
            entity.updated_at = now
            self.session.add(entity)
        root = self.aggregate_root(entity)
        if root is not None and root is not entity:
            root.updated_at = now
            self.session.add(root)

    def owned_children(self, entity: SQLModel) -> List[SQLModel]:
        return []

    def aggregate_root(self, entity: SQLModel) -> Optional[SQLModel]:
        return None

    def _ensure_current(self, entity: SQLModel) -> None:
        if entity.id is None or self.session.get(type(entity), entity.id) is None:
            raise NotFound(type(entity).__name__, entity.id)
