from typing import List, Optional
from sqlmodel import select, desc, func

from domain.models.setlist import Setlist, SetlistItem, SetlistItemImage
from domain.models.section import SetlistItemSection
from domain.services.setlist_items import contains_song
from infra.repositories.entity_store import EntityStore

SETLIST_SORTS = {
    "created": desc(Setlist.created_at),
    "updated": desc(Setlist.updated_at),
    "title": Setlist.title,
    "performance_date": desc(Setlist.performance_date),
}

class SetlistRepository(EntityStore):
    def find_all(self, sort: str = "created") -> List[Setlist]:
        order_by = SETLIST_SORTS.get(sort, SETLIST_SORTS["created"])
        return self.session.exec(select(Setlist).order_by(order_by)).all()

    def find_recent(self, limit: int = 5) -> List[Setlist]:
        return self.session.exec(select(Setlist).order_by(desc(Setlist.updated_at)).limit(limit)).all()

    def get_by_id(self, setlist_id: str) -> Optional[Setlist]:
        return self.get(Setlist, setlist_id)

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(Setlist)).one()

    def get_items(self, setlist_id: str) -> List[SetlistItem]:
        query = (
            select(SetlistItem)
            .where(SetlistItem.setlist_id == setlist_id)
            .order_by(SetlistItem.order, SetlistItem.id)
        )
        return self.session.exec(query).all()

    def find_items_by_song(self, song_id: str) -> List[SetlistItem]:
        return self.session.exec(select(SetlistItem).where(SetlistItem.song_id == song_id)).all()

    def contains_song(self, setlist_id: str, song_id: str) -> bool:
        return contains_song(self.get_items(setlist_id), song_id)

    def get_item_sections(self, item_id: str) -> List[SetlistItemSection]:
        query = (
            select(SetlistItemSection)
            .where(SetlistItemSection.setlist_item_id == item_id)
            .order_by(SetlistItemSection.order, SetlistItemSection.id)
        )
        return self.session.exec(query).all()

    def get_item_images(self, item_id: str) -> List[SetlistItemImage]:
        query = (
            select(SetlistItemImage)
            .where(SetlistItemImage.setlist_item_id == item_id)
            .order_by(SetlistItemImage.order, SetlistItemImage.id)
        )
        return self.session.exec(query).all()

    def count_item_images(self, item_id: str) -> int:
        query = (
            select(func.count())
            .select_from(SetlistItemImage)
            .where(SetlistItemImage.setlist_item_id == item_id)
        )
        return self.session.exec(query).one()

    def owned_children(self, entity):
        if isinstance(entity, Setlist):
            return self.get_items(entity.id)
        if isinstance(entity, SetlistItem):
            return [*self.get_item_sections(entity.id), *self.get_item_images(entity.id)]
        return []

    def aggregate_root(self, entity):
        if isinstance(entity, Setlist):
            return entity
        if isinstance(entity, SetlistItem):
            # detached items have no aggregate to stamp
            return self.get(Setlist, entity.setlist_id) if entity.setlist_id else None
        if isinstance(entity, (SetlistItemSection, SetlistItemImage)):
            item = self.get(SetlistItem, entity.setlist_item_id)
            return self.aggregate_root(item) if item else None
        return None
