from typing import List, Optional
from sqlmodel import select, desc, func

from domain.models.song import Song, SongImage
from domain.models.section import SongSection
from infra.repositories.entity_store import EntityStore

SONG_SORTS = {
    "created": desc(Song.created_at),
    "updated": desc(Song.updated_at),
    "title": Song.title,
}

class SongRepository(EntityStore):
    def find_all(self, sort: str = "created") -> List[Song]:
        order_by = SONG_SORTS.get(sort, SONG_SORTS["created"])
        return self.session.exec(select(Song).order_by(order_by)).all()

    def get_by_id(self, song_id: str) -> Optional[Song]:
        return self.get(Song, song_id)

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(Song)).one()

    def get_sections(self, song_id: str) -> List[SongSection]:
        query = (
            select(SongSection)
            .where(SongSection.song_id == song_id)
            .order_by(SongSection.order, SongSection.id)
        )
        return self.session.exec(query).all()

    def get_images(self, song_id: str) -> List[SongImage]:
        query = (
            select(SongImage)
            .where(SongImage.song_id == song_id)
            .order_by(SongImage.order, SongImage.id)
        )
        return self.session.exec(query).all()

    def count_images(self, song_id: str) -> int:
        query = select(func.count()).select_from(SongImage).where(SongImage.song_id == song_id)
        return self.session.exec(query).one()

    def owned_children(self, entity):
        if isinstance(entity, Song):
            return [*self.get_sections(entity.id), *self.get_images(entity.id)]
        return []

    def aggregate_root(self, entity):
        if isinstance(entity, Song):
            return entity
        if isinstance(entity, (SongSection, SongImage)):
            return self.get(Song, entity.song_id)
        return None
