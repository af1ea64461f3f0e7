from typing import Iterable, List, Optional

from domain.models.section import SectionBase, SetlistItemSection
from domain.models.setlist import SetlistItem, SetlistItemImage
from domain.models.song import Song, SongImage
from domain.services.ordering import sort_by_order


class SetlistItemFactory:
    """
    Builds setlist items from songs.

    An item starts with no overrides: key, tempo and time signature fall
    back to the song until the item sets its own. Structure and images are
    only copied when asked for, and the copies belong to the item.
    """

    def create_item(self, song: Song, order: int, setlist_id: Optional[str] = None) -> SetlistItem:
        return SetlistItem(setlist_id=setlist_id, song_id=song.id, order=order)

    def clone_sections(self, sections: Iterable[SectionBase], item: SetlistItem) -> List[SetlistItemSection]:
        return [SetlistItemSection.copy_of(s, item.id) for s in sort_by_order(sections)]

    def clone_images(self, images: Iterable[SongImage], item: SetlistItem) -> List[SetlistItemImage]:
        return [
            SetlistItemImage(setlist_item_id=item.id, order=image.order, data=bytes(image.data))
            for image in sort_by_order(images)
        ]


def display_key(item: SetlistItem, song: Optional[Song]) -> Optional[str]:
    if item.override_key is not None:
        return item.override_key
    return song.key if song else None


def display_tempo(item: SetlistItem, song: Optional[Song]) -> Optional[int]:
    if item.override_tempo is not None:
        return item.override_tempo
    return song.tempo if song else None


def display_time_signature(item: SetlistItem, song: Optional[Song]) -> Optional[str]:
    if item.override_time_signature is not None:
        return item.override_time_signature
    return song.time_signature if song else None


def contains_song(items: Iterable[SetlistItem], song_id: str) -> bool:
    return any(item.song_id == song_id for item in items)
