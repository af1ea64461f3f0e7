from typing import Callable, List, Optional, Dict, Any, Iterable
from datetime import datetime
from sqlmodel import Session

from domain.errors import (
    ValidationFailure, NotFound, DuplicateIdentifier, SongAlreadyInSetlist,
)
from domain.models.section import SetlistItemSection
from domain.models.setlist import Setlist, SetlistItem, SetlistItemImage
from domain.models.song import Song
from domain.services import ordering
from domain.services.setlist_items import (
    SetlistItemFactory, contains_song, display_key, display_tempo, display_time_signature,
)
from domain.services.validation import (
    check_image_capacity, check_tempo, check_unique_orders, setlist_failures,
)
from infra.database.connection import db_lock
from infra.database.persistence import SessionPersistence
from infra.repositories.setlist_repository import SetlistRepository
from infra.repositories.song_repository import SongRepository
from app.services.song_app_service import SongAppService, blank_to_none, merged_section_fields, section_fields
from utils import image_codec
from utils.logger import get_logger

logger = get_logger(__name__)

SETLIST_FIELDS = ("title", "performance_date", "notes")
ITEM_FIELDS = ("override_key", "override_tempo", "override_time_signature", "notes")

class SetlistAppService:
    def __init__(
        self,
        session: Session,
        persistence: Optional[SessionPersistence] = None,
        clock: Optional[Callable[[], datetime]] = None,
        codec=image_codec,
    ):
        self.session = session
        self.clock = clock or datetime.now
        self.repository = SetlistRepository(session, self.clock)
        self.song_repository = SongRepository(session, self.clock)
        self.persistence = persistence or SessionPersistence(session)
        self.factory = SetlistItemFactory()
        self.codec = codec

    # --- Setlists ---

    def get_setlists(self, sort: str = "created") -> List[Setlist]:
        return self.repository.find_all(sort)

    def get_setlist(self, setlist_id: str) -> Setlist:
        return self._require(Setlist, setlist_id)

    def get_setlist_detail(self, setlist_id: str) -> Dict[str, Any]:
        setlist = self.get_setlist(setlist_id)
        data = setlist.model_dump()
        data["items"] = [self._item_view(item) for item in self.repository.get_items(setlist_id)]
        return data

    def create_setlist(
        self,
        title: str,
        performance_date=None,
        notes: Optional[str] = None,
        setlist_id: Optional[str] = None,
    ) -> Setlist:
        now = self.clock()
        setlist = Setlist(
            title=(title or "").strip(),
            performance_date=performance_date,
            notes=blank_to_none(notes),
            created_at=now,
            updated_at=now,
        )
        if setlist_id:
            setlist.id = setlist_id
        setlist.validate()

        with db_lock:
            self._insert(setlist)
            self._save(setlist)
        logger.info(f"Created setlist {setlist.id} ({setlist.title})")
        return setlist

    def update_setlist(self, setlist_id: str, setlist_data: Dict[str, Any]) -> Setlist:
        changes = {k: v for k, v in setlist_data.items() if k in SETLIST_FIELDS}
        if "title" in changes:
            changes["title"] = (changes["title"] or "").strip()
        if "notes" in changes:
            changes["notes"] = blank_to_none(changes["notes"])

        def apply(setlist: Setlist):
            for key, value in changes.items():
                setattr(setlist, key, value)

        with db_lock:
            setlist = self.get_setlist(setlist_id)
            self.repository.update(setlist, apply)
            items = self.repository.get_items(setlist_id)
            self._validate_or_rollback(lambda: setlist.validate(items))
            self._save(setlist)
        return setlist

    def delete_setlist(self, setlist_id: str) -> None:
        with db_lock:
            setlist = self.get_setlist(setlist_id)
            self.repository.delete(setlist)
            self._save()
        logger.info(f"Deleted setlist {setlist_id}")

    def check_setlist(self, setlist_id: str) -> Dict[str, Any]:
        setlist = self.get_setlist(setlist_id)
        failures = setlist_failures(setlist, self.repository.get_items(setlist_id))
        return {"valid": not failures, "errors": [f.to_dict() for f in failures]}

    def contains_song(self, setlist_id: str, song_id: str) -> bool:
        self.get_setlist(setlist_id)
        return self.repository.contains_song(setlist_id, song_id)

    def get_available_songs(self, setlist_id: str, sort: str = "title") -> List[Song]:
        self.get_setlist(setlist_id)
        used = {item.song_id for item in self.repository.get_items(setlist_id)}
        return [song for song in self.song_repository.find_all(sort) if song.id not in used]

    # --- Items ---

    def add_song(
        self,
        setlist_id: str,
        song_id: str,
        clone_structure: bool = True,
        copy_images: bool = False,
    ) -> SetlistItem:
        return self.add_songs(setlist_id, [song_id], clone_structure, copy_images)[0]

    def add_songs(
        self,
        setlist_id: str,
        song_ids: Iterable[str],
        clone_structure: bool = True,
        copy_images: bool = False,
    ) -> List[SetlistItem]:
        """
        Attach songs in the given order after the current last item.
        The whole call is rejected if any song is already in the setlist.
        """
        song_ids = list(song_ids)
        with db_lock:
            setlist = self.get_setlist(setlist_id)
            songs = [self._require(Song, song_id) for song_id in song_ids]
            items = self.repository.get_items(setlist_id)

            seen = set()
            for song_id in song_ids:
                if song_id in seen or contains_song(items, song_id):
                    raise SongAlreadyInSetlist(setlist_id, song_id)
                seen.add(song_id)

            added = []
            for song in songs:
                item = self.factory.create_item(song, ordering.next_order(items), setlist.id)
                items = ordering.append(items, item)
                self._insert(item)
                if clone_structure:
                    for section in self.factory.clone_sections(self.song_repository.get_sections(song.id), item):
                        self._insert(section)
                if copy_images:
                    for image in self.factory.clone_images(self.song_repository.get_images(song.id), item):
                        self._insert(image)
                added.append(item)

            self._validate_or_rollback(lambda: check_unique_orders(items))
            self.repository.touch(setlist)
            self._save(*added)
        return added

    def get_item(self, item_id: str) -> SetlistItem:
        return self._require(SetlistItem, item_id)

    def get_item_view(self, item_id: str) -> Dict[str, Any]:
        return self._item_view(self.get_item(item_id))

    def update_item(self, item_id: str, item_data: Dict[str, Any]) -> SetlistItem:
        """Set or clear per-setlist overrides. None clears an override."""
        changes = {k: v for k, v in item_data.items() if k in ITEM_FIELDS}
        for k in ("override_key", "override_time_signature", "notes"):
            if k in changes:
                changes[k] = blank_to_none(changes[k])
        check_tempo(changes.get("override_tempo"))

        def apply(item: SetlistItem):
            for key, value in changes.items():
                setattr(item, key, value)

        with db_lock:
            item = self.get_item(item_id)
            self.repository.update(item, apply)
            self._save(item)
        return item

    def remove_item(self, item_id: str) -> None:
        with db_lock:
            item = self.get_item(item_id)
            self.discard_item(item)
            self._save()

    def discard_item(self, item: SetlistItem) -> None:
        """Delete an item with what it owns and re-compact its siblings. Does not save."""
        setlist = self.repository.get_by_id(item.setlist_id) if item.setlist_id else None
        if setlist is not None:
            ordering.remove(self.repository.get_items(setlist.id), item)
        self.repository.delete(item)
        if setlist is not None:
            self.repository.touch(setlist)

    def move_item(self, setlist_id: str, from_index: int, to_index: int) -> List[SetlistItem]:
        with db_lock:
            setlist = self.get_setlist(setlist_id)
            arranged = ordering.move(self.repository.get_items(setlist_id), from_index, to_index)
            self.repository.touch(setlist)
            self._save(*arranged)
        return arranged

    # --- Item sections ---

    def get_item_sections(self, item_id: str) -> List[SetlistItemSection]:
        self.get_item(item_id)
        return self.repository.get_item_sections(item_id)

    def clone_sections_from_song(self, item_id: str) -> List[SetlistItemSection]:
        """Replace the item's structure with a fresh copy of the song's current sections."""
        with db_lock:
            item = self.get_item(item_id)
            self._require(Song, item.song_id)
            for section in self.repository.get_item_sections(item_id):
                self.repository.delete(section)
            cloned = self.factory.clone_sections(self.song_repository.get_sections(item.song_id), item)
            for section in cloned:
                self._insert(section)
            self.repository.touch(item)
            self._save()
        return self.repository.get_item_sections(item_id)

    def add_item_section(
        self,
        item_id: str,
        section_type,
        custom_label: Optional[str] = None,
        custom_name: Optional[str] = None,
    ) -> SetlistItemSection:
        with db_lock:
            self.get_item(item_id)
            siblings = self.repository.get_item_sections(item_id)
            section = SetlistItemSection(
                setlist_item_id=item_id, **section_fields(section_type, custom_label, custom_name)
            )
            ordering.append(siblings, section)
            self._insert(section)
            self.repository.touch(section)
            self._save(section)
        return section

    def update_item_section(self, section_id: str, section_data: Dict[str, Any]) -> SetlistItemSection:
        with db_lock:
            section = self._require(SetlistItemSection, section_id)
            changes = merged_section_fields(section, section_data)

            def apply(s: SetlistItemSection):
                for key, value in changes.items():
                    setattr(s, key, value)

            self.repository.update(section, apply)
            self._save(section)
        return section

    def delete_item_section(self, section_id: str) -> None:
        with db_lock:
            section = self._require(SetlistItemSection, section_id)
            item = self.get_item(section.setlist_item_id)
            ordering.remove(self.repository.get_item_sections(item.id), section)
            self.repository.delete(section)
            self.repository.touch(item)
            self._save()

    def move_item_section(self, item_id: str, from_index: int, to_index: int) -> List[SetlistItemSection]:
        with db_lock:
            item = self.get_item(item_id)
            arranged = ordering.move(self.repository.get_item_sections(item_id), from_index, to_index)
            self.repository.touch(item)
            self._save(*arranged)
        return arranged

    # --- Item images (run-of-show copies) ---

    def get_item_image(self, item_id: str, index: int) -> bytes:
        return bytes(self._item_image_at(item_id, index).data)

    def copy_song_images(self, item_id: str) -> int:
        """Replace the item's images with copies of the song's current images."""
        with db_lock:
            item = self.get_item(item_id)
            self._require(Song, item.song_id)
            for image in self.repository.get_item_images(item_id):
                self.repository.delete(image)
            copies = self.factory.clone_images(self.song_repository.get_images(item.song_id), item)
            for image in copies:
                self._insert(image)
            self.repository.touch(item)
            self._save()
        return len(copies)

    def add_item_image(self, item_id: str, raw: bytes) -> SetlistItemImage:
        with db_lock:
            self.get_item(item_id)
            check_image_capacity(self.repository.count_item_images(item_id))
        blob = SongAppService(self.session, self.persistence, self.clock, self.codec).encode_image(raw)

        with db_lock:
            images = self.repository.get_item_images(item_id)
            check_image_capacity(len(images))
            image = SetlistItemImage(setlist_item_id=item_id, data=blob)
            ordering.append(images, image)
            self._insert(image)
            self.repository.touch(image)
            self._save(image)
        return image

    def remove_item_image(self, item_id: str, index: int) -> None:
        with db_lock:
            image = self._item_image_at(item_id, index)
            item = self.get_item(item_id)
            ordering.remove(self.repository.get_item_images(item_id), image)
            self.repository.delete(image)
            self.repository.touch(item)
            self._save()

    # --- helpers ---

    def _item_view(self, item: SetlistItem) -> Dict[str, Any]:
        song = self.song_repository.get_by_id(item.song_id)
        data = item.model_dump()
        data["song_title"] = song.title if song else None
        data["display_key"] = display_key(item, song)
        data["display_tempo"] = display_tempo(item, song)
        data["display_time_signature"] = display_time_signature(item, song)
        data["sections"] = [s.to_view() for s in self.repository.get_item_sections(item.id)]
        data["image_count"] = self.repository.count_item_images(item.id)
        return data

    def _item_image_at(self, item_id: str, index: int) -> SetlistItemImage:
        self.get_item(item_id)
        images = self.repository.get_item_images(item_id)
        if not 0 <= index < len(images):
            raise NotFound(SetlistItemImage.__name__, f"{item_id}[{index}]")
        return images[index]

    def _require(self, model, entity_id: str):
        try:
            return self.repository.require(model, entity_id)
        except NotFound as e:
            logger.error(str(e))
            raise

    def _insert(self, entity):
        try:
            return self.repository.insert(entity)
        except DuplicateIdentifier as e:
            logger.error(str(e))
            raise

    def _validate_or_rollback(self, check: Callable[[], None]) -> None:
        try:
            check()
        except ValidationFailure:
            self.session.rollback()
            raise

    def _save(self, *refresh) -> None:
        self.persistence.save(*refresh)
