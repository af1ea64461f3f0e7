from typing import Callable, List, Optional, Dict, Any
from datetime import datetime
from sqlmodel import Session

from domain.errors import ValidationFailure, ValidationErrorKind, NotFound, DuplicateIdentifier, SongInUse
from domain.models.section import SongSection
from domain.models.section_type import SectionType
from domain.models.song import Song, SongImage
from domain.services import ordering
from domain.services.validation import check_image_capacity
from infra.database.connection import db_lock
from infra.database.persistence import SessionPersistence
from infra.repositories.song_repository import SongRepository
from infra.repositories.setlist_repository import SetlistRepository
from utils import image_codec
from utils.logger import get_logger

logger = get_logger(__name__)

SONG_FIELDS = ("title", "tempo", "key", "time_signature", "notes")
SECTION_FIELDS = ("section_type", "custom_label", "custom_name")

def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None

def _clean_song_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {k: v for k, v in data.items() if k in SONG_FIELDS}
    if "title" in cleaned:
        cleaned["title"] = (cleaned["title"] or "").strip()
    for k in ("key", "time_signature", "notes"):
        if k in cleaned:
            cleaned[k] = blank_to_none(cleaned[k])
    return cleaned

def section_fields(section_type, custom_label, custom_name) -> Dict[str, Any]:
    """Normalized section columns; the custom name only survives on custom sections."""
    kind = SectionType.parse(section_type)
    return {
        "section_type": kind.value,
        "custom_label": blank_to_none(custom_label),
        "custom_name": blank_to_none(custom_name) if kind is SectionType.CUSTOM else None,
    }

def merged_section_fields(section, section_data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply a partial edit to a stored section. A null type keeps the current one."""
    merged = {k: getattr(section, k) for k in SECTION_FIELDS}
    merged.update({k: v for k, v in section_data.items() if k in SECTION_FIELDS})
    if merged["section_type"] is None:
        merged["section_type"] = section.section_type
    return section_fields(merged["section_type"], merged["custom_label"], merged["custom_name"])

class SongAppService:
    def __init__(
        self,
        session: Session,
        persistence: Optional[SessionPersistence] = None,
        clock: Optional[Callable[[], datetime]] = None,
        codec=image_codec,
    ):
        self.session = session
        self.clock = clock or datetime.now
        self.repository = SongRepository(session, self.clock)
        self.setlist_repository = SetlistRepository(session, self.clock)
        self.persistence = persistence or SessionPersistence(session)
        self.codec = codec

    # --- Songs ---

    def get_songs(self, sort: str = "created") -> List[Song]:
        return self.repository.find_all(sort)

    def get_song(self, song_id: str) -> Song:
        return self._require(Song, song_id)

    def get_song_detail(self, song_id: str) -> Dict[str, Any]:
        song = self.get_song(song_id)
        data = song.model_dump()
        data["sections"] = [s.to_view() for s in self.repository.get_sections(song_id)]
        data["image_count"] = self.repository.count_images(song_id)
        return data

    def create_song(self, title: str, song_id: Optional[str] = None, **fields) -> Song:
        now = self.clock()
        values = _clean_song_fields({"title": title, **fields})
        song = Song(created_at=now, updated_at=now, **values)
        if song_id:
            song.id = song_id
        song.validate()

        with db_lock:
            self._insert(song)
            self._save(song)
        logger.info(f"Created song {song.id} ({song.title})")
        return song

    def update_song(self, song_id: str, song_data: Dict[str, Any]) -> Song:
        changes = _clean_song_fields(song_data)

        def apply(song: Song):
            for key, value in changes.items():
                setattr(song, key, value)

        with db_lock:
            song = self.get_song(song_id)
            self.repository.update(song, apply)
            self._validate_or_rollback(song.validate)
            self._save(song)
        return song

    def delete_song(self, song_id: str, detach_items: bool = False) -> None:
        """
        A song still used by setlist items is only deleted with detach_items=True,
        which removes those items first and re-compacts their setlists.
        """
        from app.services.setlist_app_service import SetlistAppService

        with db_lock:
            song = self.get_song(song_id)
            items = self.setlist_repository.find_items_by_song(song_id)
            if items and not detach_items:
                raise SongInUse(song_id, len(items))

            setlists = SetlistAppService(self.session, self.persistence, self.clock)
            for item in items:
                setlists.discard_item(item)
            self.repository.delete(song)
            self._save()
        logger.info(f"Deleted song {song_id} (detached {len(items)} setlist items)")

    # --- Sections ---

    def get_sections(self, song_id: str) -> List[SongSection]:
        self.get_song(song_id)
        return self.repository.get_sections(song_id)

    def add_section(
        self,
        song_id: str,
        section_type,
        custom_label: Optional[str] = None,
        custom_name: Optional[str] = None,
    ) -> SongSection:
        with db_lock:
            self.get_song(song_id)
            siblings = self.repository.get_sections(song_id)
            section = SongSection(song_id=song_id, **section_fields(section_type, custom_label, custom_name))
            ordering.append(siblings, section)
            self._insert(section)
            self.repository.touch(section)
            self._save(section)
        return section

    def update_section(self, section_id: str, section_data: Dict[str, Any]) -> SongSection:
        with db_lock:
            section = self._require(SongSection, section_id)
            changes = merged_section_fields(section, section_data)

            def apply(s: SongSection):
                for key, value in changes.items():
                    setattr(s, key, value)

            self.repository.update(section, apply)
            self._save(section)
        return section

    def delete_section(self, section_id: str) -> None:
        with db_lock:
            section = self._require(SongSection, section_id)
            song = self.get_song(section.song_id)
            ordering.remove(self.repository.get_sections(song.id), section)
            self.repository.delete(section)
            self.repository.touch(song)
            self._save()

    def move_section(self, song_id: str, from_index: int, to_index: int) -> List[SongSection]:
        with db_lock:
            song = self.get_song(song_id)
            arranged = ordering.move(self.repository.get_sections(song_id), from_index, to_index)
            self.repository.touch(song)
            self._save(*arranged)
        return arranged

    # --- Sheet music images ---

    def get_image_count(self, song_id: str) -> int:
        self.get_song(song_id)
        return self.repository.count_images(song_id)

    def get_image(self, song_id: str, index: int) -> bytes:
        return bytes(self._image_at(song_id, index).data)

    def add_image(self, song_id: str, raw: bytes) -> SongImage:
        """Encode an uploaded image and append it to the song's pages."""
        self.ensure_image_capacity(song_id)
        return self.append_image_blob(song_id, self.encode_image(raw))

    def encode_image(self, raw: bytes) -> bytes:
        try:
            return self.codec.encode(raw)
        except image_codec.ImageCompressionError as e:
            raise ValidationFailure(ValidationErrorKind.IMAGE_COMPRESSION_FAILED) from e

    def ensure_image_capacity(self, song_id: str) -> None:
        with db_lock:
            self.get_song(song_id)
            check_image_capacity(self.repository.count_images(song_id))

    def append_image_blob(self, song_id: str, blob: bytes) -> SongImage:
        with db_lock:
            self.get_song(song_id)
            images = self.repository.get_images(song_id)
            check_image_capacity(len(images))
            image = SongImage(song_id=song_id, data=blob)
            ordering.append(images, image)
            self._insert(image)
            self.repository.touch(image)
            self._save(image)
        return image

    def remove_image(self, song_id: str, index: int) -> None:
        with db_lock:
            image = self._image_at(song_id, index)
            song = self.get_song(song_id)
            ordering.remove(self.repository.get_images(song_id), image)
            self.repository.delete(image)
            self.repository.touch(song)
            self._save()

    def move_image(self, song_id: str, from_index: int, to_index: int) -> None:
        with db_lock:
            song = self.get_song(song_id)
            ordering.move(self.repository.get_images(song_id), from_index, to_index)
            self.repository.touch(song)
            self._save()

    # --- helpers ---

    def _image_at(self, song_id: str, index: int) -> SongImage:
        self.get_song(song_id)
        images = self.repository.get_images(song_id)
        if not 0 <= index < len(images):
            raise NotFound(SongImage.__name__, f"{song_id}[{index}]")
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
