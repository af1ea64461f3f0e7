import pytest
from sqlmodel import Session

from conftest import make_png
from domain.errors import (
    ValidationFailure, ValidationErrorKind, NotFound, DuplicateIdentifier, SongInUse,
)
from domain.models.section import SongSection
from domain.models.section_type import SectionType
from domain.models.song import Song, SongImage


def test_create_song_trims_and_stamps(song_service, clock):
    song = song_service.create_song("  Amazing Grace  ", tempo=72, key="G", notes="  ")
    assert song.title == "Amazing Grace"
    assert song.notes is None
    assert song.created_at == song.updated_at


def test_create_song_rejects_empty_title(song_service, session: Session):
    with pytest.raises(ValidationFailure) as exc:
        song_service.create_song("   ")
    assert exc.value.kind is ValidationErrorKind.EMPTY_TITLE
    assert song_service.get_songs() == []


def test_create_song_rejects_bad_tempo(song_service):
    with pytest.raises(ValidationFailure) as exc:
        song_service.create_song("Too fast", tempo=301)
    assert exc.value.kind is ValidationErrorKind.INVALID_TEMPO


def test_create_song_duplicate_id(song_service):
    song_service.create_song("First", song_id="fixed-id")
    with pytest.raises(DuplicateIdentifier):
        song_service.create_song("Second", song_id="fixed-id")


def test_get_missing_song(song_service):
    with pytest.raises(NotFound):
        song_service.get_song("missing")


def test_update_song_bumps_updated_at(song_service):
    song = song_service.create_song("Old")
    created = song.created_at

    updated = song_service.update_song(song.id, {"title": "New", "tempo": 100})
    assert updated.title == "New"
    assert updated.tempo == 100
    assert updated.created_at == created
    assert updated.updated_at > created


def test_invalid_update_leaves_song_untouched(song_service, session: Session):
    song = song_service.create_song("Keep", tempo=90)

    with pytest.raises(ValidationFailure):
        song_service.update_song(song.id, {"tempo": 0})

    stored = session.get(Song, song.id)
    assert stored.tempo == 90


def test_update_can_clear_optional_fields(song_service):
    song = song_service.create_song("Clear me", tempo=90, key="D")
    updated = song_service.update_song(song.id, {"tempo": None, "key": ""})
    assert updated.tempo is None
    assert updated.key is None


def test_sort_orders(song_service):
    b = song_service.create_song("Beta")
    a = song_service.create_song("Alpha")
    song_service.update_song(b.id, {"notes": "touched"})

    assert [s.title for s in song_service.get_songs("created")] == ["Alpha", "Beta"]
    assert [s.title for s in song_service.get_songs("updated")] == ["Beta", "Alpha"]
    assert [s.title for s in song_service.get_songs("title")] == ["Alpha", "Beta"]


def test_sections_append_and_move(song_service):
    song = song_service.create_song("Structure")
    verse = song_service.add_section(song.id, SectionType.VERSE, custom_label="1")
    chorus = song_service.add_section(song.id, "chorus")
    bridge = song_service.add_section(song.id, SectionType.BRIDGE)

    assert [s.order for s in (verse, chorus, bridge)] == [0, 1, 2]

    song_service.move_section(song.id, 2, 0)
    labels = [s.display_label for s in song_service.get_sections(song.id)]
    assert labels == ["B", "V1", "C"]
    assert [s.order for s in song_service.get_sections(song.id)] == [0, 1, 2]


def test_section_change_touches_song(song_service, session: Session):
    song = song_service.create_song("Touch")
    before = song.updated_at
    song_service.add_section(song.id, SectionType.INTRO)
    assert session.get(Song, song.id).updated_at > before


def test_delete_section_recompacts(song_service, session: Session):
    song = song_service.create_song("Compact")
    sections = [song_service.add_section(song.id, t) for t in ("intro", "verse", "chorus")]

    song_service.delete_section(sections[1].id)

    remaining = song_service.get_sections(song.id)
    assert [s.section_type for s in remaining] == ["intro", "chorus"]
    assert [s.order for s in remaining] == [0, 1]
    assert session.get(SongSection, sections[1].id) is None


def test_update_section_drops_custom_name_off_custom(song_service):
    song = song_service.create_song("Custom")
    section = song_service.add_section(song.id, SectionType.CUSTOM, custom_name="Drop")
    assert section.display_label == "Drop"

    updated = song_service.update_section(section.id, {"section_type": "chorus"})
    assert updated.custom_name is None
    assert updated.display_label == "C"


def test_add_image_encodes_jpeg(song_service, png_bytes):
    song = song_service.create_song("Sheet")
    image = song_service.add_image(song.id, png_bytes)
    assert image.order == 0
    assert song_service.get_image(song.id, 0)[:2] == b"\xff\xd8"


def test_image_limit(song_service, mocker):
    mocker.patch("domain.constants.MAX_SHEET_MUSIC_IMAGES", 2)
    song = song_service.create_song("Full")
    song_service.add_image(song.id, make_png())
    song_service.add_image(song.id, make_png(color=(0, 0, 255)))

    with pytest.raises(ValidationFailure) as exc:
        song_service.add_image(song.id, make_png())
    assert exc.value.kind is ValidationErrorKind.IMAGE_LIMIT_EXCEEDED
    assert song_service.get_image_count(song.id) == 2


def test_image_compression_failure(song_service, session: Session):
    song = song_service.create_song("Broken")
    with pytest.raises(ValidationFailure) as exc:
        song_service.add_image(song.id, b"not an image")
    assert exc.value.kind is ValidationErrorKind.IMAGE_COMPRESSION_FAILED
    assert song_service.get_image_count(song.id) == 0


def test_codec_is_injectable(session: Session, clock, mocker):
    from app.services.song_app_service import SongAppService

    codec = mocker.Mock()
    codec.encode.return_value = b"blob"
    service = SongAppService(session, clock=clock, codec=codec)
    song = service.create_song("Injected")
    service.add_image(song.id, b"raw")

    codec.encode.assert_called_once_with(b"raw")
    assert service.get_image(song.id, 0) == b"blob"


def test_remove_and_move_images(song_service, session: Session, mocker):
    codec = mocker.Mock()
    codec.encode.side_effect = lambda raw: raw
    song_service.codec = codec
    song = song_service.create_song("Pages")
    for page in (b"p1", b"p2", b"p3"):
        song_service.add_image(song.id, page)

    song_service.move_image(song.id, 0, 2)
    assert [song_service.get_image(song.id, i) for i in range(3)] == [b"p2", b"p3", b"p1"]

    song_service.remove_image(song.id, 1)
    assert [song_service.get_image(song.id, i) for i in range(2)] == [b"p2", b"p1"]

    with pytest.raises(NotFound):
        song_service.get_image(song.id, 5)


def test_delete_song_cascades(song_service, session: Session, png_bytes):
    song = song_service.create_song("Gone")
    section = song_service.add_section(song.id, SectionType.VERSE)
    image = song_service.add_image(song.id, png_bytes)

    song_service.delete_song(song.id)

    assert session.get(Song, song.id) is None
    assert session.get(SongSection, section.id) is None
    assert session.get(SongImage, image.id) is None


def test_delete_song_in_use_is_blocked(song_service, setlist_service):
    song = song_service.create_song("Busy")
    setlist = setlist_service.create_setlist("Gig")
    setlist_service.add_song(setlist.id, song.id)

    with pytest.raises(SongInUse) as exc:
        song_service.delete_song(song.id)
    assert exc.value.count == 1
    assert song_service.get_song(song.id).title == "Busy"


def test_delete_song_detaching_items(song_service, setlist_service, session: Session):
    keep = song_service.create_song("Keep")
    drop = song_service.create_song("Drop")
    setlist = setlist_service.create_setlist("Gig")
    setlist_service.add_songs(setlist.id, [drop.id, keep.id])
    before = setlist_service.get_setlist(setlist.id).updated_at

    song_service.delete_song(drop.id, detach_items=True)

    items = setlist_service.repository.get_items(setlist.id)
    assert [i.song_id for i in items] == [keep.id]
    assert [i.order for i in items] == [0]
    assert setlist_service.get_setlist(setlist.id).updated_at > before
    assert session.get(Song, drop.id) is None


def test_persist_error_is_surfaced(session: Session, clock, mocker):
    from sqlalchemy.exc import OperationalError
    from app.services.song_app_service import SongAppService
    from domain.errors import PersistError

    service = SongAppService(session, clock=clock)
    mocker.patch.object(session, "commit", side_effect=OperationalError("commit", {}, Exception("disk full")))

    with pytest.raises(PersistError):
        service.create_song("Unsaved")


def test_moved_sections_are_readable_after_save(song_service):
    song = song_service.create_song("Reorder")
    for kind in ("intro", "verse", "chorus"):
        song_service.add_section(song.id, kind)

    views = [s.to_view() for s in song_service.move_section(song.id, 0, 2)]

    assert [v["section_type"] for v in views] == ["verse", "chorus", "intro"]
    assert [v["order"] for v in views] == [0, 1, 2]
    assert all(v["id"] for v in views)


def test_update_section_with_null_type_keeps_type(song_service):
    song = song_service.create_song("Nulls")
    section = song_service.add_section(song.id, SectionType.BRIDGE)

    updated = song_service.update_section(section.id, {"section_type": None, "custom_label": "2"})
    assert updated.section_type == "bridge"
    assert updated.display_label == "B2"


def test_update_section_with_unknown_stored_type(song_service, session: Session):
    song = song_service.create_song("Legacy")
    section = song_service.add_section(song.id, SectionType.CHORUS)
    section.section_type = "solo"
    session.add(section)
    session.commit()

    updated = song_service.update_section(section.id, {"custom_label": "1"})
    assert updated.section_type == "verse"
    assert updated.display_label == "V1"
