import pytest
from domain.errors import ValidationFailure, ValidationErrorKind
from domain.models.setlist import Setlist, SetlistItem
from domain.models.song import Song
from domain.services import validation


@pytest.mark.parametrize("title", ["", "   ", None])
def test_empty_title(title):
    with pytest.raises(ValidationFailure) as exc:
        validation.check_title(title)
    assert exc.value.kind is ValidationErrorKind.EMPTY_TITLE


@pytest.mark.parametrize("tempo", [1, 120, 300, None])
def test_valid_tempo(tempo):
    validation.check_tempo(tempo)


@pytest.mark.parametrize("tempo", [0, -5, 301, 1000])
def test_invalid_tempo(tempo):
    with pytest.raises(ValidationFailure) as exc:
        validation.check_tempo(tempo)
    assert exc.value.kind is ValidationErrorKind.INVALID_TEMPO
    assert "1-300" in exc.value.message


def test_image_capacity_boundary():
    validation.check_image_capacity(9, limit=10)
    with pytest.raises(ValidationFailure) as exc:
        validation.check_image_capacity(10, limit=10)
    assert exc.value.kind is ValidationErrorKind.IMAGE_LIMIT_EXCEEDED
    assert exc.value.to_dict()["code"] == "image_limit_exceeded"


def test_song_validate():
    Song(title="Amazing Grace", tempo=72).validate()
    with pytest.raises(ValidationFailure):
        Song(title=" ", tempo=72).validate()
    with pytest.raises(ValidationFailure):
        Song(title="Fast", tempo=400).validate()


def test_setlist_validate_duplicate_orders():
    setlist = Setlist(title="Sunday")
    items = [
        SetlistItem(setlist_id=setlist.id, song_id="s1", order=0),
        SetlistItem(setlist_id=setlist.id, song_id="s2", order=0),
    ]
    with pytest.raises(ValidationFailure) as exc:
        setlist.validate(items)
    assert exc.value.kind is ValidationErrorKind.DUPLICATE_ORDER


def test_setlist_failures_reports_everything():
    setlist = Setlist(title="")
    items = [
        SetlistItem(song_id="s1", order=0, override_tempo=0),
        SetlistItem(song_id="s2", order=0),
    ]
    kinds = [f.kind for f in validation.setlist_failures(setlist, items)]
    assert kinds == [
        ValidationErrorKind.EMPTY_TITLE,
        ValidationErrorKind.DUPLICATE_ORDER,
        ValidationErrorKind.INVALID_TEMPO,
    ]


def test_setlist_failures_clean():
    setlist = Setlist(title="Ok")
    items = [SetlistItem(song_id="s1", order=0), SetlistItem(song_id="s2", order=1)]
    assert validation.setlist_failures(setlist, items) == []
