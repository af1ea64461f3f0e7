from typing import Iterable, List, Optional

from domain import constants
from domain.errors import ValidationFailure, ValidationErrorKind
from domain.services.ordering import has_duplicate_orders


def check_title(title: Optional[str]) -> None:
    if not title or not title.strip():
        raise ValidationFailure(ValidationErrorKind.EMPTY_TITLE)


def check_tempo(tempo: Optional[int]) -> None:
    if tempo is None:
        return
    if not (constants.TEMPO_MIN <= tempo <= constants.TEMPO_MAX):
        raise ValidationFailure(
            ValidationErrorKind.INVALID_TEMPO,
            f"Please enter a valid BPM ({constants.TEMPO_MIN}-{constants.TEMPO_MAX})",
        )


def check_unique_orders(siblings: Iterable) -> None:
    if has_duplicate_orders(siblings):
        raise ValidationFailure(ValidationErrorKind.DUPLICATE_ORDER)


def check_image_capacity(current_count: int, limit: Optional[int] = None) -> None:
    """Raised when one more image would not fit."""
    limit = constants.MAX_SHEET_MUSIC_IMAGES if limit is None else limit
    if current_count >= limit:
        raise ValidationFailure(
            ValidationErrorKind.IMAGE_LIMIT_EXCEEDED,
            f"You can add up to {limit} sheet music images",
        )


def validate_song(song) -> None:
    check_title(song.title)
    check_tempo(song.tempo)


def validate_setlist(setlist, items: Iterable = ()) -> None:
    check_title(setlist.title)
    check_unique_orders(items)


def setlist_failures(setlist, items: Iterable = ()) -> List[ValidationFailure]:
    """Every failure present in the setlist, for reporting. Repairs nothing."""
    items = list(items)
    checks = [(check_title, setlist.title), (check_unique_orders, items)]
    checks += [(check_tempo, item.override_tempo) for item in items]

    failures = []
    for check, value in checks:
        try:
            check(value)
        except ValidationFailure as e:
            failures.append(e)
    return failures
