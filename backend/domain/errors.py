from enum import Enum
from typing import Optional


class ValidationErrorKind(str, Enum):
    EMPTY_TITLE = "empty_title"
    INVALID_TEMPO = "invalid_tempo"
    DUPLICATE_ORDER = "duplicate_order"
    IMAGE_LIMIT_EXCEEDED = "image_limit_exceeded"
    IMAGE_COMPRESSION_FAILED = "image_compression_failed"


VALIDATION_MESSAGES = {
    ValidationErrorKind.EMPTY_TITLE: "Please enter a title",
    ValidationErrorKind.INVALID_TEMPO: "Please enter a valid BPM",
    ValidationErrorKind.DUPLICATE_ORDER: "Song order contains duplicates",
    ValidationErrorKind.IMAGE_LIMIT_EXCEEDED: "Too many sheet music images",
    ValidationErrorKind.IMAGE_COMPRESSION_FAILED: "Failed to process the image",
}


class DomainError(Exception):
    """Base class for every error the catalog raises on purpose."""


class ValidationFailure(DomainError):
    def __init__(self, kind: ValidationErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or VALIDATION_MESSAGES[kind]
        super().__init__(self.message)

    def to_dict(self):
        return {"code": self.kind.value, "message": self.message}


class NotFound(DomainError):
    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class DuplicateIdentifier(DomainError):
    def __init__(self, entity: str, identifier):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} already exists: {identifier}")


class PersistError(DomainError):
    """The backend failed to save; the session has been rolled back."""


class SongInUse(DomainError):
    def __init__(self, song_id: str, count: int):
        self.song_id = song_id
        self.count = count
        super().__init__(f"Song {song_id} is used by {count} setlist item(s)")


class SongAlreadyInSetlist(DomainError):
    def __init__(self, setlist_id: str, song_id: str):
        self.setlist_id = setlist_id
        self.song_id = song_id
        super().__init__(f"Song {song_id} is already in setlist {setlist_id}")
