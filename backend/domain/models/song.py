from typing import Optional
from datetime import datetime
import uuid
from sqlalchemy import Column, LargeBinary
from sqlmodel import Field, SQLModel


class Song(SQLModel, table=True):
    """
    Reusable catalog entry. Sections and sheet music images live in
    their own tables and are owned through song_id.
    """
    __tablename__ = "songs"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str

    # musical info
    tempo: Optional[int] = None
    key: Optional[str] = None
    time_signature: Optional[str] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now, index=True)
    updated_at: datetime = Field(default_factory=datetime.now)

    def validate(self) -> None:
        from domain.services.validation import validate_song
        validate_song(self)


class SongImage(SQLModel, table=True):
    __tablename__ = "song_images"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    song_id: str = Field(index=True)
    order: int = Field(default=0)
    data: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now)
