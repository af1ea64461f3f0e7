from typing import Optional, Iterable
from datetime import date, datetime
import uuid
from sqlalchemy import Column, LargeBinary
from sqlmodel import Field, SQLModel


class Setlist(SQLModel, table=True):
    __tablename__ = "setlists"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str
    performance_date: Optional[date] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now, index=True)
    updated_at: datetime = Field(default_factory=datetime.now)

    def validate(self, items: Iterable["SetlistItem"] = ()) -> None:
        from domain.services.validation import validate_setlist
        validate_setlist(self, items)


class SetlistItem(SQLModel, table=True):
    """
    A setlist's attachment of one song. The override_* fields are sparse:
    None means "use the song's current value".
    """
    __tablename__ = "setlist_items"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    # None while the item is being built and not yet attached
    setlist_id: Optional[str] = Field(default=None, index=True)
    song_id: str = Field(index=True)
    order: int = Field(default=0)

    override_key: Optional[str] = None
    override_tempo: Optional[int] = None
    override_time_signature: Optional[str] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)


class SetlistItemImage(SQLModel, table=True):
    __tablename__ = "setlist_item_images"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    setlist_item_id: str = Field(index=True)
    order: int = Field(default=0)
    data: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now)
