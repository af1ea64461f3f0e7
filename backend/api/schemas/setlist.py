from typing import Optional, List
from datetime import date, datetime
from pydantic import BaseModel
from sqlmodel import SQLModel

from api.schemas.song import SectionRead

class SetlistCreate(BaseModel):
    title: str
    id: Optional[str] = None
    performance_date: Optional[date] = None
    notes: Optional[str] = None

class SetlistUpdate(BaseModel):
    title: Optional[str] = None
    performance_date: Optional[date] = None
    notes: Optional[str] = None

class SetlistRead(SQLModel):
    id: str
    title: str
    performance_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class ItemCreate(BaseModel):
    song_id: str
    clone_structure: bool = True
    copy_images: bool = False

class ItemBulkCreate(BaseModel):
    song_ids: List[str]
    clone_structure: bool = True
    copy_images: bool = False

class ItemUpdate(BaseModel):
    override_key: Optional[str] = None
    override_tempo: Optional[int] = None
    override_time_signature: Optional[str] = None
    notes: Optional[str] = None

class ItemRead(SQLModel):
    id: str
    setlist_id: Optional[str] = None
    song_id: str
    order: int
    override_key: Optional[str] = None
    override_tempo: Optional[int] = None
    override_time_signature: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

class ItemDetail(ItemRead):
    song_title: Optional[str] = None
    display_key: Optional[str] = None
    display_tempo: Optional[int] = None
    display_time_signature: Optional[str] = None
    sections: List[SectionRead] = []
    image_count: int = 0

class SetlistDetail(SetlistRead):
    items: List[ItemDetail] = []

class SetlistCheck(BaseModel):
    valid: bool
    errors: List[dict] = []
