from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel
from sqlmodel import SQLModel

from domain.models.section_type import SectionType

class SongCreate(BaseModel):
    title: str
    id: Optional[str] = None
    tempo: Optional[int] = None
    key: Optional[str] = None
    time_signature: Optional[str] = None
    notes: Optional[str] = None

class SongUpdate(BaseModel):
    title: Optional[str] = None
    tempo: Optional[int] = None
    key: Optional[str] = None
    time_signature: Optional[str] = None
    notes: Optional[str] = None

class SongRead(SQLModel):
    id: str
    title: str
    tempo: Optional[int] = None
    key: Optional[str] = None
    time_signature: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class SectionCreate(BaseModel):
    section_type: SectionType = SectionType.VERSE
    custom_label: Optional[str] = None
    custom_name: Optional[str] = None

class SectionUpdate(BaseModel):
    section_type: Optional[SectionType] = None
    custom_label: Optional[str] = None
    custom_name: Optional[str] = None

class SectionRead(SQLModel):
    id: str
    section_type: str
    order: int
    custom_label: Optional[str] = None
    custom_name: Optional[str] = None
    display_label: str
    tag: str
    color: str

class SongDetail(SongRead):
    sections: List[SectionRead] = []
    image_count: int = 0
