from typing import Optional
import uuid
from sqlmodel import Field, SQLModel

from domain.models.section_type import SectionType


class SectionBase(SQLModel):
    section_type: str = Field(default=SectionType.VERSE.value)
    order: int = Field(default=0)
    custom_label: Optional[str] = None
    custom_name: Optional[str] = None

    @property
    def kind(self) -> SectionType:
        return SectionType.parse(self.section_type)

    @property
    def display_label(self) -> str:
        kind = self.kind
        if kind is SectionType.CUSTOM and self.custom_name:
            base = self.custom_name
        else:
            base = kind.tag
        if self.custom_label:
            return f"{base}{self.custom_label}"
        return base

    def to_view(self):
        # attribute reads reload expired rows, model_dump does not
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data["display_label"] = self.display_label
        data["tag"] = self.kind.tag
        data["color"] = self.kind.color
        return data


class SongSection(SectionBase, table=True):
    __tablename__ = "song_sections"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    song_id: str = Field(index=True)


class SetlistItemSection(SectionBase, table=True):
    __tablename__ = "setlist_item_sections"
    id: Optional[str] = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    setlist_item_id: str = Field(index=True)

    @classmethod
    def copy_of(cls, section: SectionBase, setlist_item_id: str) -> "SetlistItemSection":
        """Same type/order/label/name as `section`, new identity."""
        return cls(
            setlist_item_id=setlist_item_id,
            section_type=section.section_type,
            order=section.order,
            custom_label=section.custom_label,
            custom_name=section.custom_name,
        )
