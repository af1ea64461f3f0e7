from domain.models.section_type import SectionType
from domain.models.section import SongSection, SetlistItemSection
from domain.models.song import Song, SongImage
from domain.models.setlist import Setlist, SetlistItem, SetlistItemImage
