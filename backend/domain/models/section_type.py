from enum import Enum


class SectionType(str, Enum):
    """Structural unit of a song. The value is what gets stored."""
    VERSE = "verse"
    CHORUS = "chorus"
    PRE_CHORUS = "pre-chorus"
    BRIDGE = "bridge"
    INTRO = "intro"
    OUTRO = "outro"
    INSTRUMENTAL = "instrumental"
    CUSTOM = "custom"

    @property
    def tag(self) -> str:
        return SECTION_TAGS[self]

    @property
    def display_name(self) -> str:
        return SECTION_DISPLAY_NAMES[self]

    @property
    def color(self) -> str:
        return SECTION_COLORS[self]

    @classmethod
    def parse(cls, value) -> "SectionType":
        """Stored values that no longer parse are read as a verse."""
        try:
            return cls(value)
        except ValueError:
            return cls.VERSE

    def to_dict(self):
        return {
            "name": self.value,
            "tag": self.tag,
            "display_name": self.display_name,
            "color": self.color,
        }


SECTION_TAGS = {
    SectionType.VERSE: "V",
    SectionType.CHORUS: "C",
    SectionType.PRE_CHORUS: "P",
    SectionType.BRIDGE: "B",
    SectionType.INTRO: "I",
    SectionType.OUTRO: "O",
    SectionType.INSTRUMENTAL: "Inst",
    SectionType.CUSTOM: "Custom",
}

SECTION_DISPLAY_NAMES = {
    SectionType.VERSE: "Verse",
    SectionType.CHORUS: "Chorus",
    SectionType.PRE_CHORUS: "Pre-Chorus",
    SectionType.BRIDGE: "Bridge",
    SectionType.INTRO: "Intro",
    SectionType.OUTRO: "Outro",
    SectionType.INSTRUMENTAL: "Instrumental",
    SectionType.CUSTOM: "Custom",
}

SECTION_COLORS = {
    SectionType.VERSE: "#3478F6",
    SectionType.CHORUS: "#D9A521",
    SectionType.PRE_CHORUS: "#AF52DE",
    SectionType.BRIDGE: "#FF9500",
    SectionType.INTRO: "#34C759",
    SectionType.OUTRO: "#8E8E93",
    SectionType.INSTRUMENTAL: "#30B0C7",
    SectionType.CUSTOM: "#212121",
}
