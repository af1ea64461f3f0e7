from config import settings

MAX_SHEET_MUSIC_IMAGES = settings.MAX_SHEET_MUSIC_IMAGES
TEMPO_MIN = settings.TEMPO_MIN
TEMPO_MAX = settings.TEMPO_MAX

# Picker options
KEYS = [
    "C", "C#", "Db", "D", "D#", "Eb", "E", "Fb", "F", "F#",
    "Gb", "G", "G#", "Ab", "A", "A#", "Bb", "B", "Cb",
]
TIME_SIGNATURES = ["4/4", "3/4", "6/8", "2/4", "5/4", "7/8", "12/8"]
DEFAULT_TIME_SIGNATURE = "4/4"
