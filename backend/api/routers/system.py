from fastapi import APIRouter, Depends
from sqlmodel import Session
import duckdb

from infra.database.connection import get_session
from infra.repositories.song_repository import SongRepository
from infra.repositories.setlist_repository import SetlistRepository
from domain import constants
from domain.models.section_type import SectionType

router = APIRouter()

@router.get("/api/")
def health_check():
    return {
        "status": "ok",
        "duckdb_version": duckdb.__version__,
    }

@router.get("/api/dashboard")
def get_dashboard_stats(session: Session = Depends(get_session)):
    """
    Catalog counts plus the five most recently modified setlists.
    """
    songs = SongRepository(session)
    setlists = SetlistRepository(session)

    return {
        "total_songs": songs.count(),
        "total_setlists": setlists.count(),
        "recent_setlists": setlists.find_recent(5),
    }

@router.get("/api/options")
def get_options():
    return {
        "section_types": [t.to_dict() for t in SectionType],
        "keys": constants.KEYS,
        "time_signatures": constants.TIME_SIGNATURES,
        "max_sheet_music_images": constants.MAX_SHEET_MUSIC_IMAGES,
        "tempo_range": {"min": constants.TEMPO_MIN, "max": constants.TEMPO_MAX},
    }
