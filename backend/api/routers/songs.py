from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlmodel import Session
from typing import List

from infra.database.connection import get_session
from app.services.song_app_service import SongAppService
from app.services.sheet_music_import_service import sheet_music_import_service, bytes_source
from api.schemas.common import MoveRequest, ImageUpload, ImageBatchUpload, ImageRef, decode_base64_image
from api.schemas.song import (
    SongCreate, SongUpdate, SongRead, SongDetail, SectionCreate, SectionUpdate, SectionRead,
)

router = APIRouter()

@router.get("/api/songs", response_model=List[SongRead])
def get_songs(sort: str = Query("created"), session: Session = Depends(get_session)):
    return SongAppService(session).get_songs(sort)

@router.post("/api/songs", response_model=SongRead)
def create_song(song: SongCreate, session: Session = Depends(get_session)):
    data = song.model_dump()
    return SongAppService(session).create_song(
        data.pop("title"), song_id=data.pop("id"), **data
    )

@router.get("/api/songs/images/import/status")
def get_import_status():
    return sheet_music_import_service.get_state()

@router.post("/api/songs/images/import/cancel")
async def cancel_import():
    await sheet_music_import_service.cancel_import()
    return {"status": "cancelled"}

@router.get("/api/songs/{song_id}", response_model=SongDetail)
def get_song(song_id: str, session: Session = Depends(get_session)):
    return SongAppService(session).get_song_detail(song_id)

@router.put("/api/songs/{song_id}", response_model=SongRead)
def update_song(song_id: str, song: SongUpdate, session: Session = Depends(get_session)):
    return SongAppService(session).update_song(song_id, song.model_dump(exclude_unset=True))

@router.delete("/api/songs/{song_id}")
def delete_song(
    song_id: str,
    detach_items: bool = Query(False),
    session: Session = Depends(get_session)
):
    SongAppService(session).delete_song(song_id, detach_items=detach_items)
    return {"ok": True}

# --- Sections ---

@router.post("/api/songs/{song_id}/sections", response_model=SectionRead)
def add_section(song_id: str, section: SectionCreate, session: Session = Depends(get_session)):
    created = SongAppService(session).add_section(
        song_id, section.section_type, section.custom_label, section.custom_name
    )
    return created.to_view()

@router.put("/api/song-sections/{section_id}", response_model=SectionRead)
def update_section(section_id: str, section: SectionUpdate, session: Session = Depends(get_session)):
    updated = SongAppService(session).update_section(section_id, section.model_dump(exclude_unset=True))
    return updated.to_view()

@router.delete("/api/song-sections/{section_id}")
def delete_section(section_id: str, session: Session = Depends(get_session)):
    SongAppService(session).delete_section(section_id)
    return {"ok": True}

@router.post("/api/songs/{song_id}/sections/move", response_model=List[SectionRead])
def move_section(song_id: str, move: MoveRequest, session: Session = Depends(get_session)):
    arranged = SongAppService(session).move_section(song_id, move.from_index, move.to_index)
    return [s.to_view() for s in arranged]

# --- Sheet music images ---

@router.post("/api/songs/{song_id}/images", response_model=ImageRef)
def add_image(song_id: str, upload: ImageUpload, session: Session = Depends(get_session)):
    service = SongAppService(session)
    image = service.add_image(song_id, upload.raw())
    return ImageRef(index=image.order, count=service.get_image_count(song_id))

@router.get("/api/songs/{song_id}/images/{index}")
def get_image(song_id: str, index: int, session: Session = Depends(get_session)):
    data = SongAppService(session).get_image(song_id, index)
    return Response(content=data, media_type="image/jpeg")

@router.delete("/api/songs/{song_id}/images/{index}")
def remove_image(song_id: str, index: int, session: Session = Depends(get_session)):
    SongAppService(session).remove_image(song_id, index)
    return {"ok": True}

@router.post("/api/songs/{song_id}/images/move")
def move_image(song_id: str, move: MoveRequest, session: Session = Depends(get_session)):
    SongAppService(session).move_image(song_id, move.from_index, move.to_index)
    return {"ok": True}

@router.post("/api/songs/{song_id}/images/import")
async def import_images(song_id: str, batch: ImageBatchUpload):
    sources = [bytes_source(decode_base64_image(data)) for data in batch.images]
    started = await sheet_music_import_service.start_import(song_id, sources)
    if not started:
        return {"status": "busy", "message": "An import is already running"}
    return {"status": "started", "total": len(sources)}
