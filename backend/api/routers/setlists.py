from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlmodel import Session
from typing import List

from infra.database.connection import get_session
from app.services.setlist_app_service import SetlistAppService
from api.schemas.common import MoveRequest, ImageUpload, ImageRef
from api.schemas.song import SongRead, SectionCreate, SectionUpdate, SectionRead
from api.schemas.setlist import (
    SetlistCreate, SetlistUpdate, SetlistRead, SetlistDetail, SetlistCheck,
    ItemCreate, ItemBulkCreate, ItemUpdate, ItemRead, ItemDetail,
)

router = APIRouter()

@router.get("/api/setlists", response_model=List[SetlistRead])
def get_setlists(sort: str = Query("created"), session: Session = Depends(get_session)):
    return SetlistAppService(session).get_setlists(sort)

@router.post("/api/setlists", response_model=SetlistRead)
def create_setlist(setlist: SetlistCreate, session: Session = Depends(get_session)):
    return SetlistAppService(session).create_setlist(
        setlist.title,
        performance_date=setlist.performance_date,
        notes=setlist.notes,
        setlist_id=setlist.id,
    )

@router.get("/api/setlists/{setlist_id}", response_model=SetlistDetail)
def get_setlist(setlist_id: str, session: Session = Depends(get_session)):
    return SetlistAppService(session).get_setlist_detail(setlist_id)

@router.put("/api/setlists/{setlist_id}", response_model=SetlistRead)
def update_setlist(setlist_id: str, setlist: SetlistUpdate, session: Session = Depends(get_session)):
    return SetlistAppService(session).update_setlist(setlist_id, setlist.model_dump(exclude_unset=True))

@router.delete("/api/setlists/{setlist_id}")
def delete_setlist(setlist_id: str, session: Session = Depends(get_session)):
    SetlistAppService(session).delete_setlist(setlist_id)
    return {"ok": True}

@router.get("/api/setlists/{setlist_id}/check", response_model=SetlistCheck)
def check_setlist(setlist_id: str, session: Session = Depends(get_session)):
    return SetlistAppService(session).check_setlist(setlist_id)

@router.get("/api/setlists/{setlist_id}/available-songs", response_model=List[SongRead])
def get_available_songs(setlist_id: str, session: Session = Depends(get_session)):
    return SetlistAppService(session).get_available_songs(setlist_id)

@router.get("/api/setlists/{setlist_id}/contains/{song_id}")
def contains_song(setlist_id: str, song_id: str, session: Session = Depends(get_session)):
    return {"contains": SetlistAppService(session).contains_song(setlist_id, song_id)}

@router.post("/api/setlists/{setlist_id}/items", response_model=ItemDetail)
def add_item(setlist_id: str, item: ItemCreate, session: Session = Depends(get_session)):
    service = SetlistAppService(session)
    created = service.add_song(setlist_id, item.song_id, item.clone_structure, item.copy_images)
    return service.get_item_view(created.id)

@router.post("/api/setlists/{setlist_id}/items/bulk", response_model=List[ItemRead])
def add_items(setlist_id: str, items: ItemBulkCreate, session: Session = Depends(get_session)):
    return SetlistAppService(session).add_songs(
        setlist_id, items.song_ids, items.clone_structure, items.copy_images
    )

@router.post("/api/setlists/{setlist_id}/items/move", response_model=List[ItemRead])
def move_item(setlist_id: str, move: MoveRequest, session: Session = Depends(get_session)):
    return SetlistAppService(session).move_item(setlist_id, move.from_index, move.to_index)

# --- Setlist items ---

@router.get("/api/setlist-items/{item_id}", response_model=ItemDetail)
def get_item(item_id: str, session: Session = Depends(get_session)):
    return SetlistAppService(session).get_item_view(item_id)

@router.put("/api/setlist-items/{item_id}", response_model=ItemDetail)
def update_item(item_id: str, item: ItemUpdate, session: Session = Depends(get_session)):
    service = SetlistAppService(session)
    service.update_item(item_id, item.model_dump(exclude_unset=True))
    return service.get_item_view(item_id)

@router.delete("/api/setlist-items/{item_id}")
def remove_item(item_id: str, session: Session = Depends(get_session)):
    SetlistAppService(session).remove_item(item_id)
    return {"ok": True}

@router.post("/api/setlist-items/{item_id}/clone-sections", response_model=List[SectionRead])
def clone_sections(item_id: str, session: Session = Depends(get_session)):
    return [s.to_view() for s in SetlistAppService(session).clone_sections_from_song(item_id)]

@router.post("/api/setlist-items/{item_id}/sections", response_model=SectionRead)
def add_item_section(item_id: str, section: SectionCreate, session: Session = Depends(get_session)):
    created = SetlistAppService(session).add_item_section(
        item_id, section.section_type, section.custom_label, section.custom_name
    )
    return created.to_view()

@router.post("/api/setlist-items/{item_id}/sections/move", response_model=List[SectionRead])
def move_item_section(item_id: str, move: MoveRequest, session: Session = Depends(get_session)):
    arranged = SetlistAppService(session).move_item_section(item_id, move.from_index, move.to_index)
    return [s.to_view() for s in arranged]

@router.put("/api/setlist-item-sections/{section_id}", response_model=SectionRead)
def update_item_section(section_id: str, section: SectionUpdate, session: Session = Depends(get_session)):
    updated = SetlistAppService(session).update_item_section(section_id, section.model_dump(exclude_unset=True))
    return updated.to_view()

@router.delete("/api/setlist-item-sections/{section_id}")
def delete_item_section(section_id: str, session: Session = Depends(get_session)):
    SetlistAppService(session).delete_item_section(section_id)
    return {"ok": True}

@router.post("/api/setlist-items/{item_id}/images", response_model=ImageRef)
def add_item_image(item_id: str, upload: ImageUpload, session: Session = Depends(get_session)):
    service = SetlistAppService(session)
    image = service.add_item_image(item_id, upload.raw())
    return ImageRef(index=image.order, count=service.repository.count_item_images(item_id))

@router.post("/api/setlist-items/{item_id}/images/copy-from-song")
def copy_song_images(item_id: str, session: Session = Depends(get_session)):
    return {"count": SetlistAppService(session).copy_song_images(item_id)}

@router.get("/api/setlist-items/{item_id}/images/{index}")
def get_item_image(item_id: str, index: int, session: Session = Depends(get_session)):
    data = SetlistAppService(session).get_item_image(item_id, index)
    return Response(content=data, media_type="image/jpeg")

@router.delete("/api/setlist-items/{item_id}/images/{index}")
def remove_item_image(item_id: str, index: int, session: Session = Depends(get_session)):
    SetlistAppService(session).remove_item_image(item_id, index)
    return {"ok": True}
