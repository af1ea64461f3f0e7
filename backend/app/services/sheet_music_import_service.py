import asyncio
from typing import Awaitable, Callable, List, Optional
from sqlmodel import Session

from domain.errors import ValidationFailure, ValidationErrorKind
from infra.database import connection as db_connection
from app.services.background_task_service import BackgroundTaskService
from app.services.song_app_service import SongAppService
from utils.logger import get_logger

logger = get_logger(__name__)

ImageSource = Callable[[], Awaitable[bytes]]

def bytes_source(data: bytes) -> ImageSource:
    async def load() -> bytes:
        return data
    return load

class SheetMusicImportService(BackgroundTaskService):
    """
    Loads a batch of sheet music pages into a song in the background.

    Each page is loaded and encoded off the database lock; only the append
    itself runs under db_lock and commits on its own, so a cancelled batch
    keeps the pages that were already appended.
    """
    def __init__(self, session_factory: Optional[Callable] = None):
        super().__init__()
        self.session_factory = session_factory or (lambda: Session(db_connection.engine))
        self.state.update({
            "appended": 0,
            "song_id": None,
        })

    async def start_import(self, song_id: str, sources: List[ImageSource]) -> bool:
        with self.session_factory() as session:
            SongAppService(session).get_song(song_id)
        return await self.start_task(self._run_import(song_id, sources))

    async def cancel_import(self):
        await self.cancel_task()

    async def _run_import(self, song_id: str, sources: List[ImageSource]):
        total = len(sources)
        self.update_state(
            type="processing",
            total=total,
            appended=0,
            song_id=song_id,
            message=f"Importing {total} images...",
        )

        for i, source in enumerate(sources):
            self.update_state(current=i + 1)
            with self.session_factory() as session:
                service = SongAppService(session)
                try:
                    service.ensure_image_capacity(song_id)
                except ValidationFailure as e:
                    if e.kind is not ValidationErrorKind.IMAGE_LIMIT_EXCEEDED:
                        raise
                    self.update_state(
                        type="limit",
                        skipped=total - i,
                        message=e.message,
                    )
                    logger.warning(f"Import into song {song_id} stopped: {e.message}")
                    return

                try:
                    raw = await source()
                except Exception as e:
                    logger.error(f"Error loading image {i + 1} for song {song_id}: {e}")
                    self.update_state(errors=self.state["errors"] + 1)
                    continue

                try:
                    blob = await asyncio.to_thread(service.encode_image, raw)
                    service.append_image_blob(song_id, blob)
                except ValidationFailure as e:
                    logger.error(f"Error importing image {i + 1} into song {song_id}: {e.message}")
                    self.update_state(errors=self.state["errors"] + 1)
                    continue

                self.state["appended"] += 1
                self.update_state(processed=self.state["processed"] + 1)

            # yield between pages so a cancel can land
            await asyncio.sleep(0)

        self.update_state(message=f"Imported {self.state['appended']} of {total} images")
        logger.info(f"Imported {self.state['appended']} images into song {song_id}")

sheet_music_import_service = SheetMusicImportService()
