from sqlmodel import Session
from sqlalchemy.exc import SQLAlchemyError

from domain.errors import PersistError
from utils.logger import get_logger

logger = get_logger(__name__)

class SessionPersistence:
    """
    Persistence port used by the application services after each mutation.
    A failed save rolls the session back and surfaces as PersistError.
    """
    def __init__(self, session: Session):
        self.session = session

    def save(self, *refresh) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(f"Save failed, changes rolled back: {e}")
            raise PersistError(str(e)) from e

        for entity in refresh:
            self.session.refresh(entity)
