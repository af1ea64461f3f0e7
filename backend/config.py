import os
from pydantic_settings import BaseSettings
from pydantic import Field
import platformdirs

APP_NAME = "Musicon"
APP_AUTHOR = "MusiconDev"

class Settings(BaseSettings):
    # App Info
    APP_NAME: str = APP_NAME
    APP_AUTHOR: str = APP_AUTHOR
    ENV: str = "prod"

    # Paths
    # platformdirs by default, DB_PATH from the environment wins
    USER_DATA_DIR: str = Field(default_factory=lambda: platformdirs.user_data_dir(APP_NAME, APP_AUTHOR))
    DB_PATH: str | None = None

    # Network
    MUSICON_PORT: int = 8001
    FRONTEND_PORT: int = 1420

    # Catalog limits
    MAX_SHEET_MUSIC_IMAGES: int = 10
    TEMPO_MIN: int = 1
    TEMPO_MAX: int = 300
    IMAGE_JPEG_QUALITY: int = 80

    # Logging
    MUSICON_LOG_DIR: str | None = None
    MUSICON_LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def model_post_init(self, __context):
        if not self.DB_PATH:
            self.DB_PATH = os.path.join(self.USER_DATA_DIR, "musicon.duckdb")

        if not self.MUSICON_LOG_DIR:
            self.MUSICON_LOG_DIR = os.path.join(self.USER_DATA_DIR, "logs")

    def setup_environment(self):
        """Export the paths other modules read from the environment."""
        if self.MUSICON_LOG_DIR:
            os.environ["MUSICON_LOG_DIR"] = self.MUSICON_LOG_DIR
        os.environ["MUSICON_LOG_LEVEL"] = self.MUSICON_LOG_LEVEL

settings = Settings()
