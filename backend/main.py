from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from infra.database import connection as db_connection
from api.errors import register_exception_handlers
from api.routers import (
    setlists,
    songs,
    system,
)

from config import settings
from app.services.sheet_music_import_service import sheet_music_import_service

# Lifespan event to handle startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    db_connection.init_db()  # raw DDL + Alembic stamp/upgrade
    yield
    if sheet_music_import_service.is_running:
        await sheet_music_import_service.cancel_import()
    db_connection.close_db()

app = FastAPI(title="Musicon Backend API", lifespan=lifespan)

# CORS Configuration
origins = [
    f"http://localhost:{settings.FRONTEND_PORT}",   # Dev Server
    f"http://127.0.0.1:{settings.FRONTEND_PORT}",   # Dev Server (IP)
    f"http://localhost:{settings.MUSICON_PORT}",    # Dynamic Port
    f"http://127.0.0.1:{settings.MUSICON_PORT}",    # Dynamic Port
    "tauri://localhost",                            # Tauri Production (macOS)
    "https://tauri.localhost",                      # Tauri Production (Windows/Linux)
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Root endpoint for health check
@app.get("/")
async def root():
    return {"message": "Musicon Backend API is running"}

# Include Routers
app.include_router(setlists.router)
app.include_router(songs.router)
app.include_router(system.router)
