import os
import uvicorn
import multiprocessing

# PyInstaller for multiprocessing support (Windows/macOS)
multiprocessing.freeze_support()

if __name__ == "__main__":
    # Export paths before anything else imports config-dependent modules
    from config import settings
    settings.setup_environment()

    os.makedirs(settings.USER_DATA_DIR, exist_ok=True)

    from main import app
    from utils.logger import get_logger

    logger = get_logger("server")

    port = int(os.environ.get("MUSICON_PORT", settings.MUSICON_PORT))

    logger.info(f"Starting Musicon Backend Server on port {port}...")
    logger.info(f"User Data Directory: {settings.USER_DATA_DIR}")
    uvicorn.run(app, host="127.0.0.1", port=port, reload=False, workers=1)
