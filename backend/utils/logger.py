import logging
import os
from logging.handlers import RotatingFileHandler
import sys

# MUSICON_LOG_DIR is exported by server.py in packaged runs,
# otherwise logs go next to the backend sources
if "MUSICON_LOG_DIR" in os.environ:
    LOG_DIR = os.environ["MUSICON_LOG_DIR"]
else:
    BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    LOG_DIR = os.path.join(BASE_DIR, "logs")

os.makedirs(LOG_DIR, exist_ok=True)

LOG_LEVEL = logging.getLevelName(os.environ.get("MUSICON_LOG_LEVEL", "INFO").upper())
if not isinstance(LOG_LEVEL, int):
    LOG_LEVEL = logging.INFO

def get_logger(name: str):
    """
    Return a logger writing to both a rotating file and the console.
    """
    logger = logging.getLogger(name)

    # attach handlers only once per logger
    if not logger.handlers:
        logger.setLevel(LOG_LEVEL)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # 1. file handler (rotate every 10MB, keep 5)
        log_file = os.path.join(LOG_DIR, "musicon.log")
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(LOG_LEVEL)
            logger.addHandler(file_handler)
        except Exception as e:
            # unwritable log directory: keep console logging only
            print(f"Failed to set up file logging: {e}", file=sys.stderr)

        # 2. console handler
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(LOG_LEVEL)
        logger.addHandler(console_handler)

    return logger
