import logging
import os
from logging.handlers import RotatingFileHandler

def setup_logging(log_dir: str = "logger", level: str = "INFO"):
    """Configures logging to output to both console and a rotating file."""

    # --- Create Logger Directory ---
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    log_file_path = os.path.join(log_dir, "user_api.log")
    log_level = logging.getLevelName(level.upper())

    # --- Create Logger ---
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # --- Prevent duplicate handlers ---
    if logger.hasHandlers():
        logger.handlers.clear()

    # --- Formatter ---
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # --- Console Handler ---
    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    # --- File Handler ---
    fh = RotatingFileHandler(
        log_file_path,
        maxBytes=5*1024*1024,  # 5 MB
        backupCount=3
    )
    fh.setLevel(log_level)
    fh.setFormatter(formatter)
    logger.addHandler(fh)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.info(f"Logging configured at level {level.upper()} (file: {log_file_path}).")
