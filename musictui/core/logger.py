import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler


def setup_logging(log_dir: str = "logs", level: str = "INFO"):
    """Configure logging for the entire application."""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    log_file = log_path / "musictui.log"

    root = logging.getLogger()
    numeric_level = getattr(logging, str(level).upper(), logging.INFO)

    # basicConfig is a no-op once handlers exist, keep level in sync anyway
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        logging.basicConfig(
            level=numeric_level,
            format="%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=[
                RotatingFileHandler(
                    log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
                ),
                # We do NOT add StreamHandler because it would mess up Urwid UI
            ],
        )
    root.setLevel(numeric_level)

    # Suppress noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("yt_dlp").setLevel(logging.CRITICAL)

    return logging.getLogger("MusicTUI")
