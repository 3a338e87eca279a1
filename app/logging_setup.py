"""
Logging configuration shared by the dashboard and its helpers.

Everything goes to stdout and to a rotating file (5 MB max, 3 backups).
Streamlit re-executes the entry script on every widget interaction, so
setup_logging() is safe to call repeatedly: handlers are attached once.
"""

import logging
import logging.handlers
import sys

from app import settings

_CONFIGURED_FLAG = "_feedback_portal_configured"


def setup_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG, False):
        return

    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(name)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    # Rotate at 5 MB, keep 3 backups
    rotating = logging.handlers.RotatingFileHandler(
        settings.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root.setLevel(level or settings.LOG_LEVEL)
    root.addHandler(stream)
    root.addHandler(rotating)

    # urllib3 logs every connection at DEBUG; keep it quiet unless asked.
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    setattr(root, _CONFIGURED_FLAG, True)
