import logging
from typing import Optional

from core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install a single stream handler on the root logger at the configured level."""
    settings = settings or get_settings()
    root = logging.getLogger()
    root.setLevel(settings.log_level)

    if any(getattr(h, "_quality_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._quality_handler = True
    root.addHandler(handler)

    if settings.log_sql_queries:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
