import logging
import os

QUIET_LOGGERS = ("urllib3", "requests", "watchdog")


def configure_logging(level_name=None):
    """Root stays at WARNING; only the ``tracker`` package follows TRACKER_LOG_LEVEL."""
    level_name = (level_name or os.getenv("TRACKER_LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logging.getLogger("tracker").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return level
