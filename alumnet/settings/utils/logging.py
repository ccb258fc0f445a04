import os
import sys
from pathlib import Path

from .performance import PERFORMANCE_API_PREFIXES

LOG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "logs"

# CI runners and containers without a writable logs/ get console-only logging
LOG_TO_FILES = not os.environ.get("GITHUB_ACTIONS") and os.environ.get("LOG_TO_FILES", "1") != "0"

PERFORMANCE_AREAS = list(PERFORMANCE_API_PREFIXES.values())


def _rotating(filename, level="INFO", formatter="file", max_mb=1, backups=10):
    return {
        "level": level,
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": formatter,
        "filename": str(LOG_DIR / filename),
        "maxBytes": max_mb * 1024 * 1024,
        "backupCount": backups,
    }


FILE_HANDLERS = {
    "info_file": _rotating("info.log"),
    "error_file": _rotating("error.log", level="ERROR", formatter="verbose"),
    "throttle_file": _rotating("throttling.log", level="WARNING"),
    "swap_events_file": _rotating("swap_events.log", max_mb=5, backups=3),
    **{
        f"{area}_performance_file": _rotating(f"{area}_performance.log", max_mb=10, backups=5)
        for area in PERFORMANCE_AREAS
    },
}


def _handlers(*names, fallback=()):
    return list(names) if LOG_TO_FILES else list(fallback)


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {"format": "%(name)-12s %(levelname)-8s %(message)s"},
        "file": {"format": "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"},
        "verbose": {
            "format": "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": sys.stdout,
        },
        **(FILE_HANDLERS if LOG_TO_FILES else {}),
    },
    "loggers": {
        "": {
            "level": "INFO",
            "handlers": ["console"] + _handlers("info_file", "error_file"),
        },
        "apps.core.throttle": {
            "handlers": _handlers("throttle_file"),
            "level": "INFO",
        },
        # lifecycle events and their notification fan-out
        "apps.notifications": {
            "handlers": _handlers("swap_events_file"),
            "level": "INFO",
        },
        **{
            f"{area}_performance": {
                "handlers": _handlers(f"{area}_performance_file", fallback=["console"]),
                "level": "INFO",
                "propagate": False,
            }
            for area in PERFORMANCE_AREAS
        },
    },
}

if LOG_TO_FILES:
    os.makedirs(LOG_DIR, exist_ok=True)
