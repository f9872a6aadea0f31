# infrastructure/__init__.py
"""Infrastructure: logging, storage, remote mirror."""

from .logger import logger, setup_logging
from .info_store import InfoStore
from .pending_storage import PendingIntents, build_storage

__all__ = [
    "logger",
    "setup_logging",
    "InfoStore",
    "PendingIntents",
    "build_storage",
]
