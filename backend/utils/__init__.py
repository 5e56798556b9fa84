from .logger import setup_logging, setup_logging_from_settings, get_logger, ingest_logger
from .clock import utcnow, monotonic, ManualClock, MonotonicClock

__all__ = [
    # Logger
    "setup_logging",
    "setup_logging_from_settings",
    "get_logger",
    "ingest_logger",

    # Clock
    "utcnow",
    "monotonic",
    "ManualClock",
    "MonotonicClock",
]
