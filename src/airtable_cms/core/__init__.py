"""
Host-facing primitives shared by loaders: the keyed store interface, the load
context, and logging helpers.
"""

from .context import LoaderContext
from .logging import bind_tags, configure_logging, get_logger, log_progress
from .store import DataStore, FieldValue, MemoryStore, StoreEntry

__all__ = [
    "DataStore",
    "FieldValue",
    "LoaderContext",
    "MemoryStore",
    "StoreEntry",
    "bind_tags",
    "configure_logging",
    "get_logger",
    "log_progress",
]
