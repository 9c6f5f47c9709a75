"""
Load context handed to loaders by the host pipeline.

A host builds one :class:`LoaderContext` per collection load. The loader only
needs the store; the logger slot lets hosts route loader output into their own
logging tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Optional

from .logging import get_logger
from .store import DataStore, MemoryStore


@dataclass(slots=True)
class LoaderContext:
    """
    Collaborators supplied by the host for a single load.

    Attributes
    ----------
    store:
        Keyed store the loader writes entries into.
    logger:
        Optional logger adapter. Loaders fall back to their own module logger
        when omitted.
    collection:
        Optional collection name, only used to label log output.
    """

    store: DataStore
    logger: Optional[LoggerAdapter] = field(default=None, repr=False)
    collection: Optional[str] = None

    @classmethod
    def with_memory_store(cls, *, collection: Optional[str] = None) -> "LoaderContext":
        """Build a context backed by a fresh :class:`MemoryStore`."""

        return cls(store=MemoryStore(), collection=collection)

    def resolve_logger(self, default_name: str) -> LoggerAdapter:
        if self.logger is not None:
            return self.logger
        return get_logger(default_name, extra={"collection": self.collection})
