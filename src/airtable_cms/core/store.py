"""
Keyed store abstraction populated by loaders.

The store belongs to the host: loaders only ever call :meth:`DataStore.set`.
:class:`MemoryStore` is a plain ordered implementation for scripts, the CLI,
and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Protocol, Union, runtime_checkable

# Any JSON value Airtable can return for a cell: scalars, lists, or nested objects.
FieldValue = Union[None, bool, int, float, str, List["FieldValue"], Dict[str, "FieldValue"]]


@dataclass(slots=True)
class StoreEntry:
    """
    Unit written to a :class:`DataStore`.

    Attributes
    ----------
    id:
        Key the entry is stored under. ``None`` when the record did not carry
        the configured key field.
    data:
        The record's field mapping, passed through untouched.
    """

    id: Optional[str]
    data: Mapping[str, FieldValue] = field(default_factory=dict)


@runtime_checkable
class DataStore(Protocol):
    """Minimal write-or-replace store interface required by loaders."""

    def set(self, key: Optional[str], entry: StoreEntry) -> None:
        """Store ``entry`` under ``key``, replacing any previous value."""


class MemoryStore:
    """Insertion-ordered in-memory :class:`DataStore`."""

    def __init__(self) -> None:
        self._entries: Dict[Optional[str], StoreEntry] = {}

    def set(self, key: Optional[str], entry: StoreEntry) -> None:
        self._entries[key] = entry

    def get(self, key: Optional[str]) -> Optional[StoreEntry]:
        return self._entries.get(key)

    def keys(self) -> List[Optional[str]]:
        return list(self._entries)

    def entries(self) -> List[StoreEntry]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()

    def to_dict(self) -> Dict[Optional[str], Mapping[str, FieldValue]]:
        return {key: entry.data for key, entry in self._entries.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[StoreEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        return len(self._entries)
