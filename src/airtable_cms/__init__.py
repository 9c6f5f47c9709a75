"""
Airtable content loader.

Load the records of an Airtable view into a host-supplied keyed store::

    from airtable_cms import LoaderContext, MemoryStore, airtable_loader

    loader = airtable_loader(table="Guestlog", base="<BASE ID>", view="Grid view", api_key="<API KEY>")
    store = MemoryStore()
    await loader.load(LoaderContext(store=store))

Each entry is keyed by the record's ``id`` field and carries the full field
mapping as its data.
"""

from .adapters import AdapterError, ConfigurationError, VerificationResult
from .adapters.api import APIError, AirtableClient, AirtableLoader, AirtableRecord, RecordShapeError, airtable_loader
from .config import AirtableLoaderOptions, KeySource, load_secrets
from .core import DataStore, LoaderContext, MemoryStore, StoreEntry

__all__ = [
    "APIError",
    "AdapterError",
    "AirtableClient",
    "AirtableLoader",
    "AirtableLoaderOptions",
    "AirtableRecord",
    "ConfigurationError",
    "DataStore",
    "KeySource",
    "LoaderContext",
    "MemoryStore",
    "RecordShapeError",
    "StoreEntry",
    "VerificationResult",
    "airtable_loader",
    "load_secrets",
]
