"""
HTTP API clients and loaders.

Each submodule exposes two layers:

* ``Client`` classes wrap the low-level HTTP call.
* ``Loader`` classes implement :class:`~airtable_cms.adapters.base.Loader` on
  top of a client and write results into the host store.
"""

from .airtable import (
    AIRTABLE_API_URL,
    AirtableClient,
    AirtableLoader,
    AirtableRecord,
    RecordShapeError,
    airtable_loader,
    build_auth_headers,
    build_records_url,
    parse_records,
)
from .base import APIError, BaseAPIClient

__all__ = [
    "AIRTABLE_API_URL",
    "APIError",
    "AirtableClient",
    "AirtableLoader",
    "AirtableRecord",
    "BaseAPIClient",
    "RecordShapeError",
    "airtable_loader",
    "build_auth_headers",
    "build_records_url",
    "parse_records",
]
