"""
Airtable records loader.

Fetches the records of one table view with a single authenticated GET and
writes each record's fields into the host store.

Reference: https://airtable.com/developers/web/api/list-records

Only the first page the API returns is read. Airtable pages list responses
(100 records by default) and signals more with an ``offset`` token; that token
is ignored here, so views larger than one page are truncated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

import anyio

from ...config import AirtableLoaderOptions, KeySource
from ...core.context import LoaderContext
from ...core.logging import bind_tags, log_progress
from ...core.store import FieldValue, StoreEntry
from ..base import Loader, VerificationResult
from .base import APIError, BaseAPIClient

AIRTABLE_API_URL = "https://api.airtable.com/v0"
LOADER_NAME = "airtable-loader"


class RecordShapeError(APIError, TypeError):
    """Raised when the list-records payload does not have the expected shape."""


def build_records_url(base: str, table: str, view: str) -> str:
    # Values are interpolated verbatim; callers supply URL-safe identifiers.
    return f"{AIRTABLE_API_URL}/{base}/{table}?view={view}"


def build_auth_headers(api_key: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}


@dataclass(slots=True)
class AirtableRecord:
    """
    One row as returned by the list-records endpoint.

    ``fields`` keeps the API's key order and values exactly as decoded from
    JSON; no schema is applied.
    """

    id: Optional[str]
    created_time: Optional[str]
    fields: Dict[str, FieldValue] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "AirtableRecord":
        if not isinstance(payload, Mapping):
            raise RecordShapeError(f"Airtable record is not an object: {payload!r}")
        fields = payload.get("fields")
        if not isinstance(fields, Mapping):
            raise RecordShapeError(f"Airtable record {payload.get('id')!r} is missing a 'fields' object.")
        return cls(
            id=payload.get("id"),
            created_time=payload.get("createdTime"),
            fields=dict(fields),
        )


def parse_records(payload: Any) -> List[AirtableRecord]:
    """Validate the envelope of a list-records response and parse every record."""

    if not isinstance(payload, Mapping):
        raise RecordShapeError("Unexpected payload from Airtable list records: expected a JSON object.")
    records = payload.get("records")
    if not isinstance(records, list):
        raise RecordShapeError("Airtable list records payload missing 'records' array.")
    return [AirtableRecord.from_payload(item) for item in records]


class AirtableClient(BaseAPIClient):
    """Minimal Airtable Web API client authenticated with a bearer token."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = AIRTABLE_API_URL,
        timeout: float = 30.0,
        default_headers: Optional[MutableMapping[str, str]] = None,
        max_attempts: int = 1,
        transport: Any = None,
    ) -> None:
        headers: MutableMapping[str, str] = {"Accept": "application/json"}
        if default_headers:
            headers.update(default_headers)
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            default_headers=headers,
            max_attempts=max_attempts,
            transport=transport,
        )
        self.api_key = api_key

    async def fetch_records_payload(self, url: str, *, headers: Optional[Mapping[str, str]] = None) -> Any:
        """GET ``url`` and return the decoded JSON body. Defaults to the client's bearer header."""

        return await self._get_json(url, headers=headers or build_auth_headers(self.api_key))


class AirtableLoader(Loader):
    """
    Content loader writing one Airtable view into a host store.

    Each record becomes one :class:`StoreEntry` whose ``data`` is the record's
    full field mapping. By default the entry key is the record's own ``id``
    *field* (a column the base is expected to define), not Airtable's
    platform-assigned record id; set ``key_source=KeySource.RECORD`` on the
    options to key by the latter. A record without the key field is still
    written, under ``None``.
    """

    name = LOADER_NAME

    def __init__(self, options: AirtableLoaderOptions, *, client: Optional[AirtableClient] = None) -> None:
        self.options = options
        self.client = client or AirtableClient(api_key=options.api_key)

    def __repr__(self) -> str:
        return f"AirtableLoader(options={self.options!r})"

    def request_url(self) -> str:
        return build_records_url(self.options.base, self.options.table, self.options.view)

    def request_headers(self) -> Dict[str, str]:
        return build_auth_headers(self.options.api_key)

    def resolve_key(self, record: AirtableRecord) -> Optional[str]:
        if self.options.key_source is KeySource.RECORD:
            return record.id
        return record.fields.get(self.options.key_field)  # type: ignore[return-value]

    async def fetch(self) -> List[AirtableRecord]:
        payload = await self.client.fetch_records_payload(self.request_url(), headers=self.request_headers())
        return parse_records(payload)

    async def load(self, context: LoaderContext) -> None:
        """
        Fetch the configured view and write every record into ``context.store``.

        The whole response is parsed before the first write, so a malformed
        payload or record raises :class:`RecordShapeError` without any entry
        having been stored.
        """

        logger = bind_tags(context.resolve_logger(__name__), [self.name])
        log_progress(
            logger,
            "Fetching Airtable records",
            phase="load",
            step="fetch",
            status="running",
            level=logging.DEBUG,
            extra={"loader": self.name, "table": self.options.table, "view": self.options.view},
        )
        records = await self.fetch()

        for record in records:
            key = self.resolve_key(record)
            if key is None:
                log_progress(
                    logger,
                    "Record has no key; writing it under None",
                    phase="load",
                    step="store",
                    status="missing-key",
                    level=logging.WARNING,
                    extra={"loader": self.name, "record_id": record.id, "key_field": self.options.key_field},
                )
            context.store.set(key, StoreEntry(id=key, data=record.fields))

        log_progress(
            logger,
            "Airtable records loaded",
            phase="load",
            step="store",
            status="done",
            extra={"loader": self.name, "table": self.options.table, "records": len(records)},
        )

    def load_sync(self, context: LoaderContext) -> None:
        """Run :meth:`load` on a fresh event loop, for hosts without one."""

        anyio.run(self.load, context)

    async def verify(self) -> VerificationResult:
        try:
            records = await self.fetch()
        except APIError as exc:
            details: Dict[str, object] = {"table": self.options.table, "view": self.options.view}
            if exc.status_code is not None:
                details["status_code"] = exc.status_code
            return VerificationResult(success=False, message=f"Airtable API verification failed: {exc}", details=details)

        keyed = sum(1 for record in records if self.resolve_key(record) is not None)
        return VerificationResult(
            success=True,
            message="Airtable API reachable.",
            details={
                "table": self.options.table,
                "view": self.options.view,
                "records": len(records),
                "keyed_records": keyed,
            },
        )


def airtable_loader(
    options: Optional[AirtableLoaderOptions] = None,
    *,
    client: Optional[AirtableClient] = None,
    **values: Any,
) -> AirtableLoader:
    """
    Build an :class:`AirtableLoader`.

    Accepts either a ready :class:`AirtableLoaderOptions` or its fields as
    keyword arguments::

        loader = airtable_loader(table="Guestlog", base="appXXXX", view="Grid view", api_key="pat...")
        await loader.load(LoaderContext(store=my_store))
    """

    if options is None:
        options = AirtableLoaderOptions(**values)
    elif values:
        raise TypeError("Pass either an AirtableLoaderOptions instance or keyword values, not both.")
    return AirtableLoader(options, client=client)
