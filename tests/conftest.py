from __future__ import annotations

from typing import Any, Callable, List

import httpx
import pytest
from typer.testing import CliRunner

from airtable_cms.adapters.api import AirtableClient


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)
    monkeypatch.delenv("AIRTABLE_CMS_LOG_LEVEL", raising=False)
    monkeypatch.setenv("AIRTABLE_CMS_SECRETS_PATH", str(tmp_path / "missing-secret.toml"))


@pytest.fixture()
def two_record_payload() -> dict[str, Any]:
    return {
        "records": [
            {
                "id": "rec001",
                "createdTime": "2024-05-01T10:00:00.000Z",
                "fields": {"id": "first-post", "Name": "Ada", "Tags": ["a", "b"], "Meta": {"views": 3}},
            },
            {
                "id": "rec002",
                "createdTime": "2024-05-02T11:30:00.000Z",
                "fields": {"id": "second-post", "Name": "Grace", "Published": True},
            },
        ]
    }


@pytest.fixture()
def make_client() -> Callable[..., tuple[AirtableClient, List[httpx.Request]]]:
    """Build an AirtableClient whose requests are answered by ``handler`` and recorded."""

    def factory(handler: Callable[[httpx.Request], httpx.Response], *, api_key: str = "secret123", **kwargs: Any):
        seen: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        client = AirtableClient(api_key=api_key, transport=httpx.MockTransport(recording_handler), **kwargs)
        return client, seen

    return factory


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()

