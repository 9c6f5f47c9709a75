"""
Typer application for inspecting an Airtable view outside a host pipeline.

``load`` runs the loader against an in-memory store and prints the entries the
host would receive; ``verify`` only checks that the view is reachable. Values
not passed on the command line are read from ``.secrets/secret.toml``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import anyio
import typer

from ..adapters import AdapterError, ConfigurationError
from ..adapters.api import AirtableLoader
from ..config import AirtableLoaderOptions, SecretsBundle, load_secrets
from ..core import LoaderContext, MemoryStore, configure_logging, get_logger, log_progress

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Airtable content loader tooling.\n\n"
        "- load: fetch a view and print the store entries it produces.\n"
        "- verify: check that a view is reachable with the configured token."
    ),
)

LOGGER = get_logger(__name__)

_TABLE_OPTION = typer.Option(None, "--table", "-t", help="Table name inside the base.")
_BASE_OPTION = typer.Option(None, "--base", "-b", help="Base identifier (app...).")
_VIEW_OPTION = typer.Option(None, "--view", "-v", help="View name.")
_API_KEY_OPTION = typer.Option(None, "--api-key", help="Personal access token. Defaults to secrets or AIRTABLE_API_KEY.")
_KEY_SOURCE_OPTION = typer.Option(None, "--key-source", help="Key entries by a 'field' (default) or by the 'record' id.")
_KEY_FIELD_OPTION = typer.Option(None, "--key-field", help="Field used as the key when --key-source=field.")


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level, e.g. DEBUG or INFO."),
) -> None:
    """Configure logging and load secrets for child commands."""

    if log_level:
        configure_logging(log_level, force=True)
    ctx.obj = load_secrets()


def _require_secrets(ctx: typer.Context) -> SecretsBundle:
    secrets = ctx.obj
    if not isinstance(secrets, SecretsBundle):
        secrets = load_secrets()
        ctx.obj = secrets
    return secrets


def _resolve_options(
    ctx: typer.Context,
    *,
    table: Optional[str],
    base: Optional[str],
    view: Optional[str],
    api_key: Optional[str],
    key_source: Optional[str],
    key_field: Optional[str],
) -> AirtableLoaderOptions:
    secrets = _require_secrets(ctx)
    try:
        return secrets.airtable.to_options(
            table=table,
            base=base,
            view=view,
            api_key=api_key,
            key_source=key_source,
            key_field=key_field,
        )
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)


@app.command("load")
def load_command(
    ctx: typer.Context,
    table: Optional[str] = _TABLE_OPTION,
    base: Optional[str] = _BASE_OPTION,
    view: Optional[str] = _VIEW_OPTION,
    api_key: Optional[str] = _API_KEY_OPTION,
    key_source: Optional[str] = _KEY_SOURCE_OPTION,
    key_field: Optional[str] = _KEY_FIELD_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the entries to this JSON file instead of stdout.", dir_okay=False),
) -> None:
    """Fetch the view into an in-memory store and print the resulting entries."""

    options = _resolve_options(ctx, table=table, base=base, view=view, api_key=api_key, key_source=key_source, key_field=key_field)
    loader = AirtableLoader(options)
    store = MemoryStore()
    try:
        loader.load_sync(LoaderContext(store=store, collection=options.table))
    except AdapterError as exc:
        log_progress(LOGGER, "Load failed", status="failed", level=logging.ERROR, extra={"table": options.table, "error": str(exc)})
        typer.echo(f"Load failed: {exc}", err=True)
        raise typer.Exit(code=1)

    entries = [{"id": entry.id, "data": entry.data} for entry in store.entries()]
    rendered = json.dumps(entries, ensure_ascii=False, indent=2, default=str)
    if output:
        output.write_text(rendered + "\n", encoding="utf-8")
        typer.echo(f"Wrote {len(entries)} entries to {output}")
        return
    typer.echo(rendered)


@app.command("verify")
def verify_command(
    ctx: typer.Context,
    table: Optional[str] = _TABLE_OPTION,
    base: Optional[str] = _BASE_OPTION,
    view: Optional[str] = _VIEW_OPTION,
    api_key: Optional[str] = _API_KEY_OPTION,
    key_source: Optional[str] = _KEY_SOURCE_OPTION,
    key_field: Optional[str] = _KEY_FIELD_OPTION,
) -> None:
    """Check that the view is reachable and report how many records carry a key."""

    options = _resolve_options(ctx, table=table, base=base, view=view, api_key=api_key, key_source=key_source, key_field=key_field)
    loader = AirtableLoader(options)
    try:
        result = anyio.run(loader.verify)
    except AdapterError as exc:
        typer.echo(f"Verification failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(result.message)
    if result.details:
        typer.echo(f"Details: {json.dumps(result.details, ensure_ascii=False)}")
    if not result.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
